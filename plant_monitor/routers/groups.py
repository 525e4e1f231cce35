from fastapi import APIRouter

from . import api, web

API_ROUTERS: tuple[APIRouter, ...] = (api.router,)

WEB_ROUTERS: tuple[APIRouter, ...] = (web.router,)

ALL_ROUTERS: tuple[APIRouter, ...] = API_ROUTERS + WEB_ROUTERS

__all__ = ["API_ROUTERS", "WEB_ROUTERS", "ALL_ROUTERS"]
