from . import api, web

__all__ = [
    "api",
    "web",
]
