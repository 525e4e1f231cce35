from functools import lru_cache
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_PLANT_TYPES = ["Tomato", "Basil", "Cactus", "Orchid", "Fern"]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = "Smart Plant Monitor"
    environment: str = "dev"
    log_level: str = "INFO"
    # Set only when served behind a reverse proxy, e.g. "127.0.0.1" or "*".
    forwarded_allow_ips: str | None = None

    device_base_url: str = "http://192.168.0.105"
    poll_interval_seconds: float = 3.0
    request_timeout_seconds: float = 5.0
    history_size: int = 21
    watering_reset_seconds: float = 3.0
    reconcile_buzzer_state: bool = False

    advisory_endpoint: str = "https://api.anthropic.com/v1/messages"
    advisory_api_key: str = ""
    advisory_model: str = "claude-sonnet-4-20250514"
    advisory_max_tokens: int = 1000
    advisory_api_version: str = "2023-06-01"
    advisory_timeout_seconds: float = 30.0

    plant_types: Annotated[list[str], NoDecode] = Field(default_factory=lambda: list(DEFAULT_PLANT_TYPES))
    default_plant_type: str = "Tomato"

    model_config = SettingsConfigDict(env_prefix="PLANT_MONITOR_", env_file=".env", extra="ignore")

    @field_validator("plant_types", mode="before")
    @classmethod
    def _split_plant_types(cls, value: str | list[str] | None) -> list[str]:
        if value is None or value == "":
            return list(DEFAULT_PLANT_TYPES)
        if isinstance(value, list):
            return value
        return [item.strip() for item in value.split(",") if item.strip()]

    @field_validator("device_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    return Settings()
