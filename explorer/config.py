"""Application configuration models."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_APP_LIST_URL = (
    "https://api.steampowered.com/ISteamApps/GetAppList/v2"
    "?origin=https:%2F%2Fstore.steampowered.com"
)
DEFAULT_USER_DATA_URL = "https://store.steampowered.com/dynamicstore/userdata/"


class Settings(BaseSettings):
    """Settings loaded from environment variables or a .env file."""

    app_name: str = Field(default="Steam Explorer", alias="APP_NAME")
    server_host: str = Field(default="0.0.0.0", alias="HOST")
    server_port: int = Field(default=3000, alias="PORT")

    steam_app_list_url: HttpUrl = Field(
        default=DEFAULT_APP_LIST_URL, alias="STEAM_APP_LIST_URL"
    )
    steam_user_data_url: HttpUrl = Field(
        default=DEFAULT_USER_DATA_URL, alias="STEAM_USER_DATA_URL"
    )
    steam_store_origin: str = Field(
        default="https://store.steampowered.com", alias="STEAM_STORE_ORIGIN"
    )
    steam_cookie: str | None = Field(default=None, alias="STEAM_COOKIE")

    apps_cache_seconds: int = Field(default=3_600, alias="APPS_CACHE_TTL", ge=0)
    user_data_cache_seconds: int = Field(
        default=3_600, alias="USER_DATA_CACHE_TTL", ge=0
    )
    next_appid_ceiling: int | None = Field(
        default=None, alias="NEXT_APPID_CEILING", gt=0
    )
    request_timeout_seconds: float = Field(
        default=30.0, alias="REQUEST_TIMEOUT", gt=0
    )

    database_url: str = Field(
        default="sqlite+aiosqlite:///./steam_explorer.db", alias="DATABASE_URL"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    environment: Literal["development", "production"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @field_validator("next_appid_ceiling", mode="before")
    @classmethod
    def _blank_ceiling(cls, value: object) -> object:
        """Treat blank ceiling values as "no ceiling"."""

        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("steam_store_origin", mode="after")
    @classmethod
    def _strip_origin(cls, value: str) -> str:
        return value.strip().rstrip("/")

    @field_validator("steam_cookie", mode="before")
    @classmethod
    def _strip_blank(cls, value: object) -> object:
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return value

    @field_validator("log_level", mode="after")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()  # type: ignore[call-arg]


settings = get_settings()
