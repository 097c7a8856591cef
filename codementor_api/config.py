"""
Configuration for the codementor API.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)
    DEBUG: bool = Field(default=False)
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    # Review engine
    REVIEW_PROFILE: Literal["full", "minimal"] = Field(default="full")
    MAX_CODE_LENGTH: int = Field(default=50_000)

    # CORS
    ALLOWED_ORIGINS: str = Field(default="http://localhost:3000,http://localhost:5173")

    # History (in-memory when REDIS_URL is unset)
    REDIS_URL: Optional[str] = Field(default=None)
    REDIS_TIMEOUT_SECONDS: float = Field(default=2.0)
    HISTORY_MAX_RECORDS: int = Field(default=100)

    @property
    def cors_origins(self) -> list[str]:
        origins = [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]
        if "*" in origins:
            return ["*"]
        return origins

    @property
    def redis_enabled(self) -> bool:
        return bool(self.REDIS_URL)


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


# Logging setup
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("redis").setLevel(logging.WARNING)

logger = logging.getLogger("codementor")
