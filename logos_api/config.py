"""
Configuration for the Logos argument analysis backend.
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

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

    # Provider credentials and models
    OPENAI_API_KEY: str = Field(default="")
    OPENAI_MODEL: str = Field(default="gpt-4o")
    DEEPSEEK_API_KEY: str = Field(default="")
    DEEPSEEK_MODEL: str = Field(default="deepseek-chat")
    GEMINI_API_KEY: str = Field(default="")
    GEMINI_MODEL: str = Field(default="gemini-2.5-flash")
    OPENROUTER_API_KEY: str = Field(default="")

    # Aggregator allow-list and defaults (comma-separated override)
    OPENROUTER_MODELS: str = Field(default="")
    DEFAULT_AI_MODEL: str = Field(default="openrouter")
    DEFAULT_OPENROUTER_MODEL: str = Field(default="")
    OPENROUTER_REFERER: str = Field(default="http://localhost:5000")
    OPENROUTER_TITLE: str = Field(default="Logos Argument Analyzer")

    # Generation settings
    TEMPERATURE: float = Field(default=0.2)
    MAX_TOKENS: int = Field(default=4096)
    PROVIDER_TIMEOUT_SECONDS: float = Field(default=30.0)
    PROVIDER_MAX_RETRIES: int = Field(default=2)
    STRICT_EMOTIONS: bool = Field(default=True)

    # Request limits
    MAX_TEXT_LENGTH: int = Field(default=10_000)

    # Rate limiting
    RATE_LIMIT_MAX_REQUESTS: int = Field(default=5)
    RATE_LIMIT_WINDOW_SECONDS: float = Field(default=60.0)
    RATE_LIMIT_CLEANUP_SECONDS: float = Field(default=300.0)
    REDIS_URL: Optional[str] = Field(default=None)

    # CORS
    ALLOWED_ORIGINS: str = Field(default="http://localhost:3000,http://localhost:5000,http://localhost:5173")

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
logging.getLogger("google").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)

logger = logging.getLogger("logos")
