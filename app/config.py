from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """Application settings loaded from environment variables with validation."""

    model_config = SettingsConfigDict(
        env_file=(str(Path(__file__).resolve().parents[1] / ".env"), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    app_name: str = Field(default="Subscriptions API", alias="APP_NAME")
    app_env: Literal["development", "staging", "production", "test"] = Field(
        default="production",
        alias="APP_ENV",
    )
    app_debug: bool = Field(default=False, alias="APP_DEBUG")
    api_v1_prefix: str = Field(default="/api/v1", alias="API_V1_PREFIX")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    server_host: str = Field(default="0.0.0.0", alias="SERVER_HOST")
    server_port: int = Field(default=8080, ge=1, le=65535, alias="SERVER_PORT")

    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    postgres_host: str = Field(default="localhost", alias="POSTGRES_HOST")
    postgres_port: int = Field(default=5432, ge=1, le=65535, alias="POSTGRES_PORT")
    postgres_user: str = Field(default="postgres", alias="POSTGRES_USER")
    postgres_password: SecretStr = Field(default=SecretStr(""), alias="POSTGRES_PASSWORD")
    postgres_db: str = Field(default="subscriptions_db", alias="POSTGRES_DB")

    db_pool_size: int = Field(default=10, ge=1, le=100, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, ge=0, le=200, alias="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(default=30, ge=1, le=300, alias="DB_POOL_TIMEOUT")
    db_pool_recycle: int = Field(default=1800, ge=60, alias="DB_POOL_RECYCLE")
    db_connect_timeout: int = Field(default=10, ge=1, le=60, alias="DB_CONNECT_TIMEOUT")

    @field_validator("api_v1_prefix")
    @classmethod
    def validate_api_prefix(cls, value: str) -> str:
        """Ensure the API prefix starts with a slash and has no trailing slash."""
        normalized = value.strip()
        if not normalized.startswith("/"):
            raise ValueError("API_V1_PREFIX must start with '/'.")
        if len(normalized) > 1 and normalized.endswith("/"):
            normalized = normalized.rstrip("/")
        return normalized

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"LOG_LEVEL {value!r} is not a known logging level.")
        return normalized

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, value: Optional[str]) -> Optional[str]:
        """Validate database URL is a PostgreSQL or SQLite SQLAlchemy connection string."""
        if value is None or not value.strip():
            return None
        lowered = value.lower()
        if not lowered.startswith(("postgresql://", "postgresql+psycopg2://", "sqlite://")):
            raise ValueError(
                "DATABASE_URL must start with postgresql://, postgresql+psycopg2:// or sqlite://"
            )
        return value

    @property
    def sqlalchemy_url(self) -> str | URL:
        """DATABASE_URL when given, otherwise a URL assembled from the POSTGRES_* variables."""
        if self.database_url:
            return self.database_url
        return URL.create(
            "postgresql+psycopg2",
            username=self.postgres_user,
            password=self.postgres_password.get_secret_value() or None,
            host=self.postgres_host,
            port=self.postgres_port,
            database=self.postgres_db,
        )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()


settings: Settings = get_settings()
