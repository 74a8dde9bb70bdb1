"""
Central configuration for the LLM call log API.

This module defines a single `settings` object (Pydantic BaseSettings) that reads
configuration from environment variables and a local `.env` file.

Two storage backends are supported:
- sqlite: a local database file (default, zero setup)
- postgres: a networked server reached with DB_HOST / DB_PORT / credentials
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and optional `.env`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # -----------------------
    # Runtime
    # -----------------------
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (e.g., INFO, DEBUG)")
    HOST: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to")
    PORT: int = Field(default=8080, ge=1, le=65535, description="Port the HTTP server listens on")

    # -----------------------
    # API / CORS
    # -----------------------
    CORS_ALLOW_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Allowed CORS origins (default: any origin)",
    )

    # -----------------------
    # Database
    # -----------------------
    DB_BACKEND: Literal["sqlite", "postgres"] = Field(
        default="sqlite",
        description="Which storage implementation to use",
    )
    SQLITE_PATH: str = Field(
        default="./data/kagami.db",
        description="Path to the SQLite database file (sqlite backend)",
    )

    DB_HOST: Optional[str] = Field(default=None, description="PostgreSQL host")
    DB_PORT: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    DB_NAME: Optional[str] = Field(default=None, description="PostgreSQL database name")
    DB_USER: Optional[str] = Field(default=None, description="PostgreSQL user")
    DB_PASSWORD: Optional[str] = Field(default=None, description="PostgreSQL password")

    # Pool: at most DB_POOL_SIZE + DB_MAX_OVERFLOW open connections,
    # DB_POOL_SIZE of them kept idle between requests.
    DB_POOL_SIZE: int = Field(default=5, ge=1, description="Idle connections kept in the pool")
    DB_MAX_OVERFLOW: int = Field(default=5, ge=0, description="Extra connections allowed above the pool size")
    DB_POOL_RECYCLE: int = Field(default=3600, ge=1, description="Maximum connection lifetime in seconds")
    DB_CONNECT_TIMEOUT: int = Field(default=10, ge=1, description="Connect timeout in seconds")

    DB_AUTO_MIGRATE: bool = Field(
        default=False,
        description="Create the llm_call_logs table at startup if it does not exist",
    )

    # -----------------------
    # Validators / normalizers
    # -----------------------
    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @field_validator("DB_BACKEND", mode="before")
    @classmethod
    def _normalize_backend(cls, v: str) -> str:
        return (v or "sqlite").strip().lower()

    @field_validator("CORS_ALLOW_ORIGINS")
    @classmethod
    def _clean_cors_origins(cls, v: List[str]) -> List[str]:
        cleaned = []
        for origin in v or []:
            o = (origin or "").strip()
            if o:
                cleaned.append(o)
        return cleaned

    @model_validator(mode="after")
    def _require_postgres_credentials(self) -> "Settings":
        if self.DB_BACKEND != "postgres":
            return self
        missing = [
            name
            for name in ("DB_HOST", "DB_NAME", "DB_USER", "DB_PASSWORD")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                "postgres backend requires environment variables: " + ", ".join(missing)
            )
        return self

    @property
    def max_connections(self) -> int:
        """Upper bound on concurrently open storage connections."""
        return self.DB_POOL_SIZE + self.DB_MAX_OVERFLOW


# Singleton instance imported across the codebase.
settings = Settings()
