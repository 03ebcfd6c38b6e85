"""Configuration management for Ministry-Grants."""

from typing import List

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings for Ministry-Grants."""

    # Application
    app_name: str = "Ministry-Grants"
    version: str = "1.0.0"
    debug: bool = False

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///data/ministrygrants.db")
    database_pool_size: int = Field(default=20, ge=1)
    database_max_overflow: int = Field(default=30, ge=0)
    # Seconds a SQLite connection waits on a locked database before failing
    database_busy_timeout: float = Field(default=30.0, gt=0)
    auto_create_schema: bool = Field(default=True)

    # Pagination
    default_page_size: int = Field(default=20, ge=1, le=100)
    max_page_size: int = Field(default=100, ge=1)

    # Logging
    log_level: str = Field(default="INFO")
    structured_logging: bool = Field(default=True)

    # HTTP
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="MINISTRYGRANTS_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("debug", "structured_logging", "auto_create_schema", mode="before")
    @classmethod
    def coerce_bool_from_env(cls, v):
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.strip().lower() in {"1", "true", "yes", "on"}
        return bool(v)

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
