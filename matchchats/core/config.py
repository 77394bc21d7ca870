"""
matchchats Core Configuration

This module manages all application configuration using Pydantic Settings.
Environment variables are loaded from .env file.
"""

from typing import Literal
from functools import lru_cache

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: Literal["development", "staging", "production"] = "development"
    debug: bool = True
    log_level: str = "INFO"

    api_prefix: str = "/api/v1"

    # Remote directory (chats / matches / users)
    directory_api_url: str = "http://localhost:8080"
    directory_timeout_seconds: float = Field(default=10.0, gt=0)

    # Redis (persisted session storage)
    redis_url: str = "redis://localhost:6379/0"
    redis_db: int = 0
    session_key: str = "user"

    # Aggregation
    # 0 means one in-flight resolution per chat with no upper bound
    resolver_max_concurrency: int = Field(default=0, ge=0)

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8081",
        "http://localhost:19006",
        "http://127.0.0.1:3000",
    ]
    cors_credentials: bool = True
    cors_methods: list[str] = ["*"]
    cors_headers: list[str] = ["*"]

    @validator("cors_origins", pre=True)
    def assemble_cors_origins(cls, v: any) -> list[str]:
        """Parse CORS origins from string, list, or JSON string"""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            import json
            if isinstance(v, str):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v]
            return v
        return ["*"]

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache for singleton pattern.
    """
    return Settings()


# Export singleton instance
settings = get_settings()
