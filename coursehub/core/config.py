"""
Configuration module - loads all env vars using pydantic-settings.
This is the SINGLE SOURCE OF TRUTH for all config values.
"""

from functools import lru_cache
from typing import Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Store backend: "memory" for dev/tests, "mongo" for deployments
    store_backend: Literal["memory", "mongo"] = "memory"

    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_db: str = "coursehub"

    # Every store call gives up after this long instead of hanging
    store_timeout_ms: int = 5000

    # Admissions rules
    max_active_applications_per_institution: int = 2
    require_published_admissions: bool = False

    # JWT (tokens are issued by the external auth service)
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # App
    log_level: str = "INFO"
    debug: bool = False

    @property
    def store_timeout_seconds(self) -> float:
        return self.store_timeout_ms / 1000

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
