"""
Configuration module - loads all env vars using pydantic-settings.
Every other module reads configuration through get_settings().
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # MongoDB (transactions need a replica set deployment)
    mongodb_uri: str = "mongodb://localhost:27017/?replicaSet=rs0"
    mongodb_db: str = "career_guidance"

    # JWT Auth
    jwt_secret_key: str = "change-this-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440

    # Shared secret required to self-register an admin account
    admin_registration_secret: str = "change-this-admin-secret"

    # Uploads (decoded PDF size)
    max_upload_mb: int = 25

    # App
    app_name: str = "Career Guidance API"
    log_level: str = "INFO"
    debug: bool = True
    cors_origins: list[str] = ["*"]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024

    # Pydantic v2 config
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
