"""Configuration management using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    # Dynamics Web API
    dynamics_url: str = Field(alias="DYNAMICS_URL")
    dynamics_token: str = Field(alias="DYNAMICS_TOKEN")
    dynamics_api_version: str = Field(default="9.2", alias="DYNAMICS_API_VERSION")

    # Campaign Monitor
    campmon_api_url: str = Field(
        default="https://api.createsend.com/api/v3.3", alias="CAMPMON_API_URL"
    )
    campmon_token_url: str = Field(
        default="https://api.createsend.com/oauth/token", alias="CAMPMON_TOKEN_URL"
    )

    http_timeout: float = Field(default=30.0, alias="HTTP_TIMEOUT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
