"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    `environment` defaults to the `ENVIRONMENT` variable, or `local` when it is
    unset. The `local` environment turns on `debug_errors`, which appends
    exception type names to user-facing edit errors, so deployments must set
    `ENVIRONMENT` to something else.
    """

    openai_api_key: str
    openai_image_model: str = "gpt-image-1"
    openai_image_size: str = "auto"
    max_upload_bytes: int = 20 * 1024 * 1024
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def debug_errors(self) -> bool:
        """Expose exception types in user-facing errors when running locally."""
        return self.environment == "local"
