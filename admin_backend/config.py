"""
Configuration and settings for the admin backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from image_pipeline.animated_gif import DEFAULT_FRAME_DELAY_MS
from image_pipeline.fetch_utils import REQUEST_TIMEOUT


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False, env="USE_IN_MEMORY_BACKENDS")

    # Firebase (Firestore + Auth)
    firebase_project_id: Optional[str] = Field(default=None, env="FIREBASE_PROJECT_ID")
    google_application_credentials: Optional[str] = Field(
        default=None, env="GOOGLE_APPLICATION_CREDENTIALS"
    )
    firebase_web_api_key: Optional[str] = Field(default=None, env="FIREBASE_WEB_API_KEY")

    # Cloudinary
    cloudinary_cloud_name: Optional[str] = Field(default=None, env="CLOUDINARY_CLOUD_NAME")
    cloudinary_upload_preset: Optional[str] = Field(
        default=None, env="CLOUDINARY_UPLOAD_PRESET"
    )
    cloudinary_api_key: Optional[str] = Field(default=None, env="CLOUDINARY_API_KEY")
    cloudinary_api_secret: Optional[str] = Field(default=None, env="CLOUDINARY_API_SECRET")

    # Animated GIF pipeline
    gif_frame_delay_ms: int = Field(default=DEFAULT_FRAME_DELAY_MS, env="GIF_FRAME_DELAY_MS")
    image_request_timeout: float = Field(default=REQUEST_TIMEOUT, env="IMAGE_REQUEST_TIMEOUT")

    @property
    def firebase_configured(self) -> bool:
        return bool(self.firebase_project_id or self.google_application_credentials)

    @property
    def cloudinary_configured(self) -> bool:
        return bool(self.cloudinary_cloud_name and self.cloudinary_upload_preset)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
