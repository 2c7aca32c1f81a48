"""
Configuration and settings for the gateway.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_prefix: str = Field(default="/api")
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # galleries.json, site.json and mobile_shader.glsl live here.
    data_dir: str = Field(default="data")
    # images/, video/ and images/optimized/ live here.
    media_root: str = Field(default=".")

    # Shared write token. When unset every write is denied.
    admin_token: Optional[SecretStr] = Field(default=None)

    max_json_bytes: int = Field(default=2 * 1024 * 1024)
    max_text_bytes: int = Field(default=200 * 1024)

    # Optional S3-compatible bucket for uploads instead of media_root.
    media_bucket: Optional[str] = Field(default=None)
    media_region: Optional[str] = Field(default=None)
    media_endpoint: Optional[str] = Field(default=None)
    media_access_key_id: Optional[str] = Field(default=None)
    media_secret_access_key: Optional[SecretStr] = Field(default=None)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
