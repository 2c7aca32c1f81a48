"""
Settings for the admin client.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendKind(StrEnum):
    FILE = "file"
    FIRESTORE = "firestore"


class ClientSettings(BaseSettings):
    """
    Deployment-time client configuration.

    Built once by the caller and handed to `build_session`; nothing in the
    admin package reads the environment by itself.
    """

    model_config = SettingsConfigDict(
        env_prefix="PORTFOLIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    backend: BackendKind = Field(default=BackendKind.FILE)

    # Base URL of the gateway. Relative locations resolve against it.
    api_base: str = Field(default="http://localhost:3000")
    # Bundled static snapshots used when the live source cannot be read.
    galleries_snapshot: Optional[str] = Field(default=None)
    site_snapshot: Optional[str] = Field(default=None)
    request_timeout: float = Field(default=30.0)

    firebase_credentials: Optional[str] = Field(default=None)
    firebase_project_id: Optional[str] = Field(default=None)
    firebase_storage_bucket: Optional[str] = Field(default=None)
    firebase_init_timeout: float = Field(default=10.0)

    # Only the Firestore variant checks credentials locally.
    write_token: Optional[SecretStr] = Field(default=None)
