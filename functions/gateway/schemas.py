"""
Pydantic schemas for the gateway API.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, TypeAdapter

# Whole-document payloads. Slides and the site config stay free-form objects
# so fields unknown to this service are stored untouched.
GalleriesPayload = TypeAdapter(dict[str, list[dict[str, Any]]])
SitePayload = TypeAdapter(dict[str, Any])


class UploadResponse(BaseModel):
    path: str


class OptimizeResponse(BaseModel):
    path: str
