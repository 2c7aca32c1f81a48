"""
Dependency wiring for the FastAPI app.

Collaborators are created once in `create_app` and kept on `app.state`;
routes reach them through these providers.
"""

from __future__ import annotations

import logging
import secrets
from typing import Optional

from fastapi import HTTPException, Query, Request

from gateway.config import Settings
from gateway.documents import JsonDocumentStore
from gateway.storage import MediaSink

logger = logging.getLogger(__name__)


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_document_store(request: Request) -> JsonDocumentStore:
    return request.app.state.documents


def get_media_sink(request: Request) -> MediaSink:
    return request.app.state.media


def token_matches(presented: Optional[str], expected: Optional[str]) -> bool:
    if not presented or not expected:
        return False
    return secrets.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))


def require_token(
    request: Request,
    token: Optional[str] = Query(None),
) -> None:
    """
    Rejects the request with 401 unless `?token=` equals the admin token.

    Write routes declare no body parameters, so this check runs before any
    part of the request body is read.
    """
    settings: Settings = request.app.state.settings
    expected = settings.admin_token.get_secret_value() if settings.admin_token else None
    if not token_matches(token, expected):
        logger.warning(f"Rejected {request.method} {request.url.path}: invalid token")
        raise HTTPException(status_code=401, detail="invalid-token")
