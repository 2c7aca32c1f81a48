"""
FastAPI application entry point for the portfolio gateway.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from gateway.config import Settings, get_settings
from gateway.documents import JsonDocumentStore
from gateway.routes import router
from gateway.storage import build_media_sink

logger = logging.getLogger(__name__)


async def _error_body(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Error responses carry their short code as `{"error": code}`."""
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Portfolio Gateway (FastAPI)", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, _error_body)

    app.state.settings = settings
    app.state.documents = JsonDocumentStore(settings.data_dir)
    app.state.media = build_media_sink(settings)
    if settings.admin_token is None:
        logger.warning("PORTFOLIO_ADMIN_TOKEN is not set; all writes will be rejected")

    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
