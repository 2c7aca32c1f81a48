"""
HTTP routes for the portfolio content API.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import TypeAdapter, ValidationError
from starlette.datastructures import UploadFile

from gateway import optimize as optimizer
from gateway.config import Settings
from gateway.dependencies import (
    get_document_store,
    get_media_sink,
    get_settings_dep,
    require_token,
)
from gateway.documents import JsonDocumentStore
from gateway.schemas import (
    GalleriesPayload,
    OptimizeResponse,
    SitePayload,
    UploadResponse,
)
from gateway.storage import IMAGES_DIR, MediaSink, MediaSinkError

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_limited_body(request: Request, limit: int) -> bytes:
    """
    Reads the request body, giving up with 413 as soon as it passes `limit`.

    A declared Content-Length over the limit is rejected before any of the
    body is read.
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise HTTPException(status_code=413, detail="payload-too-large")
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise HTTPException(status_code=413, detail="payload-too-large")
    return bytes(body)


def _parse_document(body: bytes, adapter: TypeAdapter):
    try:
        return adapter.validate_json(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="invalid-body")


@router.get("/galleries")
def list_galleries(store: JsonDocumentStore = Depends(get_document_store)):
    try:
        return store.read_galleries()
    except (OSError, ValueError):
        logger.exception(f"READ {store.galleries_path}")
        raise HTTPException(status_code=500, detail="read-failed")


@router.post("/galleries", dependencies=[Depends(require_token)])
async def save_galleries(
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings_dep),
):
    """Replaces the whole galleries document; the last save wins."""
    body = await _read_limited_body(request, settings.max_json_bytes)
    payload = _parse_document(body, GalleriesPayload)
    try:
        await run_in_threadpool(store.write_galleries, payload)
    except OSError:
        logger.exception(f"WRITE {store.galleries_path}")
        raise HTTPException(status_code=500, detail="write-failed")
    logger.info(f"Saved {len(payload)} galleries")
    return Response(status_code=200)


@router.get("/site")
def get_site(store: JsonDocumentStore = Depends(get_document_store)):
    try:
        return store.read_site()
    except (OSError, ValueError):
        logger.exception(f"READ {store.site_path}")
        raise HTTPException(status_code=500, detail="read-site-failed")


@router.post("/site", dependencies=[Depends(require_token)])
async def save_site(
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings_dep),
):
    body = await _read_limited_body(request, settings.max_json_bytes)
    payload = _parse_document(body, SitePayload)
    try:
        await run_in_threadpool(store.write_site, payload)
    except OSError:
        logger.exception(f"WRITE {store.site_path}")
        raise HTTPException(status_code=500, detail="write-site-failed")
    logger.info("Saved site config")
    return Response(status_code=200)


@router.post(
    "/upload", response_model=UploadResponse, dependencies=[Depends(require_token)]
)
async def upload_media(
    request: Request,
    sink: MediaSink = Depends(get_media_sink),
):
    """
    Accepts one multipart `file` field.

    The token dependency has already run when the multipart body is parsed
    here, so rejected uploads never reach the sink or a temporary file.
    """
    form = await request.form()
    try:
        upload = form.get("file")
        if not isinstance(upload, UploadFile):
            raise HTTPException(status_code=400, detail="no-file")
        try:
            path = await run_in_threadpool(
                sink.save,
                upload.file,
                upload.filename or "",
                upload.content_type or "",
            )
        except MediaSinkError:
            logger.exception(f"UPLOAD {upload.filename}")
            raise HTTPException(status_code=500, detail="upload-failed")
    finally:
        await form.close()
    logger.info(f"Stored upload at {path}")
    return UploadResponse(path=path)


@router.get("/mobileShader", response_class=PlainTextResponse)
def get_mobile_shader(store: JsonDocumentStore = Depends(get_document_store)):
    try:
        return PlainTextResponse(store.read_shader())
    except (OSError, UnicodeDecodeError):
        logger.exception(f"READ {store.shader_path}")
        raise HTTPException(status_code=500, detail="read-shader-failed")


@router.put("/mobileShader", dependencies=[Depends(require_token)])
async def save_mobile_shader(
    request: Request,
    store: JsonDocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings_dep),
):
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("text/plain"):
        raise HTTPException(status_code=400, detail="invalid-body")
    body = await _read_limited_body(request, settings.max_text_bytes)
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="invalid-body")
    try:
        await run_in_threadpool(store.write_shader, text)
    except OSError:
        logger.exception(f"WRITE {store.shader_path}")
        raise HTTPException(status_code=500, detail="write-shader-failed")
    return Response(status_code=200)


@router.get("/optimize", response_model=OptimizeResponse)
def optimize_image(
    name: Optional[str] = Query(None),
    size: str = Query("medium"),
    fmt: str = Query("webp", alias="format"),
    settings: Settings = Depends(get_settings_dep),
):
    if not name:
        raise HTTPException(status_code=400, detail="name-required")
    if size not in optimizer.SIZES:
        raise HTTPException(status_code=400, detail="invalid-size")
    if fmt not in optimizer.PIL_FORMATS:
        raise HTTPException(status_code=400, detail="invalid-format")

    images_dir = Path(settings.media_root) / IMAGES_DIR
    try:
        output_name = optimizer.ensure_optimized(images_dir, name, size, fmt)
    except optimizer.SourceImageNotFound:
        raise HTTPException(status_code=404, detail="not-found")
    except (OSError, ValueError, KeyError):
        logger.exception(f"OPTIMIZE {name} {size} {fmt}")
        raise HTTPException(status_code=500, detail="optimize-failed")
    return OptimizeResponse(path=f"{IMAGES_DIR}/{optimizer.OPTIMIZED_SUBDIR}/{output_name}")
