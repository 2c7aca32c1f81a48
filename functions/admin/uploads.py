"""
Media uploads for the admin client.

The router sends a batch of files through the active uploader at once and
returns their references in input order. A batch is all or nothing: if any
file fails the caller gets `UploadBatchError` and no references.
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
import secrets
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol, Sequence
from urllib.parse import quote

import httpx
from google.api_core.exceptions import GoogleAPIError

from admin.errors import (
    AuthorizationError,
    BackendUnavailableError,
    MissingCredentialError,
    UploadBatchError,
    UploadError,
)
from admin.firebase import FirebaseClient
from shared.firebase_constants import IMAGES_FOLDER, VIDEOS_FOLDER

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/api/upload"
DOWNLOAD_TOKEN_KEY = "firebaseStorageDownloadTokens"
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass
class MediaFile:
    filename: str
    data: bytes = field(repr=False)
    content_type: str = "application/octet-stream"

    @property
    def is_video(self) -> bool:
        return self.content_type.startswith("video")

    @classmethod
    def from_path(cls, path: Path) -> "MediaFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            data=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )


class Uploader(Protocol):
    async def upload(self, file: MediaFile, credential: str) -> str:
        ...


class FileApiUploader:
    """Posts each file to the gateway, which returns a site-relative path."""

    def __init__(self, http: httpx.AsyncClient):
        self.http = http

    async def upload(self, file: MediaFile, credential: str) -> str:
        try:
            response = await self.http.post(
                UPLOAD_PATH,
                params={"token": credential},
                files={"file": (file.filename, file.data, file.content_type)},
            )
        except httpx.HTTPError as e:
            raise UploadError(file.filename, str(e)) from e
        if response.status_code == 401:
            raise AuthorizationError(f"Upload of {file.filename} denied: invalid token")
        if not response.is_success:
            raise UploadError(file.filename, f"HTTP {response.status_code}: {response.text}")
        try:
            return response.json()["path"]
        except (ValueError, KeyError) as e:
            raise UploadError(file.filename, f"unexpected response {response.text!r}") from e


def blob_path(file: MediaFile, now_ms: Optional[int] = None, suffix: Optional[str] = None) -> str:
    """`{images|videos}/{epoch ms}_{9 base36 chars}.{ext}`"""
    folder = VIDEOS_FOLDER if file.is_video else IMAGES_FOLDER
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if suffix is None:
        suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    ext = PurePosixPath(file.filename).suffix.lstrip(".") or "bin"
    return f"{folder}/{now_ms}_{suffix}.{ext}"


def download_url(bucket_name: str, path: str, token: str) -> str:
    return (
        f"https://firebasestorage.googleapis.com/v0/b/{bucket_name}/o/"
        f"{quote(path, safe='')}?alt=media&token={token}"
    )


class FirebaseStorageUploader:
    """Writes blobs to the default Storage bucket and returns download URLs."""

    def __init__(self, firebase: FirebaseClient, write_token: Optional[str]):
        self.firebase = firebase
        self.write_token = write_token

    async def upload(self, file: MediaFile, credential: str) -> str:
        if not self.write_token or not secrets.compare_digest(
            credential.encode("utf-8"), self.write_token.encode("utf-8")
        ):
            raise AuthorizationError(f"Upload of {file.filename} denied: invalid token")
        try:
            bucket = await self.firebase.bucket()
        except BackendUnavailableError as e:
            raise UploadError(file.filename, str(e)) from e

        path = blob_path(file)
        token = str(uuid.uuid4())
        blob = bucket.blob(path)
        blob.metadata = {DOWNLOAD_TOKEN_KEY: token}
        try:
            await asyncio.to_thread(
                blob.upload_from_string, file.data, content_type=file.content_type
            )
        except GoogleAPIError as e:
            raise UploadError(file.filename, str(e)) from e
        return download_url(bucket.name, path, token)


@dataclass
class UploadResult:
    target: str
    references: list[str]


class UploadRouter:
    def __init__(self, uploader: Uploader):
        self.uploader = uploader

    async def route(
        self, files: Sequence[MediaFile], target: str, credential: Optional[str]
    ) -> UploadResult:
        """
        Uploads `files` concurrently for the draft field `target`.

        Raises MissingCredentialError before any request when `credential`
        is empty, and UploadBatchError when any single upload fails.
        """
        if not credential:
            raise MissingCredentialError(f"No credential for upload to {target}")
        results = await asyncio.gather(
            *(self.uploader.upload(f, credential) for f in files),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(f"Upload batch for {target} failed: {len(failures)}/{len(files)} files")
            raise UploadBatchError(failures)
        logger.info(f"Uploaded {len(results)} file(s) for {target}")
        return UploadResult(target=target, references=list(results))
