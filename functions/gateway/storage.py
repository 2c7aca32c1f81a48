"""
Upload sinks: the local media directory and an S3-compatible bucket.
"""

from __future__ import annotations

import re
import shutil
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import BinaryIO, Optional, Protocol

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from gateway.config import Settings

IMAGES_DIR = "images"
VIDEO_DIR = "video"

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


class MediaSinkError(Exception):
    pass


class MediaSink(Protocol):
    """Stores one uploaded file and returns its path relative to the site root."""

    def save(self, fileobj: BinaryIO, filename: str, content_type: str) -> str:
        ...


def media_folder(content_type: Optional[str]) -> str:
    """Videos go to `video/`, everything else to `images/`, by MIME type."""
    if content_type and content_type.startswith("video"):
        return VIDEO_DIR
    return IMAGES_DIR


def stored_name(filename: str, now_ms: Optional[int] = None) -> str:
    """
    Builds the on-disk name `{base}-{epoch ms}{ext}`.

    The base keeps only letters, digits, `_` and `-`; the extension is kept
    as given.
    """
    pure = PurePosixPath((filename or "").replace("\\", "/"))
    ext = pure.suffix
    base = _UNSAFE_NAME_CHARS.sub("", pure.name[: len(pure.name) - len(ext)]) or "upload"
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{base}-{now_ms}{ext}"


def media_key(filename: str, content_type: Optional[str]) -> str:
    return f"{media_folder(content_type)}/{stored_name(filename)}"


@dataclass
class LocalMediaSink:
    """Writes uploads under the site's media root."""

    media_root: Path

    def __post_init__(self):
        self.media_root = Path(self.media_root)

    def save(self, fileobj: BinaryIO, filename: str, content_type: str) -> str:
        key = media_key(filename, content_type)
        dest = self.media_root / key
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with open(dest, "wb") as out:
                shutil.copyfileobj(fileobj, out)
        except OSError as e:
            if dest.is_file():
                dest.unlink()
            raise MediaSinkError(f"Could not write {key}: {e}") from e
        return key


@dataclass
class BucketMediaSink:
    """
    S3-compatible storage for uploads. Objects use the same keys as the
    local layout so stored references do not depend on the sink.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def save(self, fileobj: BinaryIO, filename: str, content_type: str) -> str:
        key = media_key(filename, content_type)
        try:
            self._client.upload_fileobj(
                fileobj,
                self.bucket,
                key,
                ExtraArgs={"ContentType": content_type or "application/octet-stream"},
            )
        except (BotoCoreError, ClientError, S3UploadFailedError) as e:
            raise MediaSinkError(f"Could not upload {key} to {self.bucket}: {e}") from e
        return key


def build_media_sink(settings: Settings) -> MediaSink:
    if settings.media_bucket:
        secret = settings.media_secret_access_key
        return BucketMediaSink(
            bucket=settings.media_bucket,
            region=settings.media_region or "",
            endpoint=settings.media_endpoint or "",
            access_key_id=settings.media_access_key_id or "",
            secret_access_key=secret.get_secret_value() if secret else "",
        )
    return LocalMediaSink(Path(settings.media_root))
