"""
Backend variants for the admin client.

`FileApiBackend` talks to the gateway's HTTP API; `FirestoreBackend` writes
the same documents straight to Firestore. Both share one interface so the
edit model never knows which one it holds.

Reads never raise: a failed read is logged and comes back empty. Writes
raise `BackendWriteError` (or a subclass) so the operator can be told.
"""

from __future__ import annotations

import asyncio
import logging
import secrets
from typing import Any, Optional, Protocol

import httpx
from google.api_core.exceptions import GoogleAPIError

from admin.bridge import FETCH_ERRORS, FetchBridge, Location
from admin.errors import (
    AuthorizationError,
    BackendUnavailableError,
    BackendWriteError,
    PartialSaveError,
)
from admin.firebase import FirebaseClient
from shared.content import (
    Galleries,
    SiteConfig,
    Slide,
    galleries_from_dict,
    galleries_to_dict,
)
from shared.firebase_constants import (
    CONFIG_COLLECTION,
    GALLERIES_COLLECTION,
    GALLERY_ITEMS_FIELD,
    SHADER_FIELD,
    SITE_DOCUMENT,
)

logger = logging.getLogger(__name__)

GALLERIES_PATH = "/api/galleries"
SITE_PATH = "/api/site"
SHADER_PATH = "/api/mobileShader"

_STORE_ERRORS = (GoogleAPIError, BackendUnavailableError, ValueError)


class Backend(Protocol):
    async def list_galleries(self) -> Galleries:
        ...

    async def get_gallery(self, key: str) -> list[Slide]:
        ...

    async def get_site(self) -> SiteConfig:
        ...

    async def save_galleries(self, galleries: Galleries, credential: str) -> None:
        ...

    async def save_site(self, site: SiteConfig, credential: str) -> None:
        ...

    async def get_shader(self) -> str:
        ...

    async def save_shader(self, text: str, credential: str) -> None:
        ...


def _raise_for_write(response: httpx.Response, what: str) -> None:
    if response.status_code == 401:
        raise AuthorizationError(f"Saving {what} was denied: invalid token")
    if not response.is_success:
        raise BackendWriteError(
            f"Saving {what} failed with HTTP {response.status_code}: {response.text}"
        )


class FileApiBackend:
    """Whole-document reads and token-gated overwrites over the gateway API."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        bridge: Optional[FetchBridge] = None,
        galleries_fallback: Optional[Location] = None,
        site_fallback: Optional[Location] = None,
    ):
        self.http = http
        self.bridge = bridge or FetchBridge(http)
        self.galleries_fallback = galleries_fallback
        self.site_fallback = site_fallback

    async def list_galleries(self) -> Galleries:
        try:
            data = await self.bridge.load(GALLERIES_PATH, self.galleries_fallback)
            return galleries_from_dict(data)
        except FETCH_ERRORS as e:
            logger.error(f"Could not load galleries: {e}")
            return {}

    async def get_gallery(self, key: str) -> list[Slide]:
        return (await self.list_galleries()).get(key, [])

    async def get_site(self) -> SiteConfig:
        try:
            data = await self.bridge.load(SITE_PATH, self.site_fallback)
            return SiteConfig.from_dict(data)
        except FETCH_ERRORS as e:
            logger.error(f"Could not load site config: {e}")
            return SiteConfig()

    async def save_galleries(self, galleries: Galleries, credential: str) -> None:
        await self._write(
            "galleries", "POST", GALLERIES_PATH, credential, json=galleries_to_dict(galleries)
        )

    async def save_site(self, site: SiteConfig, credential: str) -> None:
        await self._write("site config", "POST", SITE_PATH, credential, json=site.to_dict())

    async def get_shader(self) -> str:
        try:
            response = await self.http.get(SHADER_PATH)
            response.raise_for_status()
            return response.text
        except httpx.HTTPError as e:
            logger.error(f"Could not load shader: {e}")
            return ""

    async def save_shader(self, text: str, credential: str) -> None:
        await self._write(
            "shader",
            "PUT",
            SHADER_PATH,
            credential,
            content=text.encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )

    async def _write(self, what: str, method: str, path: str, credential: str, **kwargs) -> None:
        try:
            response = await self.http.request(method, path, params={"token": credential}, **kwargs)
        except httpx.HTTPError as e:
            raise BackendWriteError(f"Saving {what} failed: {e}") from e
        _raise_for_write(response, what)


class FirestoreBackend:
    """
    One document per gallery key in `galleries/{key}` holding `items`, and
    the site config in `config/site`.

    Gallery saves are independent per-key merge writes, so a save can land
    for some keys and not others; that case raises `PartialSaveError`.
    """

    def __init__(
        self,
        firebase: FirebaseClient,
        write_token: Optional[str],
        bridge: Optional[FetchBridge] = None,
        galleries_fallback: Optional[Location] = None,
        site_fallback: Optional[Location] = None,
    ):
        self.firebase = firebase
        self.write_token = write_token
        self.bridge = bridge
        self.galleries_fallback = galleries_fallback
        self.site_fallback = site_fallback

    async def _db(self):
        return (await self.firebase.handles()).firestore

    def _authorize(self, credential: Optional[str]) -> None:
        if not self.write_token or not credential:
            raise AuthorizationError("Write denied: no token configured or supplied")
        if not secrets.compare_digest(credential.encode("utf-8"), self.write_token.encode("utf-8")):
            raise AuthorizationError("Write denied: invalid token")

    async def _snapshot(self, location: Optional[Location], what: str) -> Any:
        """Falls back to a bundled snapshot; returns None when there is none."""
        if self.bridge is None or location is None:
            return None
        try:
            return await self.bridge.fetch(location)
        except FETCH_ERRORS as e:
            logger.error(f"Could not read {what} snapshot {location}: {e}")
            return None

    async def list_galleries(self) -> Galleries:
        try:
            db = await self._db()
            data = {}
            async for doc in db.collection(GALLERIES_COLLECTION).stream():
                data[doc.id] = (doc.to_dict() or {}).get(GALLERY_ITEMS_FIELD, [])
            return galleries_from_dict(data)
        except _STORE_ERRORS as e:
            logger.warning(f"Could not list {GALLERIES_COLLECTION} from Firestore: {e}")
        snapshot = await self._snapshot(self.galleries_fallback, "galleries")
        try:
            return galleries_from_dict(snapshot)
        except ValueError as e:
            logger.error(f"Galleries snapshot is malformed: {e}")
            return {}

    async def get_gallery(self, key: str) -> list[Slide]:
        try:
            db = await self._db()
            doc = await db.collection(GALLERIES_COLLECTION).document(key).get()
            if not doc.exists:
                return []
            items = (doc.to_dict() or {}).get(GALLERY_ITEMS_FIELD, [])
            return galleries_from_dict({key: items}).get(key, [])
        except _STORE_ERRORS as e:
            logger.error(f"Could not read gallery {key!r}: {e}")
            return []

    async def get_site(self) -> SiteConfig:
        try:
            db = await self._db()
            doc = await db.collection(CONFIG_COLLECTION).document(SITE_DOCUMENT).get()
            return SiteConfig.from_dict(doc.to_dict() if doc.exists else None)
        except _STORE_ERRORS as e:
            logger.warning(f"Could not read {CONFIG_COLLECTION}/{SITE_DOCUMENT}: {e}")
        snapshot = await self._snapshot(self.site_fallback, "site config")
        try:
            return SiteConfig.from_dict(snapshot)
        except ValueError as e:
            logger.error(f"Site config snapshot is malformed: {e}")
            return SiteConfig()

    async def save_galleries(self, galleries: Galleries, credential: str) -> None:
        self._authorize(credential)
        db = await self._writable_db()
        keys = list(galleries)
        payloads = galleries_to_dict(galleries)
        results = await asyncio.gather(
            *(
                db.collection(GALLERIES_COLLECTION)
                .document(key)
                .set({GALLERY_ITEMS_FIELD: payloads[key]}, merge=True)
                for key in keys
            ),
            return_exceptions=True,
        )
        saved = [key for key, result in zip(keys, results) if not isinstance(result, BaseException)]
        failed = {key: result for key, result in zip(keys, results) if isinstance(result, BaseException)}
        if failed:
            for key, error in failed.items():
                logger.error(f"Writing gallery {key!r} failed: {error}")
            raise PartialSaveError(saved, failed)

    async def save_site(self, site: SiteConfig, credential: str) -> None:
        self._authorize(credential)
        db = await self._writable_db()
        payload = site.to_dict()
        # The shader shares this document but is only written by save_shader.
        payload.pop(SHADER_FIELD, None)
        try:
            await db.collection(CONFIG_COLLECTION).document(SITE_DOCUMENT).set(payload, merge=True)
        except GoogleAPIError as e:
            raise BackendWriteError(f"Saving site config failed: {e}") from e

    async def get_shader(self) -> str:
        try:
            db = await self._db()
            doc = await db.collection(CONFIG_COLLECTION).document(SITE_DOCUMENT).get()
            return (doc.to_dict() or {}).get(SHADER_FIELD, "") if doc.exists else ""
        except _STORE_ERRORS as e:
            logger.error(f"Could not read shader: {e}")
            return ""

    async def save_shader(self, text: str, credential: str) -> None:
        self._authorize(credential)
        db = await self._writable_db()
        try:
            await db.collection(CONFIG_COLLECTION).document(SITE_DOCUMENT).set(
                {SHADER_FIELD: text}, merge=True
            )
        except GoogleAPIError as e:
            raise BackendWriteError(f"Saving shader failed: {e}") from e

    async def _writable_db(self):
        try:
            return await self._db()
        except BackendUnavailableError as e:
            raise BackendWriteError(str(e)) from e
