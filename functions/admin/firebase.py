"""
Single initialization barrier for the Firebase handles.

`start()` kicks off app initialization once. Every caller then awaits
`handles()`, which resolves to the same Firestore client or raises
`BackendUnavailableError` after the configured timeout.

The Storage bucket is resolved on first use by `bucket()`, so document
reads and saves work without a bucket configured.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import firebase_admin
from firebase_admin import credentials, firestore_async, storage

from admin.config import ClientSettings
from admin.errors import BackendUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FirebaseHandles:
    firestore: Any
    bucket: Any = None
    app: Optional[firebase_admin.App] = None


def _initialize_app(settings: ClientSettings) -> firebase_admin.App:
    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket
    cred = (
        credentials.Certificate(settings.firebase_credentials)
        if settings.firebase_credentials
        else None
    )
    return firebase_admin.initialize_app(cred, options or None)


def _storage_bucket(app: Optional[firebase_admin.App]):
    return storage.bucket(app=app)


class FirebaseClient:
    def __init__(
        self,
        settings: ClientSettings,
        initializer: Optional[Callable[[], Awaitable[FirebaseHandles]]] = None,
        bucket_resolver: Callable[[Optional[firebase_admin.App]], Any] = _storage_bucket,
    ):
        self._settings = settings
        self._timeout = settings.firebase_init_timeout
        self._initializer = initializer
        self._bucket_resolver = bucket_resolver
        self._future: Optional[asyncio.Future] = None
        self._bucket: Any = None

    @classmethod
    def from_handles(
        cls,
        settings: ClientSettings,
        handles: FirebaseHandles,
        bucket_resolver: Callable[[Optional[firebase_admin.App]], Any] = _storage_bucket,
    ) -> "FirebaseClient":
        async def ready() -> FirebaseHandles:
            return handles

        return cls(settings, initializer=ready, bucket_resolver=bucket_resolver)

    def start(self) -> None:
        if self._future is None:
            self._future = asyncio.ensure_future(self._initialize())

    async def handles(self) -> FirebaseHandles:
        self.start()
        try:
            return await asyncio.wait_for(asyncio.shield(self._future), self._timeout)
        except asyncio.TimeoutError:
            raise BackendUnavailableError(
                f"Firebase was not ready after {self._timeout}s"
            ) from None
        except BackendUnavailableError:
            raise
        except Exception as e:
            raise BackendUnavailableError(f"Firebase initialization failed: {e}") from e

    async def bucket(self):
        """
        The Storage bucket, resolved from the initialized app on first call.

        A missing or unusable bucket setting raises `BackendUnavailableError`
        here and leaves `handles()` unaffected.
        """
        handles = await self.handles()
        if handles.bucket is not None:
            return handles.bucket
        if self._bucket is None:
            try:
                self._bucket = await asyncio.to_thread(self._bucket_resolver, handles.app)
            except Exception as e:
                raise BackendUnavailableError(f"Storage bucket unavailable: {e}") from e
        return self._bucket

    async def _initialize(self) -> FirebaseHandles:
        if self._initializer is not None:
            return await self._initializer()
        app = await asyncio.to_thread(_initialize_app, self._settings)
        # The async Firestore client binds to the running loop, so it is
        # created here rather than in the worker thread.
        handles = FirebaseHandles(firestore=firestore_async.client(app), app=app)
        logger.info(f"Firebase ready for project {app.project_id}")
        return handles
