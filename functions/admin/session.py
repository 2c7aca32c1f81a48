"""
Wires the admin core from one `ClientSettings` instance.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from admin.backends import Backend, FileApiBackend, FirestoreBackend
from admin.bridge import FetchBridge, as_location
from admin.config import BackendKind, ClientSettings
from admin.edit_model import AdminEditModel
from admin.firebase import FirebaseClient
from admin.uploads import FileApiUploader, FirebaseStorageUploader, UploadRouter

logger = logging.getLogger(__name__)


@dataclass
class AdminSession:
    settings: ClientSettings
    http: httpx.AsyncClient
    backend: Backend
    uploads: UploadRouter
    model: AdminEditModel

    async def aclose(self) -> None:
        await self.http.aclose()


def build_session(
    settings: ClientSettings,
    http: Optional[httpx.AsyncClient] = None,
    firebase: Optional[FirebaseClient] = None,
) -> AdminSession:
    """
    Selects the backend variant named by `settings.backend`.

    `http` and `firebase` may be supplied to reuse or replace the defaults;
    otherwise they are created here. Must run inside the event loop when the
    Firestore variant is selected.
    """
    http = http or httpx.AsyncClient(
        base_url=settings.api_base, timeout=settings.request_timeout
    )
    bridge = FetchBridge(http)
    galleries_fallback = as_location(settings.galleries_snapshot)
    site_fallback = as_location(settings.site_snapshot)

    if settings.backend == BackendKind.FIRESTORE:
        firebase = firebase or FirebaseClient(settings)
        firebase.start()
        write_token = settings.write_token.get_secret_value() if settings.write_token else None
        backend: Backend = FirestoreBackend(
            firebase,
            write_token,
            bridge=bridge,
            galleries_fallback=galleries_fallback,
            site_fallback=site_fallback,
        )
        uploader = FirebaseStorageUploader(firebase, write_token)
    else:
        backend = FileApiBackend(
            http,
            bridge=bridge,
            galleries_fallback=galleries_fallback,
            site_fallback=site_fallback,
        )
        uploader = FileApiUploader(http)

    logger.info(f"Admin session using the {settings.backend} backend")
    return AdminSession(
        settings=settings,
        http=http,
        backend=backend,
        uploads=UploadRouter(uploader),
        model=AdminEditModel(backend),
    )
