"""
Exceptions raised by the admin client.
"""

from __future__ import annotations

from typing import Sequence


class BackendError(Exception):
    pass


class BackendUnavailableError(BackendError):
    """The document-store client never became ready."""


class BackendWriteError(BackendError):
    """A save reached the backend and did not succeed."""


class AuthorizationError(BackendWriteError):
    """The write credential was rejected. Never retried."""


class PartialSaveError(BackendWriteError):
    """Some gallery keys were written and others were not."""

    def __init__(self, saved_keys: Sequence[str], failed_keys: dict[str, BaseException]):
        self.saved_keys = list(saved_keys)
        self.failed_keys = dict(failed_keys)
        super().__init__(
            f"Saved {len(self.saved_keys)} galleries, failed {sorted(self.failed_keys)}"
        )


class MissingCredentialError(BackendError):
    """An upload was requested without a credential."""


class UploadError(BackendError):
    def __init__(self, filename: str, message: str):
        self.filename = filename
        super().__init__(f"{filename}: {message}")


class UploadBatchError(BackendError):
    """At least one file of a batch failed; no references are returned."""

    def __init__(self, failures: Sequence[BaseException]):
        self.failures = list(failures)
        super().__init__(f"{len(self.failures)} upload(s) failed: {self.failures[0]}")
