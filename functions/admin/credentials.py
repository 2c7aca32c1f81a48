"""
Credential providers.

Save and upload operations take the credential as an argument. A provider is
called once per mutating action and its answer is never cached; returning
None abandons the action.
"""

from __future__ import annotations

import getpass
import os
from typing import Callable, Optional

CredentialProvider = Callable[[], Optional[str]]


def prompt_credential(prompt: str = "Admin token: ") -> CredentialProvider:
    def provide() -> Optional[str]:
        try:
            value = getpass.getpass(prompt)
        except (EOFError, KeyboardInterrupt):
            return None
        return value or None

    return provide


def env_credential(var: str) -> CredentialProvider:
    def provide() -> Optional[str]:
        return os.environ.get(var) or None

    return provide


def static_credential(value: Optional[str]) -> CredentialProvider:
    def provide() -> Optional[str]:
        return value or None

    return provide
