"""
Reads a JSON document from a live location, falling back once to a bundled
snapshot.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import httpx

logger = logging.getLogger(__name__)

Location = Union[str, Path]

# Failures that send a read to the fallback location.
FETCH_ERRORS = (httpx.HTTPError, OSError, ValueError)


def as_location(value: Optional[str]) -> Optional[Location]:
    """Settings hold plain strings: values with a scheme are URLs, the rest local paths."""
    if not value:
        return None
    if "://" in value:
        return value
    return Path(value)


@dataclass
class FetchBridge:
    """
    `http` is expected to carry the gateway as its `base_url`, so string
    locations may be absolute URLs or paths relative to it.
    """

    http: httpx.AsyncClient

    async def load(self, primary: Location, fallback: Optional[Location] = None) -> Any:
        try:
            return await self.fetch(primary)
        except FETCH_ERRORS as e:
            if fallback is None:
                raise
            logger.warning(f"Reading {primary} failed ({e}); using {fallback}")
        return await self.fetch(fallback)

    async def fetch(self, location: Location) -> Any:
        if isinstance(location, Path):
            text = await asyncio.to_thread(location.read_text, encoding="utf-8")
            return json.loads(text)
        response = await self.http.get(location)
        response.raise_for_status()
        return response.json()
