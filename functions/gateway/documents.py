"""
File-backed storage for the galleries and site documents and the shader asset.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

GALLERIES_FILE = "galleries.json"
SITE_FILE = "site.json"
SHADER_FILE = "mobile_shader.glsl"


def write_atomic(path: Path, text: str) -> None:
    """
    Replaces `path` with `text` in one step.

    The content goes to a temporary sibling first and is then renamed over
    the target, so readers see either the old or the new document.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


@dataclass
class JsonDocumentStore:
    """Whole-document reads and overwrites under a single data directory."""

    data_dir: Path

    def __post_init__(self):
        self.data_dir = Path(self.data_dir)

    @property
    def galleries_path(self) -> Path:
        return self.data_dir / GALLERIES_FILE

    @property
    def site_path(self) -> Path:
        return self.data_dir / SITE_FILE

    @property
    def shader_path(self) -> Path:
        return self.data_dir / SHADER_FILE

    def read_galleries(self) -> Any:
        return self._read_json(self.galleries_path)

    def write_galleries(self, payload: dict) -> None:
        self._write_json(self.galleries_path, payload)

    def read_site(self) -> Any:
        return self._read_json(self.site_path)

    def write_site(self, payload: dict) -> None:
        self._write_json(self.site_path, payload)

    def read_shader(self) -> str:
        return self.shader_path.read_text(encoding="utf-8")

    def write_shader(self, text: str) -> None:
        write_atomic(self.shader_path, text)

    def _read_json(self, path: Path) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _write_json(self, path: Path, payload: Any) -> None:
        write_atomic(path, json.dumps(payload, indent=2, ensure_ascii=False))
