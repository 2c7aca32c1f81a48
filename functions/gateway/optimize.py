"""
On-demand resized copies of uploaded images, cached under images/optimized/.
"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

logger = logging.getLogger(__name__)

SIZES = {"small": 400, "medium": 800, "large": 1200, "xlarge": 1920}
QUALITY = {"jpeg": 80, "webp": 85, "avif": 60}
PIL_FORMATS = {"jpeg": "JPEG", "webp": "WEBP", "avif": "AVIF"}

OPTIMIZED_SUBDIR = "optimized"


class SourceImageNotFound(Exception):
    pass


def resolve_source(images_dir: Path, name: str) -> Path:
    """
    Maps a request name onto a file inside `images_dir`.

    Raises SourceImageNotFound for missing files and for names that resolve
    outside the images directory.
    """
    root = images_dir.resolve()
    candidate = (root / name).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        raise SourceImageNotFound(name)
    return candidate


def ensure_optimized(images_dir: Path, name: str, size: str, fmt: str) -> str:
    """
    Returns the file name of the `size`/`fmt` variant of `name`, generating
    it when it does not exist yet.

    The image is scaled to the configured width, never enlarged, keeping its
    aspect ratio.
    """
    source = resolve_source(images_dir, name)
    output_dir = images_dir / OPTIMIZED_SUBDIR
    output_name = f"{source.stem}-{size}.{fmt}"
    output_path = output_dir / output_name
    if output_path.exists():
        return output_name

    output_dir.mkdir(parents=True, exist_ok=True)
    width = SIZES[size]
    with Image.open(source) as img:
        if img.width > width:
            height = max(1, round(img.height * width / img.width))
            img = img.resize((width, height), Image.LANCZOS)
        if fmt == "jpeg" and img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
        try:
            img.save(output_path, format=PIL_FORMATS[fmt], quality=QUALITY[fmt])
        except Exception:
            # A half-written file would otherwise be served from cache.
            output_path.unlink(missing_ok=True)
            raise
    logger.info(f"Generated {output_name}")
    return output_name
