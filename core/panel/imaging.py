"""Image resizing backed by Pillow.

Writes are atomic: the image is saved to a temporary file next to the
destination and moved into place with ``os.replace``, so readers never see a
partially written file.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol, Tuple

from PIL import Image, ImageOps, UnidentifiedImageError

from core.errors import RenditionError

logger = logging.getLogger(__name__)

PLACEHOLDER_BACKGROUND: Tuple[int, int, int, int] = (60, 64, 72, 255)
PLACEHOLDER_FOREGROUND: Tuple[int, int, int, int] = (200, 204, 212, 255)


class ImageResizer(Protocol):
    def resize(self, source: Path, width: int, height: int, destination: Path, fmt: str) -> None:
        ...


def _save_atomic(image: Image.Image, destination: Path, fmt: str) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{destination.stem}-", suffix=".tmp", dir=str(destination.parent)
    )
    try:
        with os.fdopen(fd, "wb") as f:
            image.save(f, format=fmt.upper())
        os.replace(tmp_name, destination)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class PillowResizer:
    """Resizes a source image to fit a fixed box and re-encodes it."""

    def __init__(self, resample: Image.Resampling = Image.Resampling.LANCZOS):
        self.resample = resample

    def resize(self, source: Path, width: int, height: int, destination: Path, fmt: str) -> None:
        """Resize ``source`` into ``destination``.

        Args:
            source: Source image path
            width: Target width in px
            height: Target height in px
            destination: Output path
            fmt: Pillow format name, e.g. "webp"

        Raises:
            RenditionError: If the source cannot be read or the output cannot be written
        """
        try:
            with Image.open(source) as img:
                img.load()
                rendered = ImageOps.fit(img.convert("RGBA"), (width, height), method=self.resample)
            _save_atomic(rendered, destination, fmt)
        except (OSError, UnidentifiedImageError, ValueError, KeyError) as e:
            raise RenditionError(f"Cannot render {source} at {width}x{height} as {fmt}: {e}") from e

        logger.debug(f"Rendered {source} -> {destination} ({width}x{height} {fmt})")


def render_placeholder(destination: Path, size: int = 256, fmt: str = "webp") -> None:
    """Draw a neutral placeholder icon, used when no fallback asset is configured."""
    image = Image.new("RGBA", (size, size), PLACEHOLDER_BACKGROUND)
    inset = size // 4
    inner = Image.new("RGBA", (size - 2 * inset, size - 2 * inset), PLACEHOLDER_FOREGROUND)
    image.paste(inner, (inset, inset))
    try:
        _save_atomic(image, destination, fmt)
    except (OSError, ValueError, KeyError) as e:
        raise RenditionError(f"Cannot write placeholder icon {destination}: {e}") from e
