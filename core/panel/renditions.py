"""Icon renditions served by the panel."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict

MEDIA_TYPES = {
    "webp": "image/webp",
    "png": "image/png",
    "avif": "image/avif",
    "jpeg": "image/jpeg",
}


class RenditionKind(str, Enum):
    LARGE_GRID = "largeGridIcon"
    SMALL_GRID = "smallGridIcon"
    LIST = "listIcon"
    QUICK_SHORTCUT = "quickShortcutIcon"


@dataclass(frozen=True)
class Rendition:
    """One fixed-size derived icon.

    Attributes:
        kind: Rendition kind, also the cache file stem
        width: Target width in px
        height: Target height in px
        source: Source icon path relative to the application install directory
        format: Output image format (also the cache file extension)
    """

    kind: RenditionKind
    width: int
    height: int
    source: str = "icon.avif"
    format: str = "webp"

    @property
    def extension(self) -> str:
        return "jpg" if self.format == "jpeg" else self.format

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES.get(self.format, "application/octet-stream")


DEFAULT_RENDITIONS: Dict[RenditionKind, Rendition] = {
    RenditionKind.LARGE_GRID: Rendition(RenditionKind.LARGE_GRID, 88, 88),
    RenditionKind.SMALL_GRID: Rendition(RenditionKind.SMALL_GRID, 88, 88),
    RenditionKind.LIST: Rendition(RenditionKind.LIST, 88, 88),
    RenditionKind.QUICK_SHORTCUT: Rendition(RenditionKind.QUICK_SHORTCUT, 88, 88, source="assets/icon.png"),
}
