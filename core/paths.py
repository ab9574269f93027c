"""Canonical filesystem locations for applications and the panel cache.

Everything here is a pure function of the two configured roots; nothing
touches the disk.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

FALLBACK_ICON_NAME = "invalidIcon"
INSTANCE_LOGO_NAME = "instanceLogo"
RECORDS_FILE_NAME = "records.json"


def validate_application_id(application_id: str) -> str:
    """Reject ids that would escape their directory.

    Raises:
        ValueError: If the id is empty or contains path components
    """
    if (
        not application_id
        or application_id in (".", "..")
        or "/" in application_id
        or "\\" in application_id
        or "\x00" in application_id
    ):
        raise ValueError(f"Invalid application id: {application_id!r}")
    return application_id


@dataclass(frozen=True)
class PanelPaths:
    """Path resolver rooted at the instance filesystem and the install root."""

    fs_root: Path
    install_root: Path

    def application_directory(self, application_id: str) -> Path:
        return self.install_root / validate_application_id(application_id)

    def global_cache_directory(self) -> Path:
        return self.fs_root / "Cache"

    def system_directory(self) -> Path:
        return self.fs_root / "System"

    def panel_cache_directory(self) -> Path:
        return self.global_cache_directory() / "panel"

    def applications_cache_directory(self) -> Path:
        return self.panel_cache_directory() / "applications"

    def application_cache_directory(self, application_id: str) -> Path:
        return self.applications_cache_directory() / validate_application_id(application_id)

    def rendition_cache_path(self, application_id: str, rendition_kind: str, extension: str) -> Path:
        return self.application_cache_directory(application_id) / f"{rendition_kind}.{extension}"

    def fallback_icon_path(self, extension: str = "webp") -> Path:
        return self.panel_cache_directory() / f"{FALLBACK_ICON_NAME}.{extension}"

    def instance_logo_path(self, dimension: Optional[int] = None) -> Path:
        """Source logo when ``dimension`` is None, otherwise the generated webp."""
        if dimension is None:
            return self.system_directory() / f"{INSTANCE_LOGO_NAME}.png"
        return self.system_directory() / f"{INSTANCE_LOGO_NAME}{dimension}.webp"

    def records_file(self) -> Path:
        return self.system_directory() / RECORDS_FILE_NAME


def source_icon_path(install_path: Path, relative: str) -> Path:
    """Location of an application-provided icon inside its install directory."""
    return install_path / relative
