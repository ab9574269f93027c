"""Application discovery - scans the install root for installed applications."""

import json
import logging
from pathlib import Path
from typing import List

from pydantic import ValidationError

from core.applications.descriptor import DESCRIPTOR_FILE, ApplicationDescriptor
from core.errors import DiscoveryError, LoadError

logger = logging.getLogger(__name__)


class ApplicationDiscovery:
    """Enumerates installed applications and reads their descriptors."""

    def __init__(self, install_root: Path):
        self.install_root = install_root

    def list_installed_identifiers(self) -> List[str]:
        """List identifiers of every application directory in the install root.

        Returns:
            Sorted list of directory names (hidden entries skipped)

        Raises:
            DiscoveryError: If the install root is missing or unreadable
        """
        try:
            entries = sorted(self.install_root.iterdir())
        except OSError as e:
            raise DiscoveryError(
                f"Cannot read application install root {self.install_root}: {e}"
            ) from e

        identifiers = [
            item.name
            for item in entries
            if item.is_dir() and not item.name.startswith((".", "_"))
        ]
        logger.debug(f"Found {len(identifiers)} installed application(s) in {self.install_root}")
        return identifiers

    def read_descriptor(self, application_dir: Path) -> ApplicationDescriptor:
        """Load and validate an application descriptor.

        Args:
            application_dir: Application install directory

        Returns:
            Validated ApplicationDescriptor

        Raises:
            LoadError: If the descriptor is missing or malformed
        """
        application_id = application_dir.name
        descriptor_file = application_dir / DESCRIPTOR_FILE
        if not descriptor_file.is_file():
            raise LoadError(application_id, f"no {DESCRIPTOR_FILE} found at {application_dir}")

        try:
            with open(descriptor_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise LoadError(application_id, f"invalid JSON in {descriptor_file}: {e}") from e
        except OSError as e:
            raise LoadError(application_id, f"cannot read {descriptor_file}: {e}") from e

        if not isinstance(data, dict):
            raise LoadError(application_id, f"{descriptor_file} must contain a JSON object")

        try:
            descriptor = ApplicationDescriptor(**data)
        except ValidationError as e:
            raise LoadError(application_id, f"invalid descriptor in {descriptor_file}: {e}") from e

        if descriptor.id != application_id:
            raise LoadError(
                application_id,
                f"descriptor id '{descriptor.id}' does not match directory name",
            )
        return descriptor
