"""Per-user panel configuration and quick-shortcut pins."""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from core.applications.registry import ApplicationRegistry
from core.panel.records import RecordStore, Row

logger = logging.getLogger(__name__)

PANEL_TABLE = "panel_configuration"
PANEL_SIZES = ("small", "medium", "large")


@dataclass(frozen=True)
class QuickShortcut:
    id: str
    display_name: str
    endpoint: Optional[str] = None
    url: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {"displayName": self.display_name, "id": self.id}
        if self.endpoint is not None:
            data["endpoint"] = self.endpoint
        if self.url is not None:
            data["url"] = self.url
        return data


class PanelService:
    """Reads and writes a user's panel row and resolves pinned applications.

    Pins are stored as plain ids; ids that no longer resolve to a loaded
    application are left in storage but omitted from shortcut listings.
    """

    def __init__(
        self,
        store: RecordStore,
        registry: ApplicationRegistry,
        default_pins: Sequence[str],
        default_widgets: Sequence[str],
    ):
        self.store = store
        self.registry = registry
        self.default_pins = list(default_pins)
        self.default_widgets = list(default_widgets)

    def _default_row(self, username: str) -> Row:
        return {
            "username": username,
            "pinned_applications": list(self.default_pins),
            "widgets": list(self.default_widgets),
            "side": "left",
            "size": "medium",
        }

    def _row(self, username: str) -> Row:
        rows = self.store.get(PANEL_TABLE, {"username": username})
        if rows:
            return rows[0]

        row = self._default_row(username)
        self.store.upsert(PANEL_TABLE, row, key="username")
        logger.info(f"Created panel configuration for user '{username}'")
        return row

    def pinned_ids(self, username: str) -> List[str]:
        return list(self._row(username).get("pinned_applications", []))

    def quick_shortcuts(self, username: str) -> List[QuickShortcut]:
        """Pinned applications that are currently loaded, in pin order."""
        shortcuts = []
        for application_id in self.pinned_ids(username):
            application = self.registry.find_by_id(application_id)
            if application is None:
                continue

            descriptor = application.descriptor
            if descriptor.has_embedded_frontend:
                shortcuts.append(QuickShortcut(
                    id=descriptor.id,
                    display_name=descriptor.display_name,
                    endpoint=f"/app/a/{descriptor.id}",
                ))
            else:
                shortcuts.append(QuickShortcut(
                    id=descriptor.id,
                    display_name=descriptor.display_name,
                    url=descriptor.external_url,
                ))
        return shortcuts

    def pin(self, username: str, application_id: str) -> bool:
        """Append a loaded application to the user's pins.

        Returns:
            False if the application is not loaded or already pinned
        """
        if self.registry.find_by_id(application_id) is None:
            logger.warning(f"Cannot pin '{application_id}' for '{username}': not loaded")
            return False

        row = self._row(username)
        pins = list(row.get("pinned_applications", []))
        if application_id in pins:
            return False

        row["pinned_applications"] = pins + [application_id]
        self.store.upsert(PANEL_TABLE, row, key="username")
        logger.info(f"Pinned '{application_id}' for user '{username}'")
        return True

    def unpin(self, username: str, application_id: str) -> bool:
        row = self._row(username)
        pins = list(row.get("pinned_applications", []))
        if application_id not in pins:
            return False

        row["pinned_applications"] = [p for p in pins if p != application_id]
        self.store.upsert(PANEL_TABLE, row, key="username")
        logger.info(f"Unpinned '{application_id}' for user '{username}'")
        return True

    def panel_settings(self, username: str) -> Dict[str, object]:
        row = self._row(username)
        size = row.get("size", "medium")
        return {
            "widgets": list(row.get("widgets", self.default_widgets)),
            "size": size if size in PANEL_SIZES else "medium",
            "side": row.get("side", "left"),
        }
