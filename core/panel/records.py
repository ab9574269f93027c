"""Keyed record store used for panel configuration and pinned shortcuts.

The panel only needs ``get`` by equality filter and ``upsert`` by key, so the
store is a JSON file of named tables:

{
    "panel_configuration": [
        {"username": "admin", "pinned_applications": ["uk-ewsgit-dash"], ...}
    ]
}
"""

import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class RecordStore(Protocol):
    def get(self, table: str, filter: Optional[Row] = None) -> List[Row]:
        ...

    def upsert(self, table: str, row: Row, key: str) -> None:
        ...


class JsonRecordStore:
    """Thread-safe record store persisted to a single JSON file."""

    def __init__(self, records_file: Path):
        self.records_file = records_file
        self._lock = threading.Lock()
        self._tables: Dict[str, List[Row]] = self._load()

    def _load(self) -> Dict[str, List[Row]]:
        """Load tables from file, starting empty if not found."""
        if self.records_file.exists():
            try:
                with open(self.records_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                logger.error(f"Ignoring records file {self.records_file}: top level is not an object")
            except (json.JSONDecodeError, IOError) as e:
                logger.error(f"Error loading records file {self.records_file}: {e}")

        return {}

    def _save(self) -> None:
        """Save tables to file (caller holds the lock)."""
        self.records_file.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".records-", suffix=".tmp", dir=str(self.records_file.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._tables, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.records_file)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.debug(f"Saved records to {self.records_file}")

    def get(self, table: str, filter: Optional[Row] = None) -> List[Row]:
        """Rows of ``table`` whose fields equal every item of ``filter``."""
        with self._lock:
            rows = self._tables.get(table, [])
            matched = [
                row for row in rows
                if all(row.get(k) == v for k, v in (filter or {}).items())
            ]
            return copy.deepcopy(matched)

    def upsert(self, table: str, row: Row, key: str) -> None:
        """Insert ``row`` or replace the existing row with the same ``key`` value."""
        if key not in row:
            raise KeyError(f"Row for table '{table}' has no key field '{key}'")

        with self._lock:
            rows = self._tables.setdefault(table, [])
            for i, existing in enumerate(rows):
                if existing.get(key) == row[key]:
                    rows[i] = copy.deepcopy(row)
                    break
            else:
                rows.append(copy.deepcopy(row))
            self._save()
