"""Shared fixtures: throwaway install roots, applications and a recording resizer."""

import json
import os
import textwrap
import threading
import time
from pathlib import Path

import pytest

from core.applications.registry import ApplicationRegistry
from core.errors import RenditionError
from core.panel.cache import AssetCache
from core.paths import PanelPaths

FALLBACK_BYTES = b"fallback-icon"

RECORDING_BACKEND = textwrap.dedent('''
    from core.applications.application import Application


    class RecordingApplication(Application):
        def __init__(self, descriptor):
            super().__init__(descriptor)
            self.calls = []

        def on_load(self):
            self.calls.append("on_load")
            return self

        def on_after_install(self):
            self.calls.append("on_after_install")
            return self

        def on_before_uninstall(self):
            self.calls.append("on_before_uninstall")
            return self


    def register(descriptor):
        return RecordingApplication(descriptor)
''')

BROKEN_IMPORT_BACKEND = 'raise RuntimeError("broken at import")\n'


def descriptor_data(application_id, **overrides):
    data = {
        "id": application_id,
        "displayName": application_id.replace("-", " ").title(),
        "description": f"{application_id} description",
        "version": {"major": 1, "minor": 0},
        "configVersion": 1,
        "frontend": {"entryPoint": "web/index.tsx"},
    }
    data.update(overrides)
    return data


def write_application(install_root: Path, application_id: str, backend: str = RECORDING_BACKEND,
                      descriptor=None, icons=("icon.avif",)) -> Path:
    """Create an application directory with descriptor, entry module and icons."""
    app_dir = install_root / application_id
    app_dir.mkdir(parents=True, exist_ok=True)
    with open(app_dir / "application.json", "w", encoding="utf-8") as f:
        json.dump(descriptor if descriptor is not None else descriptor_data(application_id), f)
    if backend is not None:
        (app_dir / "backend.py").write_text(backend, encoding="utf-8")
    for icon in icons:
        icon_path = app_dir / icon
        icon_path.parent.mkdir(parents=True, exist_ok=True)
        icon_path.write_bytes(f"source:{application_id}:{icon}".encode())
    return app_dir


class RecordingResizer:
    """Resizer double: writes deterministic bytes and counts invocations."""

    def __init__(self, delay: float = 0.0, fail: bool = False):
        self.delay = delay
        self.fail = fail
        self.calls = []
        self._lock = threading.Lock()

    def resize(self, source, width, height, destination, fmt):
        with self._lock:
            self.calls.append((Path(source), width, height, Path(destination), fmt))
        if self.delay:
            time.sleep(self.delay)
        if self.fail:
            raise RenditionError(f"cannot decode {source}")
        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        partial = destination.with_name(f".{destination.name}.tmp")
        partial.write_bytes(f"{Path(source).name}:{width}x{height}:{fmt}".encode())
        os.replace(partial, destination)


@pytest.fixture
def install_root(tmp_path):
    root = tmp_path / "applications"
    root.mkdir()
    return root


@pytest.fixture
def paths(tmp_path, install_root):
    return PanelPaths(fs_root=tmp_path / "fs", install_root=install_root)


@pytest.fixture
def fallback_icon(paths):
    path = paths.fallback_icon_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(FALLBACK_BYTES)
    return path


@pytest.fixture
def registry(paths):
    return ApplicationRegistry(paths)


@pytest.fixture
def resizer():
    return RecordingResizer()


@pytest.fixture
def cache(registry, paths, resizer, fallback_icon):
    return AssetCache(registry, paths, resizer)
