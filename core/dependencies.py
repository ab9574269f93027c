"""Application context and FastAPI dependency providers.

The context is built once at startup and stored on ``app.state``; routers
reach it through ``get_context`` instead of module-level singletons, which
keeps tests free to build their own.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from fastapi import HTTPException, Request

from core import constants
from core.applications.registry import ApplicationRegistry
from core.applications.verification import DevelopmentLinker, NullVerifier, Verifier
from core.panel.cache import AssetCache
from core.panel.imaging import ImageResizer, PillowResizer
from core.panel.records import JsonRecordStore, RecordStore
from core.panel.shortcuts import PanelService
from core.paths import PanelPaths

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a request handler needs, wired together once."""

    paths: PanelPaths
    registry: ApplicationRegistry
    cache: AssetCache
    panel: PanelService
    resizer: ImageResizer
    default_icon: Optional[Path] = None
    logo_sizes: List[int] = field(default_factory=list)


def build_context(
    fs_root: Optional[Path] = None,
    install_root: Optional[Path] = None,
    resizer: Optional[ImageResizer] = None,
    verifier: Optional[Verifier] = None,
    store: Optional[RecordStore] = None,
    link_development_applications: Optional[bool] = None,
    default_icon: Optional[Path] = None,
    default_pins: Optional[Sequence[str]] = None,
    logo_sizes: Optional[Sequence[int]] = None,
) -> AppContext:
    """Create the application context.

    Any argument left as None falls back to the value from ``core.constants``.
    """
    paths = PanelPaths(
        fs_root=fs_root or constants.FS_ROOT,
        install_root=install_root or constants.APPLICATIONS_DIR,
    )

    if verifier is None:
        link = constants.LINK_DEVELOPMENT_APPLICATIONS if link_development_applications is None else link_development_applications
        verifier = DevelopmentLinker() if link else NullVerifier()

    resizer = resizer or PillowResizer()
    registry = ApplicationRegistry(paths, verifier=verifier)
    cache = AssetCache(registry, paths, resizer)
    panel = PanelService(
        store=store or JsonRecordStore(paths.records_file()),
        registry=registry,
        default_pins=constants.DEFAULT_PINNED_APPLICATIONS if default_pins is None else default_pins,
        default_widgets=constants.DEFAULT_PANEL_WIDGETS,
    )

    if default_icon is None and constants.DEFAULT_ICON_PATH:
        default_icon = Path(constants.DEFAULT_ICON_PATH)

    logger.info(f"Created AppContext (fs root {paths.fs_root}, applications {paths.install_root})")
    return AppContext(
        paths=paths,
        registry=registry,
        cache=cache,
        panel=panel,
        resizer=resizer,
        default_icon=default_icon,
        logo_sizes=list(constants.INSTANCE_LOGO_SIZES if logo_sizes is None else logo_sizes),
    )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context attached at startup."""
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Service is starting up")
    return context


def get_request_username(request: Request) -> str:
    """Username supplied by the authentication layer in front of this service."""
    username = request.headers.get("username")
    if not username:
        raise HTTPException(status_code=401, detail="Missing username")
    return username
