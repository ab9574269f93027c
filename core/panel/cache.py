"""Derived icon cache.

Renditions are generated on first request and stored at a deterministic
path under the global cache directory. The presence of that file is the only
cache-hit signal; there is no TTL or source comparison, so a changed source
icon is only picked up after the cache is cleared.
"""

import asyncio
import logging
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from core.applications.application import Application
from core.applications.registry import ApplicationRegistry
from core.errors import (
    ApplicationNotFoundError,
    FallbackMissingError,
    RenditionError,
    UnknownRenditionError,
)
from core.panel.imaging import ImageResizer
from core.panel.renditions import DEFAULT_RENDITIONS, MEDIA_TYPES, Rendition, RenditionKind
from core.paths import PanelPaths, source_icon_path

logger = logging.getLogger(__name__)

FALLBACK_FORMAT = "webp"


class RenditionOutcome(str, Enum):
    HIT = "hit"
    GENERATED = "generated"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class RenditionAsset:
    """Bytes returned for an icon request."""

    data: bytes
    media_type: str
    outcome: RenditionOutcome
    path: Path


def _read_if_exists(path: Path) -> Optional[bytes]:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        return None


class AssetCache:
    """Serves icon renditions for loaded applications.

    Concurrent first requests for the same (application, rendition) pair
    share a single generation task; later arrivals await its result instead
    of resizing again.
    """

    def __init__(
        self,
        registry: ApplicationRegistry,
        paths: PanelPaths,
        resizer: ImageResizer,
        renditions: Optional[Dict[RenditionKind, Rendition]] = None,
    ):
        self.registry = registry
        self.paths = paths
        self.resizer = resizer
        self.renditions = dict(renditions or DEFAULT_RENDITIONS)
        self._inflight: Dict[Tuple[str, RenditionKind], "asyncio.Task[RenditionAsset]"] = {}

    def rendition_for(self, kind: Union[str, RenditionKind]) -> Rendition:
        """Look up a configured rendition.

        Raises:
            UnknownRenditionError: If the kind is not configured
        """
        try:
            rendition_kind = RenditionKind(kind)
        except ValueError as e:
            raise UnknownRenditionError(f"Unknown rendition kind: {kind!r}") from e
        rendition = self.renditions.get(rendition_kind)
        if rendition is None:
            raise UnknownRenditionError(f"Rendition not configured: {rendition_kind.value}")
        return rendition

    def cache_path(self, application_id: str, rendition: Rendition) -> Path:
        return self.paths.rendition_cache_path(application_id, rendition.kind.value, rendition.extension)

    async def fetch(self, application_id: str, kind: Union[str, RenditionKind]) -> RenditionAsset:
        """Return the requested rendition, generating it on first use.

        Args:
            application_id: Loaded application id
            kind: Rendition kind

        Returns:
            RenditionAsset with the cached, freshly generated or fallback bytes

        Raises:
            ApplicationNotFoundError: If the application is not loaded
            UnknownRenditionError: If the rendition kind is not configured
            OSError: If the application's cache directory cannot be created
            FallbackMissingError: If a fallback is needed but was never provisioned
        """
        rendition = self.rendition_for(kind)
        application = self.registry.find_by_id(application_id)
        if application is None:
            raise ApplicationNotFoundError(application_id)

        cache_path = self.cache_path(application.id, rendition)
        data = await asyncio.to_thread(_read_if_exists, cache_path)
        if data is not None:
            return RenditionAsset(data, rendition.media_type, RenditionOutcome.HIT, cache_path)

        key = (application.id, rendition.kind)
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._generate(application, rendition, cache_path))
            self._inflight[key] = task
            task.add_done_callback(lambda _: self._inflight.pop(key, None))
        else:
            logger.debug(f"Waiting for in-flight {rendition.kind.value} of '{application.id}'")

        # A cancelled requester must not cancel generation for the others
        return await asyncio.shield(task)

    async def _generate(self, application: Application, rendition: Rendition, cache_path: Path) -> RenditionAsset:
        data = await asyncio.to_thread(_read_if_exists, cache_path)
        if data is not None:
            return RenditionAsset(data, rendition.media_type, RenditionOutcome.HIT, cache_path)

        await asyncio.to_thread(cache_path.parent.mkdir, parents=True, exist_ok=True)

        source = source_icon_path(application.resolved_path, rendition.source)
        if not await asyncio.to_thread(source.is_file):
            logger.info(
                f"Application '{application.id}' has no {rendition.source}, serving fallback icon"
            )
            return await self.fallback()

        try:
            await asyncio.to_thread(
                self.resizer.resize,
                source,
                rendition.width,
                rendition.height,
                cache_path,
                rendition.format,
            )
            data = await asyncio.to_thread(cache_path.read_bytes)
        except (RenditionError, OSError) as e:
            logger.error(
                f"Failed to render {rendition.kind.value} for application '{application.id}': {e}"
            )
            return await self.fallback()

        logger.info(
            f"Generated {rendition.kind.value} for application '{application.id}' "
            f"({rendition.width}x{rendition.height} {rendition.format})"
        )
        return RenditionAsset(data, rendition.media_type, RenditionOutcome.GENERATED, cache_path)

    async def fallback(self) -> RenditionAsset:
        """Bytes of the global fallback icon."""
        path = self.paths.fallback_icon_path(FALLBACK_FORMAT)
        data = await asyncio.to_thread(_read_if_exists, path)
        if data is None:
            raise FallbackMissingError(f"Fallback icon missing at {path}")
        return RenditionAsset(data, MEDIA_TYPES[FALLBACK_FORMAT], RenditionOutcome.FALLBACK, path)

    def clear(self, application_id: Optional[str] = None) -> bool:
        """Delete cached renditions for one application, or for all of them."""
        return clear_cached_renditions(self.paths, application_id)


def clear_cached_renditions(paths: PanelPaths, application_id: Optional[str] = None) -> bool:
    """Delete cached renditions for one application, or for all of them.

    Returns:
        True if anything was removed
    """
    if application_id is None:
        target = paths.applications_cache_directory()
    else:
        target = paths.application_cache_directory(application_id)

    if not target.exists():
        return False

    shutil.rmtree(target)
    if application_id is None:
        target.mkdir(parents=True, exist_ok=True)
    logger.info(f"Cleared icon cache at {target}")
    return True
