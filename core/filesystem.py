"""Startup provisioning of the instance filesystem.

Creates the directory structure the panel relies on, provisions the global
fallback icon, and generates the instance logo sizes. Each step logs and
continues on failure; a missing fallback only surfaces later, when an icon
request actually needs it.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from core.errors import RenditionError
from core.panel.imaging import ImageResizer, render_placeholder
from core.paths import PanelPaths

logger = logging.getLogger(__name__)

FALLBACK_ICON_SIZE = 256


def _ensure_directory(path: Path) -> bool:
    if path.is_dir():
        logger.info(f"Verified {path} directory.")
        return True
    try:
        path.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created {path} directory.")
        return True
    except OSError as e:
        logger.error(f"Failed to create {path} directory: {e}")
        return False


def provision_fallback_icon(
    paths: PanelPaths,
    resizer: ImageResizer,
    default_icon: Optional[Path] = None,
) -> bool:
    """Make sure the global fallback icon exists.

    Args:
        paths: Path resolver
        resizer: Used to convert ``default_icon`` to the fallback format
        default_icon: Image to use as the fallback; a placeholder is drawn if absent

    Returns:
        True if the fallback icon exists afterwards
    """
    target = paths.fallback_icon_path()
    if target.is_file():
        logger.info(f"Verified {target} exists.")
        return True

    try:
        if default_icon is not None and default_icon.is_file():
            resizer.resize(default_icon, FALLBACK_ICON_SIZE, FALLBACK_ICON_SIZE, target, "webp")
            logger.info(f"Provisioned fallback icon from {default_icon}.")
        else:
            render_placeholder(target, FALLBACK_ICON_SIZE)
            logger.info(f"Provisioned placeholder fallback icon at {target}.")
    except RenditionError as e:
        logger.error(f"Failed to provision fallback icon: {e}")
        return False
    return True


def generate_instance_logos(paths: PanelPaths, resizer: ImageResizer, sizes: Iterable[int]) -> int:
    """Render the instance logo at each size that does not exist yet.

    Returns:
        Number of logos generated
    """
    source = paths.instance_logo_path()
    if not source.is_file():
        logger.info(f"No instance logo at {source}, skipping logo generation")
        return 0

    generated = 0
    for dimension in sizes:
        target = paths.instance_logo_path(dimension)
        if target.is_file():
            logger.debug(f"instanceLogo @ {dimension} already exists, not generating")
            continue
        try:
            resizer.resize(source, dimension, dimension, target, "webp")
        except RenditionError as e:
            logger.error(f"Failed to generate instanceLogo @ {dimension}: {e}")
            continue
        generated += 1
        logger.info(f"Generated instanceLogo @ {dimension}.")
    return generated


def provision_filesystem(
    paths: PanelPaths,
    resizer: ImageResizer,
    default_icon: Optional[Path] = None,
    logo_sizes: Iterable[int] = (),
) -> None:
    """Create the directory layout and global assets. Run once at startup."""
    for directory in (
        paths.fs_root,
        paths.global_cache_directory(),
        paths.system_directory(),
        paths.applications_cache_directory(),
    ):
        _ensure_directory(directory)

    provision_fallback_icon(paths, resizer, default_icon)
    generate_instance_logos(paths, resizer, logo_sizes)
    logger.info("Verified filesystem structure!")
