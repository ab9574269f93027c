"""Global constants for the panel service."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Directory paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _resolve_dir(env_name: str, default: str) -> Path:
    """Resolve a directory from the environment, relative paths against PROJECT_ROOT."""
    value = Path(os.getenv(env_name, "") or default)
    return value if value.is_absolute() else (PROJECT_ROOT / value).resolve()


FS_ROOT = _resolve_dir("PANEL_FS_ROOT", "fs")                 # instance data (cache, system assets)
APPLICATIONS_DIR = _resolve_dir("APPLICATIONS_DIR", "applications")  # installed applications

# Development flags
LINK_DEVELOPMENT_APPLICATIONS = os.getenv("LINK_DEVELOPMENT_APPLICATIONS", "false").lower() == "true"

# Optional image used to provision the global fallback icon
DEFAULT_ICON_PATH = os.getenv("DEFAULT_ICON_PATH", "") or None

_DEFAULT_PINNED_FALLBACK = "uk-ewsgit-dash,uk-ewsgit-files,uk-ewsgit-store,uk-ewsgit-weather"
DEFAULT_PINNED_APPLICATIONS = [
    p.strip()
    for p in os.getenv("DEFAULT_PINNED_APPLICATIONS", _DEFAULT_PINNED_FALLBACK).split(",")
    if p.strip()
]

DEFAULT_PANEL_WIDGETS = [
    "InstanceLogo",
    "ApplicationLauncher",
    "Separator",
    "QuickShortcuts",
    "LocalhostIndicator",
    "UserProfile",
]

# Instance logo sizes generated at startup (px)
INSTANCE_LOGO_SIZES = [32, 40, 64, 128, 256, 512, 768, 1024]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", "3563"))
