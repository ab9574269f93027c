"""Pre-load verification strategies.

Verification is advisory: a failing verifier is logged and the registry still
attempts the load.
"""

import logging
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class Verifier(Protocol):
    def verify(self, application_id: str, application_dir: Path) -> None:
        ...


class NullVerifier:
    """Default verifier: nothing to check."""

    def verify(self, application_id: str, application_dir: Path) -> None:
        return None


class DevelopmentLinker:
    """Links an application's own sub-packages into the running environment.

    Used for development checkouts, where an application's ``backend`` and
    ``web`` sub-packages are edited in place. Each sub-package that carries
    packaging metadata is installed in editable mode.
    """

    SUB_PACKAGES = ("backend", "web")
    PACKAGING_FILES = ("pyproject.toml", "setup.py")

    def __init__(self, command: Optional[Sequence[str]] = None, timeout: int = 300):
        self.command = list(command) if command else [sys.executable, "-m", "pip", "install", "-e"]
        self.timeout = timeout

    def _linkable(self, application_dir: Path) -> List[Path]:
        linkable = []
        for name in self.SUB_PACKAGES:
            sub_dir = application_dir / name
            if any((sub_dir / f).is_file() for f in self.PACKAGING_FILES):
                linkable.append(sub_dir)
        return linkable

    def verify(self, application_id: str, application_dir: Path) -> None:
        for sub_dir in self._linkable(application_dir):
            cmd = self.command + [str(sub_dir)]
            logger.info(f"Linking {sub_dir.name} for application '{application_id}'")
            try:
                result = subprocess.run(
                    cmd,
                    cwd=application_dir,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout,
                    check=False,
                )
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.error(f"Failed to link {sub_dir} for application '{application_id}': {e}")
                continue

            if result.returncode != 0:
                logger.error(
                    f"Linking {sub_dir} for application '{application_id}' exited with "
                    f"code {result.returncode}: {result.stderr.strip()}"
                )
