"""Application base class and the loaded-application info type."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from core.applications.descriptor import ApplicationDescriptor
from core.errors import ApplicationStateError


class _NotLoaded:
    """Sentinel for an application whose install path has not been resolved yet."""

    def __repr__(self) -> str:
        return "NOT_LOADED"

    def __bool__(self) -> bool:
        return False


NOT_LOADED = _NotLoaded()


@dataclass(frozen=True)
class LoadedApplicationInfo:
    """Outward-facing summary of a loaded application."""

    id: str
    display_name: str
    description: str
    has_embedded_frontend: bool
    external_url: Optional[str] = None

    @property
    def endpoint(self) -> Optional[str]:
        return f"/app/a/{self.id}/" if self.has_embedded_frontend else None

    def to_dict(self) -> dict:
        """Serialize for API responses."""
        data = {
            "id": self.id,
            "displayName": self.display_name,
            "description": self.description,
            "type": "frontend" if self.has_embedded_frontend else "externalFrontend",
        }
        if self.has_embedded_frontend:
            data["endpoint"] = self.endpoint
        elif self.external_url is not None:
            data["url"] = self.external_url
        return data


class Application:
    """Base class for applications.

    An application's entry module returns an instance of this class (or a
    subclass) from its entry function. Lifecycle hooks return ``self`` so
    they can be chained; override them for initialization and cleanup.
    """

    def __init__(self, descriptor: ApplicationDescriptor):
        self.descriptor = descriptor
        self._resolved_path: Union[Path, _NotLoaded] = NOT_LOADED

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def is_loaded(self) -> bool:
        return self._resolved_path is not NOT_LOADED

    @property
    def resolved_path(self) -> Path:
        """Absolute install path, available once the registry has loaded the application."""
        if self._resolved_path is NOT_LOADED:
            raise ApplicationStateError(f"Application '{self.id}' has not been loaded yet")
        return self._resolved_path

    @resolved_path.setter
    def resolved_path(self, path: Path) -> None:
        if self._resolved_path is not NOT_LOADED:
            raise ApplicationStateError(
                f"Application '{self.id}' is already bound to {self._resolved_path}"
            )
        self._resolved_path = Path(path).resolve()

    def info(self) -> LoadedApplicationInfo:
        return LoadedApplicationInfo(
            id=self.id,
            display_name=self.descriptor.display_name,
            description=self.descriptor.description,
            has_embedded_frontend=self.descriptor.has_embedded_frontend,
            external_url=self.descriptor.external_url,
        )

    def on_load(self) -> "Application":
        """Called once the application has been imported and bound to its path."""
        return self

    def on_after_install(self) -> "Application":
        """Called after the application is installed into a running instance."""
        return self

    def on_before_uninstall(self) -> "Application":
        """Called before the application is removed from the registry."""
        return self

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, path={self._resolved_path!r})"
