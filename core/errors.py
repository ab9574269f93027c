"""Exception types shared by the registry, the asset cache and the routers."""


class PanelError(Exception):
    """Base exception for panel core errors."""


class DiscoveryError(PanelError):
    """Installed applications cannot be enumerated. Fatal to startup."""


class LoadError(PanelError):
    """A single application failed to load."""

    def __init__(self, application_id: str, reason: str):
        super().__init__(f"Failed to load application '{application_id}': {reason}")
        self.application_id = application_id
        self.reason = reason


class ApplicationStateError(PanelError):
    """An application was used in a way its lifecycle state does not allow."""


class ApplicationNotFoundError(PanelError):
    """The requested application id does not resolve to a loaded application."""

    def __init__(self, application_id: str):
        super().__init__(f"Application '{application_id}' not found")
        self.application_id = application_id


class UnknownRenditionError(PanelError):
    """The requested rendition kind is not configured."""


class RenditionError(PanelError):
    """A source icon could not be read or resized."""


class FallbackMissingError(PanelError):
    """The global fallback icon has not been provisioned."""
