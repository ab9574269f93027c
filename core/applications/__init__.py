"""Application plugin system.

Imports are lazy so lightweight consumers (the admin CLI) can read
descriptors without importing the loader machinery.
"""

__all__ = [
    "Application",
    "ApplicationDescriptor",
    "ApplicationDiscovery",
    "ApplicationRegistry",
    "DevelopmentLinker",
    "LoadedApplicationInfo",
    "NullVerifier",
]


def __getattr__(name):
    if name in ("Application", "LoadedApplicationInfo"):
        from core.applications import application
        return getattr(application, name)
    if name == "ApplicationDescriptor":
        from core.applications.descriptor import ApplicationDescriptor
        return ApplicationDescriptor
    if name == "ApplicationDiscovery":
        from core.applications.discovery import ApplicationDiscovery
        return ApplicationDiscovery
    if name == "ApplicationRegistry":
        from core.applications.registry import ApplicationRegistry
        return ApplicationRegistry
    if name in ("DevelopmentLinker", "NullVerifier"):
        from core.applications import verification
        return getattr(verification, name)
    raise AttributeError(f"module 'core.applications' has no attribute {name!r}")
