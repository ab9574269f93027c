"""Application registry - owns the live set of loaded applications."""
from __future__ import annotations

import logging
import threading
from typing import List, Optional

from core.applications.application import Application, LoadedApplicationInfo
from core.applications.discovery import ApplicationDiscovery
from core.applications.loader import construct_application, import_entry_module, unload_entry_module
from core.applications.verification import NullVerifier, Verifier
from core.errors import LoadError
from core.paths import PanelPaths, validate_application_id

logger = logging.getLogger(__name__)


class ApplicationRegistry:
    """Central registry for loaded applications.

    Loading is isolated per application: ``load`` never raises, so one broken
    application cannot stop the rest from loading. Ids are unique within the
    live set; a second load of a loaded id is refused.
    """

    def __init__(self, paths: PanelPaths, verifier: Optional[Verifier] = None):
        self.paths = paths
        self.discovery = ApplicationDiscovery(paths.install_root)
        self.verifier: Verifier = verifier or NullVerifier()
        self._applications: List[Application] = []
        self._lock = threading.RLock()

    def list_installed_identifiers(self) -> List[str]:
        """Identifiers of installed applications.

        Raises:
            DiscoveryError: If the install root cannot be read
        """
        return self.discovery.list_installed_identifiers()

    def verify(self, application_id: str) -> None:
        """Run the configured verifier. Failures are logged, never raised."""
        application_dir = self.paths.application_directory(application_id)
        try:
            self.verifier.verify(application_id, application_dir)
        except (Exception, SystemExit) as e:
            logger.error(f"Verification failed for application '{application_id}': {e}")

    def load(self, application_id: str) -> Optional[Application]:
        """Import, construct and register an application.

        Args:
            application_id: Installed application identifier

        Returns:
            The loaded Application, or None if loading failed
        """
        try:
            validate_application_id(application_id)
        except ValueError as e:
            logger.error(f"Refusing to load application: {e}")
            return None

        if self.find_by_id(application_id) is not None:
            logger.error(f"Application '{application_id}' is already loaded, skipping")
            return None

        self.verify(application_id)
        application_dir = self.paths.application_directory(application_id)
        logger.info(f"Loading application @ {application_dir}")

        descriptor = None
        try:
            descriptor = self.discovery.read_descriptor(application_dir)
            module = import_entry_module(application_dir, descriptor)
            application = construct_application(module, descriptor)
            application.resolved_path = application_dir

            try:
                application.on_load()
            except (Exception, SystemExit) as e:
                raise LoadError(application_id, f"on_load raised: {e!r}") from e

            with self._lock:
                if any(a.id == application_id for a in self._applications):
                    raise LoadError(application_id, "loaded concurrently by another caller")
                self._applications.append(application)

        except LoadError as e:
            logger.error(str(e))
            if descriptor is not None:
                unload_entry_module(descriptor)
            return None
        except (Exception, SystemExit) as e:
            logger.exception(f"Unexpected error loading application '{application_id}': {e}")
            if descriptor is not None:
                unload_entry_module(descriptor)
            return None

        logger.info(f"Loaded application: {application_id}")
        return application

    def load_all(self) -> List[Application]:
        """Load every installed application.

        Returns:
            Applications that loaded successfully, in install-listing order

        Raises:
            DiscoveryError: If installed applications cannot be enumerated
        """
        identifiers = self.list_installed_identifiers()
        logger.info(f"Loading applications: {identifiers}")

        loaded = []
        for application_id in identifiers:
            application = self.load(application_id)
            if application is not None:
                loaded.append(application)

        logger.info(f"Application loading finished, {len(loaded)}/{len(identifiers)} loaded")
        return loaded

    def install(self, application_id: str) -> Optional[Application]:
        """Load an application placed in the install root after startup.

        Calls ``on_after_install`` once loaded; if that hook fails the
        application is removed again.
        """
        application = self.load(application_id)
        if application is None:
            return None

        try:
            application.on_after_install()
        except (Exception, SystemExit) as e:
            logger.error(f"on_after_install failed for application '{application_id}': {e}")
            self._remove(application_id)
            unload_entry_module(application.descriptor)
            return None

        logger.info(f"Installed application: {application_id}")
        return application

    def uninstall(self, application_id: str) -> bool:
        """Run ``on_before_uninstall`` and drop the application from the live set.

        Files on disk are left in place.

        Returns:
            True if a loaded application was removed
        """
        application = self.find_by_id(application_id)
        if application is None:
            logger.warning(f"Cannot uninstall application '{application_id}': not loaded")
            return False

        try:
            application.on_before_uninstall()
        except (Exception, SystemExit) as e:
            logger.error(f"on_before_uninstall failed for application '{application_id}': {e}")

        removed = self._remove(application_id)
        if removed:
            unload_entry_module(application.descriptor)
            logger.info(f"Uninstalled application: {application_id}")
        return removed

    def find_by_id(self, application_id: str) -> Optional[Application]:
        """Get a loaded application by id."""
        with self._lock:
            for application in self._applications:
                if application.id == application_id:
                    return application
        return None

    def get_all(self) -> List[Application]:
        """Get all loaded applications in load order."""
        with self._lock:
            return list(self._applications)

    def list_loaded(self) -> List[LoadedApplicationInfo]:
        """Summaries of all loaded applications, for outward-facing listings."""
        return [application.info() for application in self.get_all()]

    def loaded_ids(self) -> List[str]:
        return [application.id for application in self.get_all()]

    def count(self) -> int:
        with self._lock:
            return len(self._applications)

    def _remove(self, application_id: str) -> bool:
        with self._lock:
            before = len(self._applications)
            self._applications = [a for a in self._applications if a.id != application_id]
            return len(self._applications) != before
