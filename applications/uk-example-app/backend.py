"""Example application entry module."""

import logging

from core.applications import Application

logger = logging.getLogger(__name__)


class ExampleApplication(Application):
    """Logs its lifecycle transitions."""

    def on_load(self):
        logger.info(f"[{self.id}] loaded from {self.resolved_path}")
        return self

    def on_before_uninstall(self):
        logger.info(f"[{self.id}] uninstalling")
        return self


def register(descriptor):
    """Entry point - called by the registry with this application's descriptor."""
    return ExampleApplication(descriptor)
