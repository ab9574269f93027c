"""Entry-module loading - imports an application's backend and builds its instance."""

import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType

from core.applications.application import Application
from core.applications.descriptor import ApplicationDescriptor
from core.errors import LoadError

logger = logging.getLogger(__name__)

MODULE_PREFIX = "panel_application_"


def module_name_for(descriptor: ApplicationDescriptor) -> str:
    return f"{MODULE_PREFIX}{descriptor.id.replace('-', '_')}_{descriptor.entry_module}"


def import_entry_module(application_dir: Path, descriptor: ApplicationDescriptor) -> ModuleType:
    """Import the entry module named by the descriptor.

    Args:
        application_dir: Application install directory
        descriptor: Validated descriptor

    Returns:
        The executed module

    Raises:
        LoadError: If the module is missing or raises during import
    """
    module_file = application_dir / f"{descriptor.entry_module}.py"
    if not module_file.is_file():
        raise LoadError(descriptor.id, f"entry module not found: {module_file}")

    module_name = module_name_for(descriptor)

    # Add application directory to sys.path temporarily so sibling imports resolve
    app_dir = str(application_dir)
    added = app_dir not in sys.path
    if added:
        sys.path.insert(0, app_dir)

    try:
        spec = importlib.util.spec_from_file_location(module_name, module_file)
        if spec is None or spec.loader is None:
            raise LoadError(descriptor.id, f"cannot create module spec for {module_file}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except (Exception, SystemExit) as e:
            sys.modules.pop(module_name, None)
            raise LoadError(descriptor.id, f"entry module raised during import: {e!r}") from e
    finally:
        if added and app_dir in sys.path:
            sys.path.remove(app_dir)

    return module


def unload_entry_module(descriptor: ApplicationDescriptor) -> None:
    """Forget a previously imported entry module."""
    sys.modules.pop(module_name_for(descriptor), None)


def construct_application(module: ModuleType, descriptor: ApplicationDescriptor) -> Application:
    """Call the entry function and check what it returns.

    Raises:
        LoadError: If the entry function is missing, raises, or returns
            something other than an Application for this descriptor
    """
    factory = getattr(module, descriptor.entry_function, None)
    if factory is None:
        raise LoadError(
            descriptor.id,
            f"module {descriptor.entry_module} has no function '{descriptor.entry_function}'",
        )
    if not callable(factory):
        raise LoadError(descriptor.id, f"{descriptor.entry_point} is not callable")

    try:
        application = factory(descriptor)
    except (Exception, SystemExit) as e:
        raise LoadError(descriptor.id, f"{descriptor.entry_point} raised: {e!r}") from e

    if not isinstance(application, Application):
        raise LoadError(
            descriptor.id,
            f"{descriptor.entry_point} returned {type(application).__name__}, expected Application",
        )
    if application.id != descriptor.id:
        raise LoadError(
            descriptor.id,
            f"{descriptor.entry_point} returned application '{application.id}'",
        )
    return application
