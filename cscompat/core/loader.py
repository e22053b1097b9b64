import importlib.util
import logging
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Callable

from .hooks import HookManager

logger = logging.getLogger(__name__)

# Constants
MODULE_PREFIX = "cscompat_plugin_"

def module_name_for(basename: str) -> str:
    """Unique, importable module name for a plugin basename."""
    return MODULE_PREFIX + re.sub(r'\W', '_', basename.rsplit('.', 1)[0])

def load_plugin_module(basename: str, path: Path, hooks: HookManager, plugin_basename: Callable[[str], str]) -> ModuleType:
    """
    Execute a plugin file, injecting the host collaborators into its namespace
    so it registers its filters on the same HookManager as the host.
    Raises whatever the plugin raises; callers decide how to report it.
    """
    module_name = module_name_for(basename)
    logger.info(f"Loading plugin '{basename}' from {path}")

    spec = importlib.util.spec_from_file_location(module_name, str(path))
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot create an import spec for {path}")

    module = importlib.util.module_from_spec(spec)

    # --------------------------------------------------------------------
    # DEPENDENCY INJECTION: plugins talk to the host through these names
    # --------------------------------------------------------------------
    module.hooks = hooks
    module.plugin_basename = plugin_basename
    # --------------------------------------------------------------------

    spec.loader.exec_module(module)
    sys.modules[module_name] = module
    logger.info(f"Successfully executed plugin module: {basename}")
    return module


def unload_plugin_module(basename: str) -> None:
    """Forget a loaded plugin module so the next load executes the file again."""
    if sys.modules.pop(module_name_for(basename), None) is not None:
        logger.info(f"Unloaded plugin module: {basename}")
