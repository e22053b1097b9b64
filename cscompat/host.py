import logging
from dataclasses import dataclass

from cscompat.compat.compat import Compat
from cscompat.config import AppConfig
from cscompat.core.admin import AdminSettings
from cscompat.core.filesystem import LocalFilesystem
from cscompat.core.hooks import HookManager
from cscompat.core.options import JsonOptionStore
from cscompat.core.registry import PluginRegistry

logger = logging.getLogger(__name__)


@dataclass
class Host:
    """Everything a request needs, wired together once per process."""
    config: AppConfig
    hooks: HookManager
    options: JsonOptionStore
    filesystem: LocalFilesystem
    registry: PluginRegistry
    admin: AdminSettings
    compat: Compat


def build_host(config: AppConfig) -> Host:
    """
    Create the host collaborators, register the compat hooks and load the
    plugins that are already active.
    """
    config.plugin_dir.mkdir(parents=True, exist_ok=True)

    hooks = HookManager()
    options = JsonOptionStore(config.options_file, hooks)
    filesystem = LocalFilesystem()
    registry = PluginRegistry(config.plugin_dir, options, hooks)
    admin = AdminSettings(hooks, options)
    compat = Compat(hooks, options, filesystem, registry, admin, registry.plugin_dir)
    compat.register()

    registry.load_active_plugins()
    logger.info(f"Host ready. Plugin dir: {registry.plugin_dir}, active plugins: {registry.get_active_plugins()}")
    return Host(config, hooks, options, filesystem, registry, admin, compat)
