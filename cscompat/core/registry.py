import logging
import re
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Union

from .hooks import HookManager, HookRecord
from .loader import load_plugin_module, unload_plugin_module
from .plugin_interface import OptionStore, PathLike, PluginHost

logger = logging.getLogger(__name__)

# Constants
ACTIVE_PLUGINS_OPTION = "active_plugins"
HEADER_READ_BYTES = 8192
PLUGIN_HEADERS = {
    'name': 'Plugin Name',
    'description': 'Description',
    'author': 'Author',
    'version': 'Version',
    'requires_cp': 'Requires CP',
    'requires_python': 'Requires Python',
    'update_uri': 'Update URI',
    'license': 'License',
}


class LoadedPlugin(NamedTuple):
    module: ModuleType
    hooks: List[HookRecord]


class PluginActivationError(Exception):
    """Raised when a plugin can't be validated or loaded."""

    def __init__(self, basename: str, reason: str):
        super().__init__(f"{basename}: {reason}")
        self.basename = basename
        self.reason = reason


def read_plugin_headers(path: Path) -> Dict[str, str]:
    """
    Parse `Key: value` header lines from the top of a plugin file.
    Leading comment decoration (#, *, /) is ignored.
    """
    try:
        with open(path, 'r', encoding='utf-8', errors='replace') as f:
            head = f.read(HEADER_READ_BYTES)
    except OSError as e:
        logger.warning(f"Registry: Can't read headers from {path}: {e}")
        return {}

    headers = {}
    for key, label in PLUGIN_HEADERS.items():
        match = re.search(r'^[ \t/*#@]*' + re.escape(label) + r':(.*)$', head, re.MULTILINE | re.IGNORECASE)
        headers[key] = match.group(1).strip() if match else ''
    return headers


class PluginRegistry(PluginHost):
    """
    Host registry for plugins in `<plugin_dir>/<slug>/<file>.py`.
    Active state is persisted in the `active_plugins` option.
    """

    def __init__(self, plugin_dir: Path, options: OptionStore, hooks: HookManager):
        self.plugin_dir = Path(plugin_dir).resolve()
        self.options = options
        self.hooks = hooks
        self._cache: Optional[Dict[str, Dict[str, str]]] = None
        self._loaded: Dict[str, LoadedPlugin] = {}

    def plugin_basename(self, path: PathLike) -> str:
        """
        Return the plugin identifier for a path, relative to the plugin dir.
        Basenames passed in are normalised ('/slug/file.py' -> 'slug/file.py').
        """
        candidate = Path(path)
        if candidate.is_absolute():
            try:
                return candidate.resolve().relative_to(self.plugin_dir).as_posix()
            except ValueError:
                pass
        return str(path).replace('\\', '/').lstrip('/')

    def plugin_path(self, basename: str) -> Path:
        return self.plugin_dir / self.plugin_basename(basename)

    def get_plugins(self) -> Dict[str, Dict[str, str]]:
        """
        Scan the plugin dir for files with a `Plugin Name` header.
        The result is cached until invalidate_cache() is called.
        """
        if self._cache is not None:
            return self._cache

        plugins = {}
        if self.plugin_dir.is_dir():
            candidates = []
            for item in sorted(self.plugin_dir.iterdir()):
                if item.is_dir():
                    candidates.extend(sorted(item.glob('*.py')))
                elif item.suffix == '.py':
                    candidates.append(item)

            for path in candidates:
                headers = read_plugin_headers(path)
                if headers.get('name'):
                    plugins[self.plugin_basename(path)] = headers
        else:
            logger.warning(f"Registry: Plugin directory not found: {self.plugin_dir}")

        logger.debug(f"Registry: Found {len(plugins)} plugins in {self.plugin_dir}")
        self._cache = plugins
        return plugins

    def invalidate_cache(self) -> None:
        self._cache = None
        logger.debug("Registry: Plugin cache invalidated")

    def get_active_plugins(self) -> List[str]:
        active = self.options.get(ACTIVE_PLUGINS_OPTION, [])
        return list(active) if isinstance(active, list) else []

    def is_active(self, basename: str) -> bool:
        return self.plugin_basename(basename) in self.get_active_plugins()

    def _load(self, basename: str) -> None:
        if basename in self._loaded:
            return
        with self.hooks.recording() as added:
            try:
                module = load_plugin_module(basename, self.plugin_path(basename), self.hooks, self.plugin_basename)
            except Exception:
                # Drop whatever the plugin registered before it failed
                self.hooks.remove_all(added)
                raise
        self._loaded[basename] = LoadedPlugin(module, list(added))

    def _unload(self, basename: str) -> None:
        loaded = self._loaded.pop(basename, None)
        if loaded is None:
            return
        self.hooks.remove_all(loaded.hooks)
        unload_plugin_module(basename)
        logger.debug(f"Registry: Removed {len(loaded.hooks)} hooks added by {basename}")

    def activate(self, plugin: PathLike) -> None:
        basename = self.plugin_basename(plugin)
        if not self.plugin_path(basename).is_file():
            raise PluginActivationError(basename, "Plugin file does not exist.")
        if basename not in self.get_plugins():
            raise PluginActivationError(basename, "Plugin file does not have a valid header.")

        if self.is_active(basename):
            logger.debug(f"Registry: {basename} is already active")
            return

        try:
            self._load(basename)
        except Exception as e:
            logger.error(f"Registry: Failed to load plugin '{basename}': {e}", exc_info=True)
            raise PluginActivationError(basename, f"Plugin could not be loaded: {e}") from e

        self.options.update(ACTIVE_PLUGINS_OPTION, sorted(self.get_active_plugins() + [basename]))
        logger.info(f"Registry: Activated plugin {basename}")
        self.hooks.do_action('activated_plugin', basename)

    def deactivate(self, plugins: Union[str, Iterable[str]]) -> None:
        if isinstance(plugins, str):
            plugins = [plugins]

        active = self.get_active_plugins()
        for plugin in plugins:
            basename = self.plugin_basename(plugin)
            self._unload(basename)
            if basename not in active:
                continue
            active.remove(basename)
            logger.info(f"Registry: Deactivated plugin {basename}")
            self.hooks.do_action('deactivated_plugin', basename)
        self.options.update(ACTIVE_PLUGINS_OPTION, active)

    def load_active_plugins(self) -> None:
        """
        Boot-time loading of every active plugin.
        Missing files are deactivated; broken plugins are logged and skipped.
        """
        for basename in self.get_active_plugins():
            if not self.plugin_path(basename).is_file():
                logger.warning(f"Registry: Active plugin {basename} is missing, deactivating it")
                self.deactivate(basename)
                continue
            try:
                self._load(basename)
            except Exception as e:
                logger.error(f"Registry: Failed to load active plugin '{basename}': {e}", exc_info=True)

    def get_plugin_row_meta(self, basename: str) -> List[str]:
        """Registry UI row links for a plugin, after the `plugin_row_meta` filter."""
        basename = self.plugin_basename(basename)
        headers = self.get_plugins().get(basename, {})
        meta = []
        if headers.get('version'):
            meta.append(f"Version {headers['version']}")
        if headers.get('author'):
            meta.append(f"By {headers['author']}")
        meta.append("View details")
        return self.hooks.apply_filters('plugin_row_meta', meta, basename)

    def list_plugins(self) -> List[Dict[str, Any]]:
        active = self.get_active_plugins()
        return [
            {
                'id': basename,
                'name': headers.get('name'),
                'version': headers.get('version'),
                'description': headers.get('description'),
                'author': headers.get('author'),
                'active': basename in active,
                'row_meta': self.get_plugin_row_meta(basename),
            }
            for basename, headers in self.get_plugins().items()
        ]
