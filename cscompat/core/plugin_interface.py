from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, List, Optional, Union

PathLike = Union[str, Path]


class OptionStore(ABC):
    """
    Abstract persisted key/value store for host options.
    Implementations fire `add_option_{name}` and `update_option_{name}` actions.
    """

    @abstractmethod
    def get(self, name: str, default: Any = None) -> Any:
        pass

    @abstractmethod
    def add(self, name: str, value: Any) -> bool:
        """
        Create an option. Returns False if it already exists.
        """
        pass

    @abstractmethod
    def update(self, name: str, value: Any, notify: bool = True) -> bool:
        """
        Change an option's value, creating it if missing.
        :param notify: Fire the update action when the value changes.
        Returns False when the stored value is unchanged.
        """
        pass


class Filesystem(ABC):
    """
    Abstract filesystem used by installers.
    Every mutating call returns a success boolean instead of raising.
    """

    @abstractmethod
    def exists(self, path: PathLike) -> bool:
        pass

    @abstractmethod
    def get_contents_array(self, path: PathLike) -> Optional[List[str]]:
        """
        Return the file's lines (newlines kept), or None if it can't be read.
        """
        pass

    @abstractmethod
    def mkdir(self, path: PathLike) -> bool:
        pass

    @abstractmethod
    def copy(self, source: PathLike, destination: PathLike) -> bool:
        pass

    @abstractmethod
    def rmdir(self, path: PathLike, recursive: bool = False) -> bool:
        pass


class PluginHost(ABC):
    """
    Abstract plugin registry owned by the host platform.
    Plugins are identified by their basename, e.g. 'woocommerce/woocommerce.py'.
    """

    @abstractmethod
    def is_active(self, basename: str) -> bool:
        pass

    @abstractmethod
    def activate(self, plugin: PathLike) -> None:
        """
        Activate a plugin by path or basename.
        Raises PluginActivationError on failure.
        """
        pass

    @abstractmethod
    def deactivate(self, plugins: Union[str, Iterable[str]]) -> None:
        pass

    @abstractmethod
    def invalidate_cache(self) -> None:
        """Drop the cached plugin list so newly copied files are seen."""
        pass
