import logging
import shutil
from pathlib import Path
from typing import List, Optional

from .plugin_interface import Filesystem, PathLike

logger = logging.getLogger(__name__)


class LocalFilesystem(Filesystem):
    """
    Direct filesystem access.
    Errors are logged and reported through the return value.
    """

    def exists(self, path: PathLike) -> bool:
        return Path(path).exists()

    def get_contents_array(self, path: PathLike) -> Optional[List[str]]:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.readlines()
        except Exception as e:
            logger.error(f"Filesystem: Failed to read {path}: {e}")
            return None

    def mkdir(self, path: PathLike) -> bool:
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
            return True
        except Exception as e:
            logger.error(f"Filesystem: Failed to create directory {path}: {e}")
            return False

    def copy(self, source: PathLike, destination: PathLike) -> bool:
        try:
            shutil.copyfile(source, destination)
            logger.debug(f"Filesystem: Copied {source} -> {destination}")
            return True
        except Exception as e:
            logger.error(f"Filesystem: Failed to copy {source} -> {destination}: {e}")
            return False

    def rmdir(self, path: PathLike, recursive: bool = False) -> bool:
        target = Path(path)
        try:
            if recursive:
                shutil.rmtree(target)
            else:
                target.rmdir()
            logger.debug(f"Filesystem: Removed {target}")
            return True
        except Exception as e:
            logger.error(f"Filesystem: Failed to remove {target}: {e}")
            return False
