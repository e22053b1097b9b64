import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from .hooks import HookManager
from .plugin_interface import OptionStore

logger = logging.getLogger(__name__)

OPTIONS_FILE_NAME = "options.json"


class MemoryOptionStore(OptionStore):
    """
    Option store kept in a dict.
    Fires `add_option_{name}` with (name, value) and
    `update_option_{name}` with (old_value, value, name).
    """

    def __init__(self, hooks: Optional[HookManager] = None, initial: Optional[Dict[str, Any]] = None):
        self.hooks = hooks or HookManager()
        self._options: Dict[str, Any] = dict(initial or {})

    def _persist(self) -> None:
        pass

    def get(self, name: str, default: Any = None) -> Any:
        return self._options.get(name, default)

    def add(self, name: str, value: Any) -> bool:
        if name in self._options:
            return False
        self._options[name] = value
        self._persist()
        logger.info(f"Option added: {name}={value!r}")
        self.hooks.do_action(f"add_option_{name}", name, value)
        return True

    def update(self, name: str, value: Any, notify: bool = True) -> bool:
        if name not in self._options:
            return self.add(name, value)

        old_value = self._options[name]
        if old_value == value:
            return False

        self._options[name] = value
        self._persist()
        logger.info(f"Option updated: {name} {old_value!r} -> {value!r}")
        if notify:
            self.hooks.do_action(f"update_option_{name}", old_value, value, name)
        return True


class JsonOptionStore(MemoryOptionStore):
    """
    Option store persisted to a JSON file.
    An unreadable file is logged and treated as empty.
    """

    def __init__(self, path: Path, hooks: Optional[HookManager] = None):
        super().__init__(hooks)
        self.path = Path(path)
        self._options = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except Exception as e:
            logger.error(f"Failed to load options from {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Options file {self.path} does not hold an object, ignoring it")
            return {}
        return data

    def _persist(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".options-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self._options, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except Exception:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise
