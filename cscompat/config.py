"""
Runtime configuration.

Values come from `config.json` in the base directory, then environment
variables override them.
"""
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.json"
LOG_FILE_NAME = "cscompat.log"


def get_base_path() -> Path:
    """
    Determine the base path of the application.
    Next to the executable when frozen, the working directory otherwise.
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(os.path.abspath("."))


@dataclass
class AppConfig:
    plugin_dir: Path
    data_dir: Path
    log_dir: Path
    debug: bool = False

    @property
    def options_file(self) -> Path:
        return self.data_dir / "options.json"

    @property
    def log_file(self) -> Path:
        return self.log_dir / LOG_FILE_NAME

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.INFO

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        for key in ('plugin_dir', 'data_dir', 'log_dir'):
            data[key] = str(data[key])
        return data


def load_config(base_path: Optional[Path] = None) -> AppConfig:
    """Load configuration, falling back to defaults under the base path."""
    base_path = Path(base_path) if base_path else get_base_path()
    config_file = base_path / CONFIG_FILE_NAME

    raw: Dict[str, Any] = {}
    if config_file.exists():
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except Exception as e:
            logger.error(f"Failed to load config: {e}")

    def pick(key: str, env_name: str, default: Path) -> Path:
        value = os.environ.get(env_name) or raw.get(key)
        path = Path(value) if value else default
        return path if path.is_absolute() else base_path / path

    return AppConfig(
        plugin_dir=pick('plugin_dir', 'CSCOMPAT_PLUGIN_DIR', base_path / 'plugins'),
        data_dir=pick('data_dir', 'CSCOMPAT_DATA_DIR', base_path / 'data'),
        log_dir=pick('log_dir', 'CSCOMPAT_LOG_DIR', base_path / 'logs'),
        debug=os.environ.get('FLASK_ENV') == 'development' or bool(raw.get('debug', False)),
    )

