"""Configuration management for the files CLI."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import DEFAULT_CHUNK_SIZE, DEFAULT_NAMESPACE
from common.logging_config import get_logger
from gridstore.config import DEFAULT_DATABASE_PATH

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.gridfiles' / 'config.json'


def default_config_path() -> Path:
    """Config file location: FILES_CONFIG_PATH, else ~/.gridfiles/config.json."""
    env_path = os.environ.get("FILES_CONFIG_PATH")
    return Path(env_path) if env_path else DEFAULT_CONFIG_PATH


class Config:
    """Manages CLI configuration stored in JSON file.

    Values resolve in this order: environment variable, config file,
    built-in default. Command-line options are applied on top by the caller.
    """

    DEFAULT_CONFIG = {
        "database_path": DEFAULT_DATABASE_PATH,
        "namespace": DEFAULT_NAMESPACE,
        "default_chunk_size": DEFAULT_CHUNK_SIZE,
        "log_level": "WARNING",
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.gridfiles/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("config root must be an object")
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, ValueError, OSError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(f"Ignoring unreadable config {self.config_path} ({e}); backing up to {backup_path}")
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config: {copy_error}")
                return self.DEFAULT_CONFIG.copy()

        self.data = self.DEFAULT_CONFIG.copy()
        try:
            self.save()
        except OSError as e:
            logger.debug(f"Could not write default config to {self.config_path}: {e}")
        return self.data

    def save(self) -> None:
        """Save current configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self.data, f, indent=2)

    def get_database_path(self) -> str:
        return os.environ.get("FILES_DATABASE_PATH") or str(self.data.get('database_path', DEFAULT_DATABASE_PATH))

    def get_namespace(self) -> str:
        return os.environ.get("FILES_NAMESPACE") or str(self.data.get('namespace', DEFAULT_NAMESPACE))

    def get_default_chunk_size(self) -> int:
        """
        Get the chunk size used when put is given none.

        Returns:
            Chunk size in bytes; a non-integer value falls back to the built-in default
        """
        value = self.data.get('default_chunk_size', DEFAULT_CHUNK_SIZE)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-integer default_chunk_size {value!r}")
            return DEFAULT_CHUNK_SIZE

    def get_log_level(self) -> Optional[str]:
        return os.environ.get("LOG_LEVEL") or self.data.get('log_level')
