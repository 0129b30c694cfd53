"""
Application configuration.

Loads TOML configuration files from the repository ``config`` directory.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

import toml

from app.utils.constants import ConfigFile

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"

__all__ = ["Config", "ConfigFile", "get_config"]


class Config:
    """
    Parsed configuration file.

    The raw TOML document is exposed through ``data`` so callers can read
    optional sections with ``config.data.get(section, {})``.
    """

    def __init__(self, config_file: str, data: dict[str, Any]):
        self.config_file = config_file
        self.data = data

    def section(self, name: str) -> dict[str, Any]:
        """Return a top-level section, or an empty dict when absent."""
        return self.data.get(name, {})

    def __repr__(self):
        return f"<Config: {self.config_file}>"


@lru_cache(maxsize=None)
def get_config(config_file: str) -> Config:
    """
    Load configuration from a TOML file.

    Args:
        config_file: Configuration file name (e.g., "production.toml")

    Returns:
        Config instance wrapping the parsed document

    Raises:
        FileNotFoundError: If the file does not exist in the config directory
    """
    config_path = CONFIG_DIR / config_file
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.debug(f"Loading configuration from {config_path}")
    return Config(config_file, toml.load(config_path))
