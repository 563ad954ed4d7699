"""Configuration management for gtp."""

import logging
import tomllib
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
from xdg_base_dirs import xdg_config_home

from .errors import ConfigError

logger = logging.getLogger(__name__)

STORE_FILENAME = ".gtplist"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Application configuration."""

    store_path: Optional[Path] = None
    show_valid_until: bool = False
    log_level: str = "WARNING"

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from file.

        Args:
            config_path: Path to config file, defaults to XDG_CONFIG_HOME/gtp/config.toml

        Returns:
            Config instance with loaded settings

        Raises:
            ConfigError: If the file is not valid TOML or a value has the wrong type
        """
        if config_path is None:
            config_path = default_config_path()

        config = cls()

        if config_path.exists():
            logger.debug("Loading config from %s", config_path)
            try:
                with open(config_path, "rb") as f:
                    data = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"{config_path}: {exc}") from exc

            if "store_path" in data:
                if not isinstance(data["store_path"], str):
                    raise ConfigError(f"{config_path}: store_path must be a string")
                config.store_path = Path(data["store_path"]).expanduser()
            if "show_valid_until" in data:
                if not isinstance(data["show_valid_until"], bool):
                    raise ConfigError(f"{config_path}: show_valid_until must be a boolean")
                config.show_valid_until = data["show_valid_until"]
            if "log_level" in data:
                level = str(data["log_level"]).upper()
                if level not in LOG_LEVELS:
                    raise ConfigError(
                        f"{config_path}: log_level must be one of {', '.join(LOG_LEVELS)}"
                    )
                config.log_level = level

        return config


def default_config_path() -> Path:
    return xdg_config_home() / "gtp" / "config.toml"


def get_default_store_path(
    custom_path: Optional[Path] = None, config: Optional[Config] = None
) -> Path:
    """Get the store path based on config and arguments.

    Lookup order:
    1. Custom path argument
    2. Config file store_path
    3. ~/.gtplist

    Args:
        custom_path: Optional custom store path
        config: Already loaded config, loaded from disk when omitted

    Returns:
        Path to use for the store
    """
    if custom_path:
        return custom_path

    if config is None:
        config = Config.load()
    if config.store_path:
        return config.store_path

    return Path.home() / STORE_FILENAME
