"""Configuration loading and saving."""

import json
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from regraft.config.schema import Config
from regraft.utils.helpers import ensure_dir, get_data_path


def get_config_path() -> Path:
    """Get the default configuration file path (~/.regraft/config.json)."""
    return get_data_path() / "config.json"


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from a JSON file.

    Environment variables (REGRAFT_*) take precedence over the file. A
    missing or unreadable file yields the defaults.

    Args:
        config_path: File to read; defaults to get_config_path().

    Returns:
        The loaded configuration.
    """
    path = config_path or get_config_path()

    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return Config(**data)
        except (json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            logger.warning("Using default configuration.")

    return Config()


def save_config(config: Config, config_path: Path | None = None) -> Path:
    """
    Save configuration as JSON.

    Returns:
        The path written.
    """
    path = config_path or get_config_path()
    ensure_dir(path.parent)
    path.write_text(
        json.dumps(config.model_dump(), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
    return path
