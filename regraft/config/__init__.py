"""Configuration module for regraft."""

from regraft.config.loader import get_config_path, load_config, save_config
from regraft.config.schema import Config

__all__ = ["Config", "get_config_path", "load_config", "save_config"]
