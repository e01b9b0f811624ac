"""Configuration management."""

from stricture.config.loader import load_config
from stricture.config.settings import Settings

__all__ = ["Settings", "load_config"]
