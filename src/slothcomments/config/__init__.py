"""Configuration for sloth-comments."""

from slothcomments.config.settings import DEFAULT_CONFIG_FILE, Settings, load_settings

__all__ = ["DEFAULT_CONFIG_FILE", "Settings", "load_settings"]
