"""Configuration management for flowbuddy.

Loads and validates YAML-based configuration with Pydantic models.
Supports environment variable overrides for sensitive values like
API keys.
"""

from flowbuddy.config.settings import Settings, load_settings, save_preferences

__all__ = ["Settings", "load_settings", "save_preferences"]
