"""
capkit Configuration Module

Usage:
    from capkit.configs import ConfigManager, configure_logging

    config = ConfigManager()
    configure_logging(config)
    name = config.get("registry.name", "default")
"""
from .config_manager import DEFAULT_CONFIG_PATH, ConfigManager, configure_logging

__all__ = [
    "ConfigManager",
    "configure_logging",
    "DEFAULT_CONFIG_PATH",
]
