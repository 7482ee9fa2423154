"""Configuration module for inspectsonar."""

from inspectsonar.config.loader import get_config_path, load_config, save_config
from inspectsonar.config.schema import Config, FilterConfig, OverridesConfig, SensorConfig, ValidationConfig

__all__ = [
    "Config",
    "FilterConfig",
    "OverridesConfig",
    "SensorConfig",
    "ValidationConfig",
    "get_config_path",
    "load_config",
    "save_config",
]
