"""
Configuration management for NativeKit.
"""

from .parser import (
    DEFAULT_CONFIG_NAME,
    AotConfig,
    NativeKitConfig,
    parse_config,
    parse_platform,
    parse_language,
    parse_abi,
)
from ..core.exceptions import ConfigError

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "AotConfig",
    "NativeKitConfig",
    "ConfigError",
    "parse_config",
    "parse_platform",
    "parse_language",
    "parse_abi",
]
