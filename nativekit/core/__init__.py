"""
Core functionality for NativeKit.

This package contains the foundational modules that other components depend on.
"""

from .platform import (
    PlatformInfo,
    detect_platform,
    clear_platform_cache,
)

from .targets import (
    TargetPlatform,
    GeneratorKind,
)

from .exceptions import (
    NativeKitError,
    ToolchainError,
    SdkNotFoundError,
    SdkVersionUnsupportedError,
    UnsupportedTargetError,
    CompilerProcessError,
    ConfigError,
)

__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    "TargetPlatform",
    "GeneratorKind",
    "NativeKitError",
    "ToolchainError",
    "SdkNotFoundError",
    "SdkVersionUnsupportedError",
    "UnsupportedTargetError",
    "CompilerProcessError",
    "ConfigError",
]
