"""
Toolchain detection and selection for NativeKit.

Resolves MSVC, Xcode clang or the Mono AOT cross-compiler depending on the
host operating system and the requested target platform.
"""

from .sdks import (
    SdkInfo,
    AppleSdkDetector,
    VisualStudioInstallation,
    find_visual_studio_installations,
    get_xcode_developer_path,
    get_xcode_clang,
    locate_runtime_root,
)

from .locator import (
    ToolchainHandle,
    ToolchainLocator,
    get_apple_target_framework_identifier,
    get_apple_aot_compiler,
    get_apple_device_sdk,
    get_apple_runtime_sdk,
)

__all__ = [
    "SdkInfo",
    "AppleSdkDetector",
    "VisualStudioInstallation",
    "find_visual_studio_installations",
    "get_xcode_developer_path",
    "get_xcode_clang",
    "locate_runtime_root",
    "ToolchainHandle",
    "ToolchainLocator",
    "get_apple_target_framework_identifier",
    "get_apple_aot_compiler",
    "get_apple_device_sdk",
    "get_apple_runtime_sdk",
]
