"""
Host platform detection for NativeKit.

The compilation driver only needs to know which operating system and CPU it
runs on to pick a toolchain. Detection is cached for the lifetime of the
process.

Usage:
    from nativekit.core.platform import detect_platform

    info = detect_platform()
    if info.is_macos():
        ...
"""

import functools
import platform
from dataclasses import dataclass


@dataclass(frozen=True)
class PlatformInfo:
    """
    Host platform information.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos')
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
        os_version: OS version string (e.g., '10.0.19041', '14.1')
    """

    os: str
    arch: str
    os_version: str = ""

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').

        Example:
            >>> PlatformInfo('macos', 'arm64', '14.1').platform_string()
            'macos-arm64'
        """
        return f"{self.os}-{self.arch}"

    def is_windows(self) -> bool:
        return self.os == "windows"

    def is_macos(self) -> bool:
        return self.os == "macos"

    def __str__(self) -> str:
        if self.os_version:
            return f"{self.platform_string()} v{self.os_version}"
        return self.platform_string()


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(
        os=_detect_os(), arch=_detect_architecture(), os_version=_detect_os_version()
    )


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        Normalized OS name: 'windows', 'linux', 'macos', or the lower-cased
        platform.system() value for anything else
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "darwin":
        return "macos"
    elif system == "linux":
        return "linux"
    return system


def _detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    return machine


def _detect_os_version() -> str:
    system = platform.system().lower()

    if system == "windows":
        return platform.version()
    elif system == "darwin":
        return platform.mac_ver()[0] or "unknown"
    return platform.release()


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
]
