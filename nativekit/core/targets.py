"""
Target platforms and generator languages understood by the driver.
"""

from enum import Enum


class TargetPlatform(Enum):
    """Platform the native library is built for."""

    WINDOWS = "windows"
    MACOS = "macos"
    IOS = "ios"
    TVOS = "tvos"
    WATCHOS = "watchos"
    ANDROID = "android"

    @property
    def is_apple_mobile(self) -> bool:
        """True for the platforms that need AOT cross-compilation."""
        return self in (TargetPlatform.IOS, TargetPlatform.TVOS, TargetPlatform.WATCHOS)

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]

    def __str__(self) -> str:
        return self.display_name


_DISPLAY_NAMES = {
    TargetPlatform.WINDOWS: "Windows",
    TargetPlatform.MACOS: "MacOS",
    TargetPlatform.IOS: "iOS",
    TargetPlatform.TVOS: "TVOS",
    TargetPlatform.WATCHOS: "WatchOS",
    TargetPlatform.ANDROID: "Android",
}


class GeneratorKind(Enum):
    """Language the binding generator emitted."""

    C = "c"
    CPLUSPLUS = "cpp"
    OBJECTIVEC = "objectivec"


__all__ = ["TargetPlatform", "GeneratorKind"]
