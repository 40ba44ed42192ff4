"""
nativekit/toolchain/locator.py

Toolchain selection - decides which compiler handles a target platform on the
current host and resolves it to an executable path.

Selection cascade:
- Windows host, Windows target: MSVC cl.exe from the first Visual Studio found
- macOS host, macOS target: clang from the active Xcode developer directory
- macOS host, iOS/tvOS/watchOS target: Mono AOT cross-compiler from the Xamarin SDK
- anything else: UnsupportedTargetError, raised before any probing
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Tuple

from ..core.exceptions import (
    SdkNotFoundError,
    SdkVersionUnsupportedError,
    UnsupportedTargetError,
)
from ..core.platform import PlatformInfo, detect_platform
from ..core.targets import TargetPlatform
from .sdks import (
    DEFAULT_VSWHERE_PATH,
    DEFAULT_WINDOWS_KITS_ROOT,
    AppleSdkDetector,
    find_visual_studio_installations,
    get_xcode_clang,
    get_xcode_developer_path,
    locate_runtime_root,
)

logger = logging.getLogger(__name__)

MINIMUM_XAMARIN_IOS_MAJOR = 10

APPLE_TARGET_FRAMEWORK_IDENTIFIERS: Dict[TargetPlatform, str] = {
    TargetPlatform.MACOS: "Xamarin.Mac",
    TargetPlatform.IOS: "Xamarin.iOS",
    TargetPlatform.WATCHOS: "Xamarin.WatchOS",
    TargetPlatform.TVOS: "Xamarin.TVOS",
}

# (platform, is64bits) -> path relative to the SDK root
APPLE_AOT_COMPILERS: Dict[Tuple[TargetPlatform, bool], Tuple[str, ...]] = {
    (TargetPlatform.IOS, False): ("bin", "arm-darwin-mono-sgen"),
    (TargetPlatform.IOS, True): ("bin", "arm64-darwin-mono-sgen"),
    (TargetPlatform.WATCHOS, False): ("bin", "armv7k-unknown-darwin-mono-sgen"),
    (TargetPlatform.WATCHOS, True): ("bin", "armv7k-unknown-darwin-mono-sgen"),
    (TargetPlatform.TVOS, False): ("bin", "aarch64-unknown-darwin-mono-sgen"),
    (TargetPlatform.TVOS, True): ("bin", "aarch64-unknown-darwin-mono-sgen"),
}

APPLE_DEVICE_SDKS: Dict[TargetPlatform, str] = {
    TargetPlatform.IOS: "iPhoneOS",
    TargetPlatform.TVOS: "AppleTVOS",
    TargetPlatform.WATCHOS: "WatchOS",
}

# Mono runtime headers and static libraries shipped inside the Xamarin SDK
APPLE_RUNTIME_SDKS: Dict[TargetPlatform, str] = {
    TargetPlatform.IOS: "MonoTouch.iphoneos.sdk",
    TargetPlatform.TVOS: "Xamarin.AppleTVOS.sdk",
    TargetPlatform.WATCHOS: "Xamarin.WatchOS.sdk",
}


@dataclass(frozen=True)
class ToolchainHandle:
    """
    A resolved compiler ready to be invoked.

    Attributes:
        compiler: Absolute path to the compiler executable
        env: Environment variables to add to the inherited environment
        sdk_root: Root of the SDK the compiler was found in
        runtime_root: Mono runtime root providing headers and libraries
    """

    compiler: Path
    env: Dict[str, str] = field(default_factory=dict)
    sdk_root: Optional[Path] = None
    runtime_root: Optional[Path] = None


def get_apple_target_framework_identifier(platform: TargetPlatform) -> str:
    """
    Get the Xamarin target framework identifier for an Apple platform.

    Raises:
        UnsupportedTargetError: If the platform is not an Apple platform
    """
    try:
        return APPLE_TARGET_FRAMEWORK_IDENTIFIERS[platform]
    except KeyError:
        raise UnsupportedTargetError(f"Unknown Apple target platform: {platform}")


def get_apple_aot_compiler(
    platform: TargetPlatform, cross_prefix: Path, is64bits: bool
) -> Path:
    """
    Get the AOT cross-compiler path inside a Xamarin SDK.

    Args:
        platform: Apple mobile platform
        cross_prefix: SDK root
        is64bits: Whether the target architecture is 64-bit

    Raises:
        UnsupportedTargetError: If the platform has no AOT cross-compiler
    """
    try:
        relative = APPLE_AOT_COMPILERS[(platform, is64bits)]
    except KeyError:
        raise UnsupportedTargetError(f"Unknown Apple target platform: {platform}")
    return Path(cross_prefix, *relative)


def get_apple_device_sdk(developer_path: Path, platform: TargetPlatform) -> Path:
    """Path to the device SDK (sysroot) for an Apple mobile platform."""
    try:
        name = APPLE_DEVICE_SDKS[platform]
    except KeyError:
        raise UnsupportedTargetError(f"Unknown Apple target platform: {platform}")
    return (
        developer_path
        / "Platforms"
        / f"{name}.platform"
        / "Developer"
        / "SDKs"
        / f"{name}.sdk"
    )


def get_apple_runtime_sdk(sdk_root: Path, platform: TargetPlatform) -> Path:
    """Path to the Mono runtime SDK inside a Xamarin SDK for a mobile platform."""
    try:
        name = APPLE_RUNTIME_SDKS[platform]
    except KeyError:
        raise UnsupportedTargetError(f"Unknown Apple target platform: {platform}")
    return sdk_root / "SDKs" / name


class ToolchainLocator:
    """
    Resolve the compiler for a target platform on the current host.

    All failures are fatal: nothing is retried and no alternate toolchain is
    tried when the selected one is missing.
    """

    def __init__(
        self,
        platform: Optional[PlatformInfo] = None,
        sdk_detector: Optional[AppleSdkDetector] = None,
        runtime_root: Optional[Path] = None,
        vswhere_path: Path = DEFAULT_VSWHERE_PATH,
        windows_kits_root: Path = DEFAULT_WINDOWS_KITS_ROOT,
    ):
        """
        Initialize locator.

        Args:
            platform: Host platform (detected if None)
            sdk_detector: Xamarin SDK detector
            runtime_root: Configured Mono runtime root, overriding detection
            vswhere_path: Path to vswhere.exe
            windows_kits_root: Windows 10 SDK root
        """
        self.platform = platform or detect_platform()
        self.sdk_detector = sdk_detector or AppleSdkDetector()
        self.runtime_root = runtime_root
        self.vswhere_path = vswhere_path
        self.windows_kits_root = windows_kits_root

    def locate(self, target: TargetPlatform, is64bits: bool = False) -> ToolchainHandle:
        """
        Resolve the compiler that builds for a target platform.

        Args:
            target: Target platform
            is64bits: Target architecture width (AOT cross-compilers only)

        Raises:
            UnsupportedTargetError: Host/target combination is not implemented
            SdkNotFoundError: A required SDK, compiler or runtime is missing
            SdkVersionUnsupportedError: The SDK is older than supported
        """
        self.check_supported(target)

        if self.platform.is_windows():
            return self.locate_msvc()
        if target.is_apple_mobile:
            return self.locate_aot_compiler(target, is64bits)
        return self.locate_xcode_clang()

    def check_supported(self, target: TargetPlatform):
        """Raise UnsupportedTargetError unless the host can build for target."""
        if self.platform.is_windows():
            if target != TargetPlatform.WINDOWS:
                raise UnsupportedTargetError(
                    f"Compilation to target platform '{target}' is not supported "
                    f"on a Windows host."
                )
        elif self.platform.is_macos():
            if target in (TargetPlatform.WINDOWS, TargetPlatform.ANDROID):
                raise UnsupportedTargetError(
                    f"Cross compilation to target platform '{target}' is not supported."
                )
        else:
            raise UnsupportedTargetError(
                f"Compilation on host '{self.platform.os}' is not implemented."
            )

    def require_runtime_root(self) -> Path:
        """
        Resolve the Mono runtime root.

        Raises:
            SdkNotFoundError: If no runtime installation was found
        """
        root = locate_runtime_root(self.platform, self.runtime_root)
        if root is None:
            raise SdkNotFoundError(
                "Mono runtime was not found on your system. "
                "Install Mono or set $NATIVEKIT_MONO_ROOT."
            )
        return root

    def locate_msvc(self) -> ToolchainHandle:
        """
        Resolve cl.exe from the first Visual Studio installation.

        INCLUDE and LIB are only provided when INCLUDE is not already set, so a
        Developer Command Prompt environment is left untouched.
        """
        installations = find_visual_studio_installations(
            self.vswhere_path, self.windows_kits_root
        )
        if not installations:
            raise SdkNotFoundError("Visual Studio SDK was not found on your system.")

        vs = installations[0]
        logger.info(f"Using MSVC {vs.msvc_version} from {vs.install_path}")
        runtime_root = self.require_runtime_root()

        env: Dict[str, str] = {}
        if not os.environ.get("INCLUDE"):
            env["INCLUDE"] = ";".join(str(p) for p in vs.include_dirs)
            env["LIB"] = ";".join(str(p) for p in vs.library_dirs)

        return ToolchainHandle(
            compiler=vs.cl_path,
            env=env,
            sdk_root=vs.install_path,
            runtime_root=runtime_root,
        )

    def locate_xcode_clang(self, require_runtime: bool = True) -> ToolchainHandle:
        """
        Resolve clang from the active Xcode developer directory.

        Args:
            require_runtime: Also resolve the Mono runtime root (desktop builds)
        """
        developer_path = get_xcode_developer_path()
        if developer_path is None:
            raise SdkNotFoundError(
                "Xcode developer tools were not found on your system. "
                "Install Xcode or run 'xcode-select --install'."
            )

        clang = get_xcode_clang(developer_path)
        logger.info(f"Using clang at {clang}")
        return ToolchainHandle(
            compiler=clang,
            sdk_root=developer_path,
            runtime_root=self.require_runtime_root() if require_runtime else None,
        )

    def locate_aot_compiler(
        self, target: TargetPlatform, is64bits: bool = False
    ) -> ToolchainHandle:
        """
        Resolve the Mono AOT cross-compiler for an Apple mobile platform.

        Raises:
            UnsupportedTargetError: Not on a macOS host, or not a mobile target
            SdkNotFoundError: The Xamarin SDK could not be detected
            SdkVersionUnsupportedError: The Xamarin SDK is older than 10
        """
        if not self.platform.is_macos() or not target.is_apple_mobile:
            raise UnsupportedTargetError(
                f"AOT cross compilation to target platform '{target}' is not "
                f"supported on host '{self.platform.os}'."
            )

        identifier = get_apple_target_framework_identifier(target)
        sdk = self.sdk_detector.detect(identifier)
        if sdk is None:
            raise SdkNotFoundError("Error detecting Xamarin.iOS SDK.")

        if sdk.major_version < MINIMUM_XAMARIN_IOS_MAJOR:
            raise SdkVersionUnsupportedError(
                f"Unsupported Xamarin.iOS version {sdk.version}, "
                f"upgrade to {MINIMUM_XAMARIN_IOS_MAJOR} or newer.",
                version=sdk.version,
            )

        compiler = get_apple_aot_compiler(target, sdk.root, is64bits)
        logger.info(f"Using AOT compiler {compiler} ({sdk})")
        return ToolchainHandle(compiler=compiler, sdk_root=sdk.root)


__all__ = [
    "MINIMUM_XAMARIN_IOS_MAJOR",
    "APPLE_TARGET_FRAMEWORK_IDENTIFIERS",
    "APPLE_AOT_COMPILERS",
    "APPLE_DEVICE_SDKS",
    "APPLE_RUNTIME_SDKS",
    "ToolchainHandle",
    "ToolchainLocator",
    "get_apple_target_framework_identifier",
    "get_apple_aot_compiler",
    "get_apple_device_sdk",
    "get_apple_runtime_sdk",
]
