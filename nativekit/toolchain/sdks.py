"""
nativekit/toolchain/sdks.py

SDK detection - discovers the SDKs, developer tools and managed runtime that
the compilation driver needs on the host.

Each probe reports what it found or None; deciding whether a missing SDK is
fatal is left to the toolchain locator.
"""

import logging
import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ..core.platform import PlatformInfo

logger = logging.getLogger(__name__)

RUNTIME_ROOT_ENV = "NATIVEKIT_MONO_ROOT"

DEFAULT_VSWHERE_PATH = Path(
    "C:/Program Files (x86)/Microsoft Visual Studio/Installer/vswhere.exe"
)
DEFAULT_WINDOWS_KITS_ROOT = Path("C:/Program Files (x86)/Windows Kits/10")
DEFAULT_XCODE_DEVELOPER_PATH = Path("/Applications/Xcode.app/Contents/Developer")
APPLE_FRAMEWORKS_ROOT = Path("/Library/Frameworks")


@dataclass
class SdkInfo:
    """
    An installed SDK.

    Attributes:
        identifier: SDK identifier (e.g., 'Xamarin.iOS')
        root: SDK installation root
        version: Version string as reported by the SDK (e.g., '16.4.0.23')
    """

    identifier: str
    root: Path
    version: str

    @property
    def major_version(self) -> int:
        """Leading integer of the version string, 0 if it has none."""
        match = re.match(r"\s*(\d+)", self.version)
        return int(match.group(1)) if match else 0

    def __str__(self) -> str:
        return f"{self.identifier} {self.version} at {self.root}"


class AppleSdkDetector:
    """
    Detect Xamarin SDKs for Apple targets.

    The iOS, tvOS and watchOS identifiers are all served by the Xamarin.iOS
    framework; Xamarin.Mac ships its own.
    """

    FRAMEWORKS = {
        "Xamarin.iOS": "Xamarin.iOS.framework",
        "Xamarin.TVOS": "Xamarin.iOS.framework",
        "Xamarin.WatchOS": "Xamarin.iOS.framework",
        "Xamarin.Mac": "Xamarin.Mac.framework",
    }

    def __init__(self, frameworks_root: Path = APPLE_FRAMEWORKS_ROOT):
        self.frameworks_root = frameworks_root

    def detect(self, identifier: str) -> Optional[SdkInfo]:
        """
        Locate the SDK for a target framework identifier.

        Args:
            identifier: Target framework identifier (e.g., 'Xamarin.iOS')

        Returns:
            SdkInfo, or None if the SDK is not installed or has no version
        """
        framework = self.FRAMEWORKS.get(identifier)
        if framework is None:
            logger.debug(f"No framework known for identifier {identifier}")
            return None

        root = self.frameworks_root / framework / "Versions" / "Current"
        if not root.is_dir():
            logger.debug(f"SDK root does not exist: {root}")
            return None

        version_file = root / "Version"
        try:
            version = version_file.read_text().strip().splitlines()[0].strip()
        except (OSError, IndexError) as e:
            logger.debug(f"Could not read SDK version from {version_file}: {e}")
            return None

        sdk = SdkInfo(identifier=identifier, root=root, version=version)
        logger.info(f"Found {sdk}")
        return sdk


@dataclass
class VisualStudioInstallation:
    """
    A Visual Studio installation with the C++ tools.

    Attributes:
        install_path: Installation root reported by vswhere
        msvc_version: MSVC tools version directory name (e.g., '14.38.33130')
        msvc_dir: VC/Tools/MSVC/<version>
        include_dirs: System include directories for cl.exe
        library_dirs: System library directories for link.exe
    """

    install_path: Path
    msvc_version: str
    msvc_dir: Path
    include_dirs: List[Path] = field(default_factory=list)
    library_dirs: List[Path] = field(default_factory=list)

    @property
    def cl_path(self) -> Path:
        return self.msvc_dir / "bin" / "Hostx64" / "x64" / "cl.exe"


def find_visual_studio_installations(
    vswhere_path: Path = DEFAULT_VSWHERE_PATH,
    windows_kits_root: Path = DEFAULT_WINDOWS_KITS_ROOT,
) -> List[VisualStudioInstallation]:
    """
    Use vswhere to find Visual Studio installations that ship cl.exe.

    Installations are returned in vswhere order; for each one the newest MSVC
    tools version containing cl.exe is used.

    Args:
        vswhere_path: Path to vswhere.exe
        windows_kits_root: Windows 10 SDK root used for system headers and libs

    Returns:
        List of installations (empty if vswhere is missing or fails)
    """
    if not vswhere_path.exists():
        logger.debug(f"vswhere not found at {vswhere_path}")
        return []

    try:
        result = subprocess.run(
            [
                str(vswhere_path),
                "-products",
                "*",
                "-requires",
                "Microsoft.VisualStudio.Component.VC.Tools.x86.x64",
                "-property",
                "installationPath",
            ],
            capture_output=True,
            text=True,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"vswhere failed: {e}")
        return []

    if result.returncode != 0:
        logger.debug(f"vswhere returned {result.returncode}")
        return []

    installations = []

    for install_path_str in result.stdout.strip().splitlines():
        install_path_str = install_path_str.strip()
        if not install_path_str:
            continue

        logger.debug(f"Found VS installation: {install_path_str}")

        install_path = Path(install_path_str)
        vc_tools = install_path / "VC" / "Tools" / "MSVC"
        if not vc_tools.is_dir():
            logger.debug(f"VC/Tools/MSVC not found in {install_path}")
            continue

        for version_dir in sorted(vc_tools.iterdir(), reverse=True):
            if not version_dir.is_dir():
                continue

            installation = VisualStudioInstallation(
                install_path=install_path,
                msvc_version=version_dir.name,
                msvc_dir=version_dir,
            )
            if not installation.cl_path.exists():
                continue

            installation.include_dirs, installation.library_dirs = _system_dirs(
                version_dir, windows_kits_root
            )
            installations.append(installation)
            logger.info(
                f"Found MSVC {installation.msvc_version} via vswhere: "
                f"{installation.cl_path}"
            )
            # Only the latest version from each VS installation
            break

    return installations


def _system_dirs(msvc_dir: Path, windows_kits_root: Path):
    includes = [msvc_dir / "include"]
    libs = [msvc_dir / "lib" / "x64"]

    kits_include = windows_kits_root / "Include"
    if kits_include.is_dir():
        versions = sorted(
            (d for d in kits_include.iterdir() if d.is_dir()), reverse=True
        )
        if versions:
            sdk_version = versions[0].name
            includes.extend(
                kits_include / sdk_version / sub for sub in ("ucrt", "um", "shared")
            )
            libs.extend(
                windows_kits_root / "Lib" / sdk_version / sub / "x64"
                for sub in ("ucrt", "um")
            )

    return includes, libs


def get_xcode_developer_path() -> Optional[Path]:
    """
    Get the active Xcode developer directory.

    Asks xcode-select first and falls back to the default Xcode.app location.

    Returns:
        Developer directory, or None if no developer tools are installed
    """
    try:
        result = subprocess.run(
            ["xcode-select", "-p"],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
        if result.returncode == 0 and result.stdout.strip():
            path = Path(result.stdout.strip())
            logger.debug(f"xcode-select reports developer path {path}")
            return path
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug(f"xcode-select failed: {e}")

    if DEFAULT_XCODE_DEVELOPER_PATH.is_dir():
        return DEFAULT_XCODE_DEVELOPER_PATH
    return None


def get_xcode_clang(developer_path: Path) -> Path:
    """Path to the clang bundled with a developer directory."""
    toolchain_clang = (
        developer_path
        / "Toolchains"
        / "XcodeDefault.xctoolchain"
        / "usr"
        / "bin"
        / "clang"
    )
    if toolchain_clang.exists():
        return toolchain_clang
    return developer_path / "usr" / "bin" / "clang"


def _runtime_candidates(platform: PlatformInfo) -> List[Path]:
    if platform.is_windows():
        return [
            Path("C:/Program Files/Mono"),
            Path("C:/Program Files (x86)/Mono"),
        ]
    candidates = []
    if platform.is_macos():
        candidates.append(APPLE_FRAMEWORKS_ROOT / "Mono.framework" / "Versions" / "Current")
    candidates.extend([Path("/usr/local"), Path("/usr")])
    return candidates


def locate_runtime_root(
    platform: PlatformInfo, override: Optional[Path] = None
) -> Optional[Path]:
    """
    Locate the Mono runtime installation that provides headers and libraries.

    Search order: explicit override, $NATIVEKIT_MONO_ROOT, then the default
    install locations for the host (which must contain include/mono-2.0).

    Args:
        platform: Host platform
        override: Explicitly configured runtime root

    Returns:
        Runtime root, or None if no installation was found
    """
    if override is not None:
        logger.debug(f"Using configured runtime root {override}")
        return override

    env_root = os.environ.get(RUNTIME_ROOT_ENV)
    if env_root:
        logger.debug(f"Using runtime root from ${RUNTIME_ROOT_ENV}: {env_root}")
        return Path(env_root)

    for candidate in _runtime_candidates(platform):
        if (candidate / "include" / "mono-2.0").is_dir():
            logger.info(f"Found Mono runtime at {candidate}")
            return candidate
        logger.debug(f"No Mono runtime at {candidate}")

    return None


__all__ = [
    "RUNTIME_ROOT_ENV",
    "SdkInfo",
    "AppleSdkDetector",
    "VisualStudioInstallation",
    "find_visual_studio_installations",
    "get_xcode_developer_path",
    "get_xcode_clang",
    "locate_runtime_root",
]
