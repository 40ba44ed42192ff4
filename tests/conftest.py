"""
Pytest configuration and shared fixtures for NativeKit tests.
"""

from pathlib import Path
from unittest.mock import Mock

import pytest

from nativekit.core.platform import PlatformInfo
from nativekit.toolchain.sdks import SdkInfo


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that need real SDKs and compilers",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def platform_windows():
    """Windows host."""
    return PlatformInfo("windows", "x64", "10.0.19041")


@pytest.fixture
def platform_macos():
    """macOS host."""
    return PlatformInfo("macos", "arm64", "14.1")


@pytest.fixture
def platform_linux():
    """Linux host."""
    return PlatformInfo("linux", "x64", "6.5.0")


@pytest.fixture
def xamarin_sdk(tmp_path: Path) -> SdkInfo:
    """A Xamarin.iOS 16 SDK root on disk."""
    root = tmp_path / "Xamarin.iOS.framework" / "Versions" / "Current"
    (root / "bin").mkdir(parents=True)
    (root / "Version").write_text("16.4.0.23\n")
    return SdkInfo(identifier="Xamarin.iOS", root=root, version="16.4.0.23")


@pytest.fixture
def sdk_detector(xamarin_sdk: SdkInfo) -> Mock:
    """SDK detector reporting the xamarin_sdk fixture."""
    detector = Mock()
    detector.detect.return_value = xamarin_sdk
    return detector


@pytest.fixture
def mono_root(tmp_path: Path) -> Path:
    """A Mono runtime root with headers."""
    root = tmp_path / "mono"
    (root / "include" / "mono-2.0").mkdir(parents=True)
    (root / "lib").mkdir()
    return root


@pytest.fixture
def generated_sources(tmp_path: Path) -> Path:
    """An output directory as written by the binding generator."""
    out = tmp_path / "out"
    out.mkdir()
    for name in ("a.c", "b.m", "c.mm", "d.txt", "e.cpp"):
        (out / name).write_text("")
    return out
