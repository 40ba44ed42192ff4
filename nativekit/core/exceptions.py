"""
Centralized exception hierarchy for NativeKit.

Every failure raised while compiling a request derives from NativeKitError.
None of them are retried: the first one aborts the whole compilation request.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class NativeKitError(Exception):
    """Base exception for all NativeKit errors."""

    pass


# ============================================================================
# Toolchain-related Exceptions
# ============================================================================


class ToolchainError(NativeKitError):
    """Base exception for toolchain-related errors."""

    pass


class SdkNotFoundError(ToolchainError):
    """Raised when a required SDK, compiler or runtime cannot be found."""

    pass


class SdkVersionUnsupportedError(ToolchainError):
    """Raised when an SDK is installed but older than the minimum supported."""

    def __init__(self, message: str, version: Optional[str] = None):
        self.version = version
        super().__init__(message)


# ============================================================================
# Target Exceptions
# ============================================================================


class UnsupportedTargetError(NativeKitError):
    """Raised when a host/target platform combination is not implemented."""

    pass


# ============================================================================
# Process Exceptions
# ============================================================================


class CompilerProcessError(NativeKitError):
    """Raised when an invoked compiler exits with a non-zero status."""

    def __init__(self, command: str, exit_code: int, message: Optional[str] = None):
        self.command = command
        self.exit_code = exit_code
        super().__init__(
            message or f"Compiler exited with code {exit_code}: {command}"
        )


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigError(NativeKitError):
    """Configuration parsing or validation error."""

    pass
