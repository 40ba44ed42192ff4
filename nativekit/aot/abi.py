"""
Target ABI model for AOT compilation.

An Abi is a bit set: exactly one (normally) architecture bit plus the
independent Thumb and LLVM mode bits. Only architecture bits take part in the
derived masks, so mode bits never leak into an architecture rendering.

Example:
    >>> abi = Abi.ARMV7 | Abi.LLVM | Abi.THUMB
    >>> abi.as_string()
    'ARMv7+LLVM+Thumb'
    >>> abi.as_arch_string()
    'armv7'
"""

from enum import IntFlag
from typing import Dict


class Abi(IntFlag):
    """Architecture and code generation mode flags."""

    NONE = 0
    I386 = 1
    ARMV6 = 2
    ARMV7 = 4
    ARMV7S = 8
    ARM64 = 16
    X86_64 = 32
    THUMB = 64
    LLVM = 128
    ARMV7K = 256

    @property
    def arch(self) -> "Abi":
        """Architecture bits only."""
        return Abi(self & ARCH_MASK)

    @property
    def is_device(self) -> bool:
        return bool(self & DEVICE_ARCH_MASK)

    @property
    def is_simulator(self) -> bool:
        return bool(self & SIMULATOR_ARCH_MASK)

    @property
    def is_64bit(self) -> bool:
        return bool(self & ARCH_64_MASK)

    @property
    def is_32bit(self) -> bool:
        return bool(self & ARCH_32_MASK)

    @property
    def uses_llvm(self) -> bool:
        return bool(self & Abi.LLVM)

    @property
    def uses_thumb(self) -> bool:
        return bool(self & Abi.THUMB)

    def as_string(self) -> str:
        return render(self)

    def as_arch_string(self) -> str:
        return arch_string(self)

    @classmethod
    def parse(cls, text: str) -> "Abi":
        """
        Parse a rendering produced by as_string() back into an Abi.

        Architecture and mode names are matched case-insensitively, so
        'armv7+thumb' and 'ARMv7+Thumb' are equivalent.

        Raises:
            ValueError: If a name is not a known architecture or mode
        """
        parts = [part.strip() for part in text.split("+")]
        result = cls.NONE

        for name in parts[0].split(","):
            name = name.strip()
            if not name or name.lower() == "none":
                continue
            bit = _ARCH_BY_LOWER_NAME.get(name.lower())
            if bit is None:
                raise ValueError(f"Unknown architecture: {name}")
            result |= bit

        for mode in parts[1:]:
            bit = _MODE_BY_LOWER_NAME.get(mode.lower())
            if bit is None:
                raise ValueError(f"Unknown ABI mode: {mode}")
            result |= bit

        return result


SIMULATOR_ARCH_MASK = Abi.I386 | Abi.X86_64
DEVICE_ARCH_MASK = Abi.ARMV6 | Abi.ARMV7 | Abi.ARMV7S | Abi.ARMV7K | Abi.ARM64
ARCH_MASK = SIMULATOR_ARCH_MASK | DEVICE_ARCH_MASK
ARCH_64_MASK = Abi.X86_64 | Abi.ARM64
ARCH_32_MASK = Abi.I386 | Abi.ARMV6 | Abi.ARMV7 | Abi.ARMV7S | Abi.ARMV7K

# Bit order, lowest first.
ARCH_NAMES: Dict[Abi, str] = {
    Abi.I386: "i386",
    Abi.ARMV6: "ARMv6",
    Abi.ARMV7: "ARMv7",
    Abi.ARMV7S: "ARMv7s",
    Abi.ARM64: "ARM64",
    Abi.X86_64: "x86_64",
    Abi.ARMV7K: "ARMv7k",
}

_ARCH_BY_LOWER_NAME = {name.lower(): bit for bit, name in ARCH_NAMES.items()}
_MODE_BY_LOWER_NAME = {"llvm": Abi.LLVM, "thumb": Abi.THUMB}


def _render_arch(abi: int) -> str:
    names = [name for bit, name in ARCH_NAMES.items() if abi & bit]
    if not names:
        return "None"
    return ", ".join(names)


def render(abi: int) -> str:
    """Render the architecture name, then '+LLVM', then '+Thumb'."""
    rv = _render_arch(abi & ARCH_MASK)
    if abi & Abi.LLVM:
        rv += "+LLVM"
    if abi & Abi.THUMB:
        rv += "+Thumb"
    return rv


def arch_string(abi: int) -> str:
    """Lower-cased architecture name without mode suffixes."""
    return _render_arch(abi & ARCH_MASK).lower()


__all__ = [
    "Abi",
    "SIMULATOR_ARCH_MASK",
    "DEVICE_ARCH_MASK",
    "ARCH_MASK",
    "ARCH_64_MASK",
    "ARCH_32_MASK",
    "ARCH_NAMES",
    "render",
    "arch_string",
]
