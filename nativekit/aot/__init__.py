"""
Ahead-of-time compilation support.

This package models target ABIs and encodes command lines for the Mono AOT
cross-compiler.
"""

from .abi import (
    Abi,
    SIMULATOR_ARCH_MASK,
    DEVICE_ARCH_MASK,
    ARCH_MASK,
    ARCH_64_MASK,
    ARCH_32_MASK,
    render,
    arch_string,
)

from .arguments import (
    BuildOptions,
    quote,
    get_aot_arguments,
)

__all__ = [
    "Abi",
    "SIMULATOR_ARCH_MASK",
    "DEVICE_ARCH_MASK",
    "ARCH_MASK",
    "ARCH_64_MASK",
    "ARCH_32_MASK",
    "render",
    "arch_string",
    "BuildOptions",
    "quote",
    "get_aot_arguments",
]
