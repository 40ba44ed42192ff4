"""
Argument encoder for the Mono AOT cross-compiler.

The AOT compiler takes a single comma separated option list after ``--aot=``
and splits its own command line on whitespace without understanding shell
quoting, so both the token order and the quoting rules below are significant.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import FrozenSet

from .abi import Abi, arch_string, render

logger = logging.getLogger(__name__)

MTRIPLE_SUFFIX = "-ios"
MSYM_DIR_NAME = "Msym"


@dataclass(frozen=True)
class BuildOptions:
    """
    Options controlling AOT code generation and debug information.

    Attributes:
        enable_debug: Emit debugger support
        package_mdb: Debug databases are packaged alongside the assemblies
        enable_llvm_only_bitcode: Produce LLVM bitcode only, no machine code
        enable_msym: Emit symbol maps into the Msym directory
        debug_all: Give SDK and product assemblies soft-debug support too
        debug_assemblies: SDK or product file names given soft-debug when debug_all is off
        sdk_assemblies: File names of SDK and product assemblies; every other
            assembly is user code and always gets soft-debug when debugging
        dlsym_assemblies: Assembly names resolved with dlsym instead of direct pinvoke
    """

    enable_debug: bool = False
    package_mdb: bool = False
    enable_llvm_only_bitcode: bool = False
    enable_msym: bool = False
    debug_all: bool = True
    debug_assemblies: FrozenSet[str] = field(default_factory=frozenset)
    sdk_assemblies: FrozenSet[str] = field(default_factory=frozenset)
    dlsym_assemblies: FrozenSet[str] = field(default_factory=frozenset)

    def use_dlsym(self, assembly: str) -> bool:
        """
        Check whether calls into native code from an assembly use dlsym.

        Args:
            assembly: Assembly path or name; matched on the name without extension

        Returns:
            True for dlsym lookup, False for direct pinvoke (the default)
        """
        name = os.path.splitext(os.path.basename(assembly))[0]
        return name in self.dlsym_assemblies

    def is_sdk_or_product(self, fname: str) -> bool:
        """Whether a file name belongs to the SDK or product rather than user code."""
        return fname in self.sdk_assemblies


def quote(path: str) -> str:
    """
    Quote a path for the AOT compiler's option list.

    Paths without a space, single quote or comma pass through unchanged.
    Anything else is wrapped in double quotes with '"' and '\\' escaped.
    """
    if " " not in path and "'" not in path and "," not in path:
        return path

    escaped = "".join("\\" + c if c in ('"', "\\") else c for c in path)
    return f'"{escaped}"'


def get_aot_arguments(
    options: BuildOptions,
    filename: str,
    abi: Abi,
    output_dir: str,
    output_file: str,
    llvm_output_file: str,
    data_file: str,
) -> str:
    """
    Build the AOT cross-compiler argument string for one assembly.

    Args:
        options: Build options
        filename: Input assembly path
        abi: Target architecture and mode bits
        output_dir: Output directory; Msym is created beneath it
        output_file: Object file to write
        llvm_output_file: LLVM object file to write when LLVM is enabled
        data_file: AOT data file to write

    Returns:
        Argument string (without the compiler executable)
    """
    aot_args = ""
    aot_other_args = ""

    fname = os.path.basename(filename)
    enable_llvm = bool(abi & Abi.LLVM)
    enable_thumb = bool(abi & Abi.THUMB)
    enable_debug = options.enable_debug
    enable_mdb = options.package_mdb
    llvm_only = options.enable_llvm_only_bitcode
    arch = arch_string(abi)

    args = ["--debug "]

    if enable_llvm:
        args.append("--llvm ")

    if not llvm_only:
        args.append("-O=gsharedvt ")
    args.append(aot_other_args + " ")
    args.append("--aot=mtriple=")
    args.append(arch.replace("arm", "thumb") if enable_thumb else arch)
    args.append(MTRIPLE_SUFFIX + ",")
    args.append(f"data-outfile={quote(data_file)},")
    args.append(aot_args)
    args.append("llvmonly," if llvm_only else "full,")

    if enable_llvm:
        args.append("nodebug,")
    elif not (enable_debug or enable_mdb):
        args.append("nodebug,")
    elif (
        options.debug_all
        or fname in options.debug_assemblies
        or not options.is_sdk_or_product(fname)
    ):
        args.append("soft-debug,")

    args.append("dwarfdebug,")

    # Direct calls break stepping in the AOT runtime
    if enable_debug and not enable_llvm:
        args.append("no-direct-calls,")

    if not options.use_dlsym(filename):
        args.append("direct-pinvoke,")

    if options.enable_msym:
        msym_dir = quote(os.path.join(output_dir, MSYM_DIR_NAME))
        args.append(f"msym-dir={msym_dir},")

    if not llvm_only:
        args.append(f"outfile={quote(output_file)}")
    if not llvm_only and enable_llvm:
        args.append(",")
    if enable_llvm:
        args.append(f"llvm-outfile={quote(llvm_output_file)}")
    args.append(f' "{filename}"')

    result = "".join(args)
    logger.debug(f"AOT arguments for {fname} ({render(abi)}): {result}")
    return result


__all__ = [
    "BuildOptions",
    "MTRIPLE_SUFFIX",
    "MSYM_DIR_NAME",
    "quote",
    "get_aot_arguments",
]
