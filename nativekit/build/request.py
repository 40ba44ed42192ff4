"""
Compilation request and result types.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from ..aot.abi import Abi
from ..aot.arguments import BuildOptions
from ..core.targets import GeneratorKind, TargetPlatform


@dataclass(frozen=True)
class CompilationRequest:
    """
    Everything the orchestrator needs to build one native library.

    Attributes:
        platform: Target platform
        output_dir: Directory holding the generated sources; outputs go here too
        assemblies: Managed assemblies the bindings were generated from
        language: Language the binding generator emitted
        library_name: Output library name (defaults to the first assembly's name)
        compile_shared_library: Build a shared library rather than an object
        abi: Target ABI for AOT cross-compilation
        build_options: AOT code generation options
        dry_run: Log AOT commands without running them and skip linking
    """

    platform: TargetPlatform
    output_dir: Path
    assemblies: Tuple[str, ...] = ()
    language: GeneratorKind = GeneratorKind.C
    library_name: Optional[str] = None
    compile_shared_library: bool = True
    abi: Abi = Abi.ARMV7
    build_options: BuildOptions = field(default_factory=BuildOptions)
    dry_run: bool = False

    @property
    def output_name(self) -> str:
        """Library name, falling back to the first assembly without extension."""
        if self.library_name:
            return self.library_name
        if not self.assemblies:
            return "output"
        return os.path.splitext(os.path.basename(self.assemblies[0]))[0]


@dataclass
class Invocation:
    """A compiler command that was (or, in a dry run, would have been) run."""

    compiler: Path
    arguments: str
    working_dir: Optional[Path] = None
    exit_code: Optional[int] = None

    def __str__(self) -> str:
        return f"{self.compiler} {self.arguments}"


@dataclass
class CompilationResult:
    """Outcome of a compilation request."""

    success: bool
    invocations: List[Invocation] = field(default_factory=list)
    output: Optional[Path] = None


__all__ = ["CompilationRequest", "Invocation", "CompilationResult"]
