"""
NativeKit - native compilation driver for generated bindings.

Selects MSVC, Xcode clang or the Mono AOT cross-compiler for the host and
target platform, encodes their command lines and runs them.
"""

from nativekit.aot.abi import Abi
from nativekit.aot.arguments import BuildOptions, get_aot_arguments, quote
from nativekit.build.orchestrator import CompilationOrchestrator, compile_request
from nativekit.build.request import CompilationRequest, CompilationResult
from nativekit.core.targets import GeneratorKind, TargetPlatform

__version__ = "0.1.0"

__all__ = [
    "Abi",
    "BuildOptions",
    "get_aot_arguments",
    "quote",
    "CompilationOrchestrator",
    "compile_request",
    "CompilationRequest",
    "CompilationResult",
    "GeneratorKind",
    "TargetPlatform",
]
