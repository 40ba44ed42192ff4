"""
Native library builds for NativeKit.

Collects the binding generator's output, runs the selected compilers and
reports the outcome.
"""

from .request import (
    CompilationRequest,
    CompilationResult,
    Invocation,
)

from .collector import (
    get_output_files,
    collect_output_files,
)

from .invoker import (
    invoke_compiler,
    run_compiler,
)

from .orchestrator import (
    EXPORT_DEFINE,
    CompilationOrchestrator,
    compile_request,
)

__all__ = [
    "CompilationRequest",
    "CompilationResult",
    "Invocation",
    "get_output_files",
    "collect_output_files",
    "invoke_compiler",
    "run_compiler",
    "EXPORT_DEFINE",
    "CompilationOrchestrator",
    "compile_request",
]
