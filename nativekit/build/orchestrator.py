"""
Compilation orchestrator.

Turns a CompilationRequest into compiler invocations for the current host:

- Windows host: one cl.exe invocation building the generated sources
- macOS host, macOS target: one clang invocation
- macOS host, iOS/tvOS/watchOS target: AOT cross-compilation of every input
  assembly, then a clang link of the generated sources and AOT objects

The first failure aborts the request; there is no fallback toolchain and no
partial success.
"""

import logging
import os
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from ..aot.abi import Abi, arch_string, render
from ..aot.arguments import get_aot_arguments
from ..core.exceptions import CompilerProcessError, UnsupportedTargetError
from ..core.platform import PlatformInfo
from ..toolchain.locator import (
    ToolchainHandle,
    ToolchainLocator,
    get_apple_device_sdk,
    get_apple_runtime_sdk,
)
from .collector import collect_output_files
from .invoker import invoke_compiler
from .request import CompilationRequest, CompilationResult, Invocation

logger = logging.getLogger(__name__)

EXPORT_DEFINE = "MONO_M2N_DLL_EXPORT"

Invoker = Callable[[Path, str, Optional[Path], Optional[Dict[str, str]]], int]


def _quoted(paths: Sequence[Path]) -> str:
    return " ".join(f'"{p}"' for p in paths)


def _join(parts: Sequence[str]) -> str:
    return " ".join(part for part in parts if part)


class CompilationOrchestrator:
    """
    Drive the compilers needed to build one native library.

    The locator and invoker are injectable so the decision logic can be
    exercised without SDKs installed.
    """

    def __init__(
        self,
        request: CompilationRequest,
        platform: Optional[PlatformInfo] = None,
        locator: Optional[ToolchainLocator] = None,
        invoker: Invoker = invoke_compiler,
    ):
        """
        Initialize orchestrator.

        Args:
            request: What to build
            platform: Host platform (taken from the locator if None)
            locator: Toolchain locator
            invoker: Function running a compiler and returning its exit code
        """
        self.request = request
        self.locator = locator or ToolchainLocator(platform)
        self.platform = platform or self.locator.platform
        self.invoker = invoker

    def compile(self) -> CompilationResult:
        """
        Build the request.

        Returns:
            CompilationResult with every invocation that ran

        Raises:
            UnsupportedTargetError: Host/target combination is not implemented
            SdkNotFoundError: A required SDK is missing
            SdkVersionUnsupportedError: An SDK is too old
            CompilerProcessError: A compiler exited with a non-zero code
        """
        target = self.request.platform
        logger.info(
            f"Compiling {self.request.output_name} for {target} on {self.platform}"
        )

        self.locator.check_supported(target)

        if self.platform.is_windows():
            return self._compile_windows()
        if self.platform.is_macos():
            if target.is_apple_mobile:
                return self._compile_apple_mobile()
            return self._compile_macos()

        raise UnsupportedTargetError(
            f"Compilation on host '{self.platform.os}' is not implemented."
        )

    def _run(
        self,
        result: CompilationResult,
        compiler: Path,
        arguments: str,
        working_dir: Optional[Path] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> Invocation:
        invocation = Invocation(compiler, arguments, working_dir)
        result.invocations.append(invocation)

        invocation.exit_code = self.invoker(compiler, arguments, working_dir, env)
        if invocation.exit_code != 0:
            raise CompilerProcessError(str(invocation), invocation.exit_code)
        return invocation

    def _sources(self) -> List[Path]:
        return collect_output_files(self.request.output_dir, self.request.language)

    def build_windows_arguments(
        self, toolchain: ToolchainHandle, files: Sequence[Path]
    ) -> str:
        mono = toolchain.runtime_root
        output = os.path.join(str(self.request.output_dir), self.request.output_name)
        return _join(
            [
                "/nologo",
                f"/D{EXPORT_DEFINE}",
                f'-I"{mono}\\include\\mono-2.0"',
                _quoted(files),
                f'"{mono}\\lib\\monosgen-2.0.lib"',
                "/LD" if self.request.compile_shared_library else "",
                f'/Fe"{output}"',
            ]
        )

    def _compile_windows(self) -> CompilationResult:
        toolchain = self.locator.locate_msvc()
        files = self._sources()
        arguments = self.build_windows_arguments(toolchain, files)

        result = CompilationResult(success=False)
        self._run(
            result,
            toolchain.compiler,
            arguments,
            env=toolchain.env or None,
        )
        result.success = True
        result.output = Path(self.request.output_dir) / self.request.output_name
        return result

    def _link_output(self) -> Path:
        name = self.request.output_name
        if self.request.compile_shared_library:
            return Path(self.request.output_dir) / f"lib{name}.dylib"
        return Path(self.request.output_dir) / name

    def _link_flags(self, output: Path) -> List[str]:
        flags = []
        if self.request.compile_shared_library:
            flags.append("-dynamiclib")
        flags.append(f'-o "{output}"')
        return flags

    def build_macos_arguments(
        self, toolchain: ToolchainHandle, files: Sequence[Path], output: Path
    ) -> str:
        mono = toolchain.runtime_root
        return _join(
            [
                f"-D{EXPORT_DEFINE}",
                "-framework CoreFoundation",
                f'-I"{mono}/include/mono-2.0"',
                f'-L"{mono}/lib/"',
                "-lmonosgen-2.0",
                _quoted(files),
            ]
            + self._link_flags(output)
        )

    def _compile_macos(self) -> CompilationResult:
        toolchain = self.locator.locate_xcode_clang()
        files = self._sources()
        output = self._link_output()

        result = CompilationResult(success=False)
        self._run(
            result, toolchain.compiler, self.build_macos_arguments(toolchain, files, output)
        )
        result.success = True
        result.output = output
        return result

    def _aot_outputs(self, output_dir: str, assembly: str) -> Dict[str, str]:
        base = os.path.join(output_dir, os.path.basename(assembly))
        return {
            "output_file": base + ".o",
            "llvm_output_file": base + ".llvm.o",
            "data_file": base + ".data",
        }

    def _compile_apple_mobile(self) -> CompilationResult:
        request = self.request
        abi = request.abi
        aot = self.locator.locate_aot_compiler(request.platform, abi.is_64bit)
        # Both SDKs must be present before any object is written
        clang = None
        if not request.dry_run:
            clang = self.locator.locate_xcode_clang(require_runtime=False)
        output_dir = os.path.abspath(str(request.output_dir))

        result = CompilationResult(success=False)
        objects: List[Path] = []

        logger.info(
            f"AOT compiling {len(request.assemblies)} assemblies for {render(abi)}"
        )

        for assembly in request.assemblies:
            outputs = self._aot_outputs(output_dir, assembly)
            arguments = get_aot_arguments(
                request.build_options, assembly, abi, output_dir, **outputs
            )
            logger.info(f"{aot.compiler} {arguments}")

            if not request.build_options.enable_llvm_only_bitcode:
                objects.append(Path(outputs["output_file"]))
            if abi & Abi.LLVM:
                objects.append(Path(outputs["llvm_output_file"]))

            if request.dry_run:
                result.invocations.append(
                    Invocation(aot.compiler, arguments, Path(output_dir))
                )
                continue

            self._run(result, aot.compiler, arguments, working_dir=Path(output_dir))

        if request.dry_run:
            logger.info("Dry run: skipping AOT compilation and native link")
            result.success = True
            return result

        self._link_apple_mobile(result, clang, aot, objects)
        result.success = True
        return result

    def build_apple_mobile_link_arguments(
        self,
        clang: ToolchainHandle,
        aot: ToolchainHandle,
        files: Sequence[Path],
        objects: Sequence[Path],
        output: Path,
    ) -> str:
        request = self.request
        sysroot = get_apple_device_sdk(clang.sdk_root, request.platform)
        runtime_sdk = get_apple_runtime_sdk(aot.sdk_root, request.platform)
        return _join(
            [
                f"-arch {arch_string(request.abi)}",
                f'-isysroot "{sysroot}"',
                f"-D{EXPORT_DEFINE}",
                "-framework CoreFoundation",
                f'-I"{runtime_sdk}/include/mono-2.0"',
                f'-L"{runtime_sdk}/lib"',
                "-lmonosgen-2.0",
                _quoted(files),
                _quoted(objects),
            ]
            + self._link_flags(output)
        )

    def _link_apple_mobile(
        self,
        result: CompilationResult,
        clang: ToolchainHandle,
        aot: ToolchainHandle,
        objects: Sequence[Path],
    ):
        files = self._sources()
        output = self._link_output()

        arguments = self.build_apple_mobile_link_arguments(
            clang, aot, files, objects, output
        )
        logger.info(f"Linking {output.name} for {self.request.platform}")
        self._run(result, clang.compiler, arguments)
        result.output = output


def compile_request(
    request: CompilationRequest, platform: Optional[PlatformInfo] = None
) -> CompilationResult:
    """Convenience wrapper: build a request with the default locator."""
    return CompilationOrchestrator(request, platform=platform).compile()


__all__ = [
    "EXPORT_DEFINE",
    "CompilationOrchestrator",
    "compile_request",
]
