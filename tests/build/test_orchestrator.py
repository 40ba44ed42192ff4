"""
Tests for nativekit.build.orchestrator module.

The toolchain locator and the process invoker are replaced with mocks so the
decision logic runs on any host.
"""

import os
from pathlib import Path
from unittest.mock import Mock

import pytest

from nativekit.aot.abi import Abi
from nativekit.aot.arguments import BuildOptions
from nativekit.build.orchestrator import EXPORT_DEFINE, CompilationOrchestrator
from nativekit.build.request import CompilationRequest
from nativekit.core.exceptions import (
    CompilerProcessError,
    SdkNotFoundError,
    UnsupportedTargetError,
)
from nativekit.core.targets import GeneratorKind, TargetPlatform
from nativekit.toolchain.locator import ToolchainHandle, ToolchainLocator


class RecordingInvoker:
    """Invoker returning scripted exit codes and recording every call."""

    def __init__(self, *exit_codes):
        self.exit_codes = list(exit_codes)
        self.calls = []

    def __call__(self, compiler, arguments, working_dir, env):
        self.calls.append((compiler, arguments, working_dir, env))
        return self.exit_codes.pop(0) if self.exit_codes else 0


@pytest.fixture
def foo_sources(tmp_path):
    out = tmp_path / "out"
    out.mkdir()
    (out / "Foo.c").write_text("int foo(void) { return 0; }\n")
    return out


@pytest.fixture
def clang(tmp_path, mono_root):
    return ToolchainHandle(
        compiler=Path("/usr/bin/clang"),
        sdk_root=tmp_path / "Developer",
        runtime_root=mono_root,
    )


@pytest.fixture
def msvc(tmp_path, mono_root):
    return ToolchainHandle(
        compiler=tmp_path / "VS" / "cl.exe",
        env={"INCLUDE": "C:/inc", "LIB": "C:/lib"},
        sdk_root=tmp_path / "VS",
        runtime_root=mono_root,
    )


@pytest.fixture
def aot(xamarin_sdk):
    return ToolchainHandle(
        compiler=xamarin_sdk.root / "bin" / "arm-darwin-mono-sgen",
        sdk_root=xamarin_sdk.root,
    )


def make_locator(platform, **handles):
    locator = Mock(spec=ToolchainLocator)
    locator.platform = platform
    locator.check_supported.side_effect = ToolchainLocator(platform).check_supported
    for name, handle in handles.items():
        getattr(locator, name).return_value = handle
    return locator


class TestHostDispatch:
    """Tests for compile() dispatch."""

    def test_linux_host_unsupported(self, platform_linux, foo_sources):
        invoker = RecordingInvoker()
        request = CompilationRequest(TargetPlatform.MACOS, foo_sources)
        orchestrator = CompilationOrchestrator(
            request, locator=make_locator(platform_linux), invoker=invoker
        )

        with pytest.raises(UnsupportedTargetError, match="not implemented"):
            orchestrator.compile()

        assert invoker.calls == []

    def test_unsupported_pair_rejected_before_locating(self, platform_macos, foo_sources):
        locator = make_locator(platform_macos)
        request = CompilationRequest(TargetPlatform.ANDROID, foo_sources)

        with pytest.raises(UnsupportedTargetError, match="Android"):
            CompilationOrchestrator(request, locator=locator).compile()

        locator.locate_xcode_clang.assert_not_called()
        locator.locate_aot_compiler.assert_not_called()

    def test_platform_taken_from_locator(self, platform_macos, foo_sources):
        locator = make_locator(platform_macos)
        request = CompilationRequest(TargetPlatform.MACOS, foo_sources)

        assert CompilationOrchestrator(request, locator=locator).platform is platform_macos

    def test_locator_errors_propagate(self, platform_macos, foo_sources):
        locator = make_locator(platform_macos)
        locator.locate_xcode_clang.side_effect = SdkNotFoundError("no Xcode")
        invoker = RecordingInvoker()
        request = CompilationRequest(TargetPlatform.MACOS, foo_sources)

        with pytest.raises(SdkNotFoundError):
            CompilationOrchestrator(request, locator=locator, invoker=invoker).compile()

        assert invoker.calls == []


class TestMacOS:
    """Tests for the macOS desktop pipeline."""

    def test_end_to_end(self, platform_macos, foo_sources, clang):
        invoker = RecordingInvoker(0)
        request = CompilationRequest(
            TargetPlatform.MACOS, foo_sources, assemblies=("Foo.dll",)
        )

        result = CompilationOrchestrator(
            request, locator=make_locator(platform_macos, locate_xcode_clang=clang),
            invoker=invoker,
        ).compile()

        assert result.success
        assert len(invoker.calls) == 1
        compiler, arguments, _, _ = invoker.calls[0]
        assert compiler == clang.compiler
        assert f"-D{EXPORT_DEFINE}" in arguments
        assert f'"{foo_sources / "Foo.c"}"' in arguments
        assert result.output == foo_sources / "libFoo.dylib"

    def test_failure_propagates(self, platform_macos, foo_sources, clang):
        invoker = RecordingInvoker(1)
        request = CompilationRequest(TargetPlatform.MACOS, foo_sources)
        orchestrator = CompilationOrchestrator(
            request, locator=make_locator(platform_macos, locate_xcode_clang=clang),
            invoker=invoker,
        )

        with pytest.raises(CompilerProcessError) as exc:
            orchestrator.compile()

        assert exc.value.exit_code == 1
        assert str(clang.compiler) in exc.value.command

    def test_arguments_exact(self, platform_macos, foo_sources, clang, mono_root):
        request = CompilationRequest(
            TargetPlatform.MACOS, foo_sources, library_name="Bindings"
        )
        orchestrator = CompilationOrchestrator(request, locator=make_locator(platform_macos))
        output = foo_sources / "libBindings.dylib"

        arguments = orchestrator.build_macos_arguments(
            clang, [foo_sources / "Foo.c"], output
        )

        assert arguments == (
            f"-D{EXPORT_DEFINE} -framework CoreFoundation "
            f'-I"{mono_root}/include/mono-2.0" -L"{mono_root}/lib/" -lmonosgen-2.0 '
            f'"{foo_sources / "Foo.c"}" -dynamiclib -o "{output}"'
        )

    def test_static_builds_executable(self, platform_macos, foo_sources, clang):
        invoker = RecordingInvoker()
        request = CompilationRequest(
            TargetPlatform.MACOS,
            foo_sources,
            library_name="Bindings",
            compile_shared_library=False,
        )

        result = CompilationOrchestrator(
            request, locator=make_locator(platform_macos, locate_xcode_clang=clang),
            invoker=invoker,
        ).compile()

        arguments = invoker.calls[0][1]
        assert "-dynamiclib" not in arguments
        assert result.output == foo_sources / "Bindings"

    def test_objective_c_sources(self, platform_macos, generated_sources, clang):
        invoker = RecordingInvoker()
        request = CompilationRequest(
            TargetPlatform.MACOS, generated_sources, language=GeneratorKind.OBJECTIVEC
        )

        CompilationOrchestrator(
            request, locator=make_locator(platform_macos, locate_xcode_clang=clang),
            invoker=invoker,
        ).compile()

        arguments = invoker.calls[0][1]
        for name in ("a.c", "b.m", "c.mm"):
            assert f'"{generated_sources / name}"' in arguments
        assert "d.txt" not in arguments
        assert "e.cpp" not in arguments


class TestWindows:
    """Tests for the Windows pipeline."""

    def test_cl_invocation(self, platform_windows, foo_sources, msvc, mono_root):
        invoker = RecordingInvoker(0)
        request = CompilationRequest(
            TargetPlatform.WINDOWS, foo_sources, assemblies=("Foo.dll",)
        )

        result = CompilationOrchestrator(
            request, locator=make_locator(platform_windows, locate_msvc=msvc),
            invoker=invoker,
        ).compile()

        compiler, arguments, working_dir, env = invoker.calls[0]
        output = os.path.join(str(foo_sources), "Foo")
        assert compiler == msvc.compiler
        assert env == msvc.env
        assert working_dir is None
        assert arguments == (
            f"/nologo /D{EXPORT_DEFINE} "
            f'-I"{mono_root}\\include\\mono-2.0" '
            f'"{foo_sources / "Foo.c"}" '
            f'"{mono_root}\\lib\\monosgen-2.0.lib" /LD /Fe"{output}"'
        )
        assert result.success

    def test_static_omits_ld(self, platform_windows, foo_sources, msvc):
        invoker = RecordingInvoker()
        request = CompilationRequest(
            TargetPlatform.WINDOWS, foo_sources, compile_shared_library=False
        )

        CompilationOrchestrator(
            request, locator=make_locator(platform_windows, locate_msvc=msvc),
            invoker=invoker,
        ).compile()

        assert "/LD" not in invoker.calls[0][1]

    def test_empty_env_passed_as_none(self, platform_windows, foo_sources, msvc):
        invoker = RecordingInvoker()
        handle = ToolchainHandle(compiler=msvc.compiler, runtime_root=msvc.runtime_root)
        request = CompilationRequest(TargetPlatform.WINDOWS, foo_sources)

        CompilationOrchestrator(
            request, locator=make_locator(platform_windows, locate_msvc=handle),
            invoker=invoker,
        ).compile()

        assert invoker.calls[0][3] is None


class TestAppleMobile:
    """Tests for the iOS/tvOS/watchOS pipeline."""

    def request(self, out, **kwargs):
        kwargs.setdefault("assemblies", ("/in/Foo.dll", "/in/Bar.dll"))
        return CompilationRequest(TargetPlatform.IOS, out, **kwargs)

    def test_dry_run_plans_aot_only(self, platform_macos, foo_sources, aot):
        invoker = RecordingInvoker()
        locator = make_locator(platform_macos, locate_aot_compiler=aot)

        result = CompilationOrchestrator(
            self.request(foo_sources, dry_run=True), locator=locator, invoker=invoker
        ).compile()

        assert result.success
        assert invoker.calls == []
        assert result.output is None
        assert [inv.compiler for inv in result.invocations] == [aot.compiler] * 2
        assert all(inv.exit_code is None for inv in result.invocations)
        assert result.invocations[0].arguments.endswith('"/in/Foo.dll"')
        locator.locate_xcode_clang.assert_not_called()

    def test_aot_width_from_abi(self, platform_macos, foo_sources, aot):
        locator = make_locator(platform_macos, locate_aot_compiler=aot)

        CompilationOrchestrator(
            self.request(foo_sources, abi=Abi.ARM64, dry_run=True), locator=locator
        ).compile()

        locator.locate_aot_compiler.assert_called_once_with(TargetPlatform.IOS, True)

    def test_aot_outputs_in_output_dir(self, platform_macos, foo_sources, aot):
        locator = make_locator(platform_macos, locate_aot_compiler=aot)

        result = CompilationOrchestrator(
            self.request(foo_sources, dry_run=True), locator=locator
        ).compile()

        arguments = result.invocations[0].arguments
        base = os.path.join(os.path.abspath(str(foo_sources)), "Foo.dll")
        assert f"outfile={base}.o" in arguments
        assert f"data-outfile={base}.data" in arguments
        assert result.invocations[0].working_dir == Path(os.path.abspath(str(foo_sources)))

    def test_full_run_links(self, platform_macos, foo_sources, aot, clang, xamarin_sdk):
        invoker = RecordingInvoker()
        locator = make_locator(
            platform_macos, locate_aot_compiler=aot, locate_xcode_clang=clang
        )

        result = CompilationOrchestrator(
            self.request(foo_sources, library_name="Bindings"),
            locator=locator,
            invoker=invoker,
        ).compile()

        assert result.success
        assert len(invoker.calls) == 3
        assert [c[0] for c in invoker.calls] == [aot.compiler, aot.compiler, clang.compiler]
        locator.locate_xcode_clang.assert_called_once_with(require_runtime=False)

        link = invoker.calls[2][1]
        out = os.path.abspath(str(foo_sources))
        assert link.startswith("-arch armv7 -isysroot ")
        assert "iPhoneOS.platform" in link
        assert f'-I"{xamarin_sdk.root / "SDKs" / "MonoTouch.iphoneos.sdk"}/include/mono-2.0"' in link
        assert f'"{os.path.join(out, "Foo.dll.o")}"' in link
        assert f'"{os.path.join(out, "Bar.dll.o")}"' in link
        assert ".llvm.o" not in link
        assert link.endswith(f'-dynamiclib -o "{foo_sources / "libBindings.dylib"}"')
        assert result.output == foo_sources / "libBindings.dylib"

    def test_llvm_objects_linked(self, platform_macos, foo_sources, aot, clang):
        invoker = RecordingInvoker()
        locator = make_locator(
            platform_macos, locate_aot_compiler=aot, locate_xcode_clang=clang
        )

        CompilationOrchestrator(
            self.request(
                foo_sources,
                assemblies=("Foo.dll",),
                abi=Abi.ARM64 | Abi.LLVM,
                build_options=BuildOptions(enable_llvm_only_bitcode=True),
            ),
            locator=locator,
            invoker=invoker,
        ).compile()

        link = invoker.calls[-1][1]
        assert "Foo.dll.llvm.o" in link
        assert "Foo.dll.o\"" not in link

    def test_aot_failure_stops_pipeline(self, platform_macos, foo_sources, aot, clang):
        invoker = RecordingInvoker(0, 5)
        locator = make_locator(
            platform_macos, locate_aot_compiler=aot, locate_xcode_clang=clang
        )

        with pytest.raises(CompilerProcessError) as exc:
            CompilationOrchestrator(
                self.request(foo_sources), locator=locator, invoker=invoker
            ).compile()

        assert exc.value.exit_code == 5
        assert len(invoker.calls) == 2
        assert clang.compiler not in [c[0] for c in invoker.calls]

    def test_missing_xcode_fails_before_aot(self, platform_macos, foo_sources, aot):
        """No AOT object is written when the link toolchain is missing."""
        invoker = RecordingInvoker()
        locator = make_locator(platform_macos, locate_aot_compiler=aot)
        locator.locate_xcode_clang.side_effect = SdkNotFoundError("no Xcode")

        with pytest.raises(SdkNotFoundError, match="no Xcode"):
            CompilationOrchestrator(
                self.request(foo_sources), locator=locator, invoker=invoker
            ).compile()

        assert invoker.calls == []
