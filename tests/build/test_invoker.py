"""
Tests for nativekit.build.invoker module.

These run the current Python interpreter as a stand-in compiler.
"""

import logging
import os
import sys
from unittest.mock import MagicMock, patch

import pytest

from nativekit.build.invoker import build_command, invoke_compiler, run_compiler
from nativekit.core.exceptions import CompilerProcessError


def script(code: str) -> str:
    """Argument string running code with the interpreter."""
    escaped = code.replace('"', '\\"')
    return f'-c "{escaped}"'


class TestBuildCommand:
    """Tests for build_command()."""

    def test_posix_splits_arguments(self):
        with patch("nativekit.build.invoker.os.name", "posix"):
            command = build_command("/usr/bin/clang", '-o "my lib.dylib" a.c')

        assert command == ["/usr/bin/clang", "-o", "my lib.dylib", "a.c"]

    def test_windows_passes_command_line(self):
        with patch("nativekit.build.invoker.os.name", "nt"):
            command = build_command("C:/VC/cl.exe", '/nologo "a.c"')

        assert command == '"C:/VC/cl.exe" /nologo "a.c"'


class TestInvokeCompiler:
    """Tests for invoke_compiler()."""

    def test_output_streamed_to_log(self, caplog):
        caplog.set_level(logging.INFO, logger="nativekit.build.invoker")

        exit_code = invoke_compiler(
            sys.executable, script("print('hello'); print('world')")
        )

        assert exit_code == 0
        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
        assert "  hello" in messages
        assert "  world" in messages
        assert messages.index("  hello") < messages.index("  world")

    def test_stderr_merged(self, caplog):
        caplog.set_level(logging.INFO, logger="nativekit.build.invoker")

        invoke_compiler(
            sys.executable, script("import sys; sys.stderr.write('warn\\n')")
        )

        assert "  warn" in [r.getMessage() for r in caplog.records]

    def test_exit_code_returned(self):
        assert invoke_compiler(sys.executable, script("raise SystemExit(3)")) == 3

    def test_working_directory(self, tmp_path, caplog):
        caplog.set_level(logging.INFO, logger="nativekit.build.invoker")

        invoke_compiler(
            sys.executable, script("import os; print(os.getcwd())"), working_dir=tmp_path
        )

        reported = [
            os.path.realpath(r.getMessage().strip())
            for r in caplog.records
            if r.levelno == logging.INFO
        ]
        assert os.path.realpath(tmp_path) in reported

    def test_env_merged_with_inherited(self, caplog, monkeypatch):
        caplog.set_level(logging.INFO, logger="nativekit.build.invoker")
        monkeypatch.setenv("NATIVEKIT_INHERITED", "kept")

        invoke_compiler(
            sys.executable,
            script(
                "import os; print(os.environ['NATIVEKIT_INHERITED'], "
                "os.environ['NATIVEKIT_EXTRA'])"
            ),
            env={"NATIVEKIT_EXTRA": "added"},
        )

        assert "  kept added" in [r.getMessage() for r in caplog.records]

    def test_missing_executable(self, tmp_path):
        with pytest.raises(CompilerProcessError) as exc:
            invoke_compiler(tmp_path / "no-such-compiler", "-c x.c")

        assert exc.value.exit_code == -1
        assert "Failed to start" in str(exc.value)

    def test_interrupted_read_kills_child(self):
        """A child whose output loop is interrupted is killed and reaped."""
        process = MagicMock()
        process.stdout.__iter__.side_effect = KeyboardInterrupt

        with patch("nativekit.build.invoker.subprocess.Popen", return_value=process):
            with pytest.raises(KeyboardInterrupt):
                invoke_compiler("/usr/bin/clang", "-c a.c")

        process.kill.assert_called_once_with()
        process.wait.assert_called_once_with()
        process.stdout.close.assert_called_once_with()


class TestRunCompiler:
    """Tests for run_compiler()."""

    def test_success(self):
        assert run_compiler(sys.executable, script("pass")) == 0

    def test_non_zero_raises(self):
        with pytest.raises(CompilerProcessError) as exc:
            run_compiler(sys.executable, script("raise SystemExit(2)"))

        assert exc.value.exit_code == 2
