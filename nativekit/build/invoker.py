"""
Run external compilers and forward their output to the log.

Compiler output is read line by line while the child runs and logged as it
arrives, so interleaving with the driver's own messages is preserved.
"""

import logging
import os
import shlex
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..core.exceptions import CompilerProcessError

logger = logging.getLogger(__name__)

OUTPUT_INDENT = "  "


def build_command(compiler: Union[str, Path], arguments: str) -> Union[str, List[str]]:
    """
    Build the command passed to subprocess.

    On Windows the command line is handed to CreateProcess as a single string;
    elsewhere the argument string is split with POSIX shell rules.
    """
    if os.name == "nt":
        return f'"{compiler}" {arguments}'
    return [str(compiler)] + shlex.split(arguments)


def invoke_compiler(
    compiler: Union[str, Path],
    arguments: str,
    working_dir: Optional[Path] = None,
    env: Optional[Dict[str, str]] = None,
) -> int:
    """
    Run a compiler and block until it exits.

    Args:
        compiler: Compiler executable
        arguments: Argument string
        working_dir: Working directory for the child (inherited if None)
        env: Variables added to or overriding the inherited environment

    Returns:
        Exit code of the compiler

    Raises:
        CompilerProcessError: If the compiler could not be started
    """
    logger.debug(f"Invoking: {compiler} {arguments}")

    child_env = None
    if env:
        child_env = os.environ.copy()
        child_env.update(env)

    try:
        process = subprocess.Popen(
            build_command(compiler, arguments),
            cwd=str(working_dir) if working_dir else None,
            env=child_env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        raise CompilerProcessError(
            f"{compiler} {arguments}", -1, f"Failed to start {compiler}: {e}"
        )

    try:
        if process.stdout is not None:
            for line in process.stdout:
                logger.info(f"{OUTPUT_INDENT}{line.rstrip()}")
    except BaseException:
        process.kill()
        raise
    finally:
        if process.stdout is not None:
            process.stdout.close()
        exit_code = process.wait()

    logger.debug(f"{Path(compiler).name} exited with code {exit_code}")
    return exit_code


def run_compiler(
    compiler: Union[str, Path],
    arguments: str,
    working_dir: Optional[Path] = None,
    env: Optional[Dict[str, str]] = None,
) -> int:
    """
    Run a compiler and fail on a non-zero exit code.

    Raises:
        CompilerProcessError: If the compiler fails to start or exits non-zero
    """
    exit_code = invoke_compiler(compiler, arguments, working_dir, env)
    if exit_code != 0:
        raise CompilerProcessError(f"{compiler} {arguments}", exit_code)
    return exit_code


__all__ = ["build_command", "invoke_compiler", "run_compiler"]
