"""
NativeKit CLI argument parser.

This module implements the command-line interface for NativeKit using argparse.
"""

import argparse
import importlib
import logging
import sys
from pathlib import Path
from typing import List, Optional

from nativekit.core.exceptions import NativeKitError
from nativekit.core.targets import GeneratorKind, TargetPlatform

# Get version from package
try:
    from importlib.metadata import version

    __version__ = version("nativekit")
except Exception:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)


def _add_aot_options(parser: argparse.ArgumentParser):
    """Options shared by commands that encode AOT arguments."""
    group = parser.add_argument_group("AOT options")
    group.add_argument(
        "--abi",
        metavar="ABI",
        help="Target ABI, e.g. ARMv7, ARM64+LLVM, ARMv7+Thumb (default: ARMv7)",
    )
    group.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Enable debugging support in AOT code",
    )
    group.add_argument(
        "--mdb",
        action="store_true",
        default=None,
        help="Debug databases are packaged with the assemblies",
    )
    group.add_argument(
        "--llvm-only-bitcode",
        action="store_true",
        default=None,
        help="Emit LLVM bitcode only",
    )
    group.add_argument(
        "--msym",
        action="store_true",
        default=None,
        help="Emit symbol maps into <output-dir>/Msym",
    )
    group.add_argument(
        "--dlsym",
        action="append",
        metavar="ASSEMBLY",
        help="Resolve native calls from ASSEMBLY with dlsym (repeatable)",
    )


class CLI:
    """NativeKit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="nativekit",
            description="NativeKit - native compilation driver for generated bindings",
            epilog='Use "nativekit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        parser.add_argument(
            "--version", action="version", version=f"NativeKit {__version__}"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        parser.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./nativekit.yaml)",
        )

        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_compile_command(subparsers)
        self._add_aot_args_command(subparsers)

        return parser

    def _add_compile_command(self, subparsers):
        """Add 'compile' subcommand."""
        parser = subparsers.add_parser(
            "compile",
            help="Compile generated bindings into a native library",
            description="Select a toolchain for the target platform and compile "
            "the generated sources in the output directory",
        )
        parser.add_argument(
            "assemblies",
            nargs="*",
            metavar="ASSEMBLY",
            help="Managed assemblies the bindings were generated from",
        )
        parser.add_argument(
            "--platform",
            choices=[p.value for p in TargetPlatform],
            help="Target platform",
        )
        parser.add_argument(
            "--language",
            choices=[k.value for k in GeneratorKind],
            help="Language emitted by the binding generator (default: c)",
        )
        parser.add_argument(
            "--output-dir",
            "-o",
            type=Path,
            metavar="DIR",
            help="Directory holding the generated sources",
        )
        parser.add_argument(
            "--library-name", metavar="NAME", help="Output library name"
        )
        parser.add_argument(
            "--static",
            action="store_true",
            default=None,
            help="Do not build a shared library",
        )
        parser.add_argument(
            "--runtime-root",
            type=Path,
            metavar="DIR",
            help="Mono runtime installation root",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Print AOT commands without running them",
        )
        _add_aot_options(parser)

    def _add_aot_args_command(self, subparsers):
        """Add 'aot-args' subcommand."""
        parser = subparsers.add_parser(
            "aot-args",
            help="Print the AOT compiler arguments for an assembly",
            description="Encode and print the Mono AOT cross-compiler argument "
            "string for one assembly",
        )
        parser.add_argument("assembly", metavar="ASSEMBLY", help="Input assembly")
        parser.add_argument(
            "--output-dir",
            "-o",
            type=Path,
            metavar="DIR",
            help="Output directory (default: current directory)",
        )
        _add_aot_options(parser)

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse command-line arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        self._configure_logging(parsed_args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except NativeKitError as e:
            logger.error(f"Error: {e}")
            if parsed_args.verbose:
                import traceback

                traceback.print_exc()
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "compile": "nativekit.cli.commands.compile",
            "aot-args": "nativekit.cli.commands.aot_args",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
