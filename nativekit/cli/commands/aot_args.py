"""
AOT arguments command implementation.

Prints the Mono AOT cross-compiler argument string for one assembly, using the
same output naming as the compile command.
"""

import logging
import os
from pathlib import Path

from nativekit.aot.arguments import get_aot_arguments
from nativekit.cli.utils import apply_aot_overrides, load_config

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the aot-args command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = apply_aot_overrides(load_config(args), args)

    output_dir = os.path.abspath(str(args.output_dir or config.output_dir or Path.cwd()))
    base = os.path.join(output_dir, os.path.basename(args.assembly))

    arguments = get_aot_arguments(
        config.aot.to_build_options(),
        args.assembly,
        config.abi,
        output_dir,
        output_file=base + ".o",
        llvm_output_file=base + ".llvm.o",
        data_file=base + ".data",
    )
    print(arguments)
    return 0
