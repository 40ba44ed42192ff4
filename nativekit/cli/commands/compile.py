"""
Compile command implementation.

Selects a toolchain for the target platform and compiles the generated
bindings into a native library.
"""

import logging
from dataclasses import replace

from nativekit.build.orchestrator import CompilationOrchestrator
from nativekit.cli.utils import apply_aot_overrides, load_config
from nativekit.config.parser import parse_language, parse_platform
from nativekit.toolchain.locator import ToolchainLocator

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the compile command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)

    Raises:
        NativeKitError: On any compilation failure
    """
    logger.debug(f"Arguments: {args}")

    config = apply_aot_overrides(load_config(args), args)

    if args.platform:
        config = replace(config, platform=parse_platform(args.platform))
    if args.language:
        config = replace(config, language=parse_language(args.language))
    if args.output_dir:
        config = replace(config, output_dir=args.output_dir)
    if args.library_name:
        config = replace(config, library_name=args.library_name)
    if args.static:
        config = replace(config, shared=False)
    if args.runtime_root:
        config = replace(config, runtime_root=args.runtime_root)
    if args.assemblies:
        config = replace(config, assemblies=list(args.assemblies))

    request = config.to_request(dry_run=args.dry_run)
    locator = ToolchainLocator(runtime_root=config.runtime_root)
    result = CompilationOrchestrator(request, locator=locator).compile()

    if result.output is not None:
        logger.info(f"Built {result.output}")
    else:
        logger.info(f"Planned {len(result.invocations)} invocation(s)")
    return 0
