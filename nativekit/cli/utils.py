"""
Shared utilities for CLI commands.

Merges nativekit.yaml with command-line flags; flags always win.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Optional

from nativekit.config.parser import (
    DEFAULT_CONFIG_NAME,
    NativeKitConfig,
    parse_abi,
    parse_config,
)

logger = logging.getLogger(__name__)


def load_config(args) -> NativeKitConfig:
    """
    Load the configuration selected by --config.

    Without --config, ./nativekit.yaml is used when present; otherwise an
    empty version-1 configuration is returned.

    Raises:
        ConfigError: If the selected configuration is invalid
    """
    config_file: Optional[Path] = getattr(args, "config", None)

    if config_file is None:
        default_config = Path.cwd() / DEFAULT_CONFIG_NAME
        if not default_config.exists():
            logger.debug(f"No {DEFAULT_CONFIG_NAME} found, using defaults")
            return NativeKitConfig(version=1)
        config_file = default_config

    logger.debug(f"Loading configuration from {config_file}")
    return parse_config(config_file)


def apply_aot_overrides(config: NativeKitConfig, args) -> NativeKitConfig:
    """
    Apply AOT flags from the command line on top of a configuration.

    Raises:
        ConfigError: If --abi is invalid
    """
    aot = config.aot
    if args.debug is not None:
        aot = replace(aot, debug=args.debug)
    if args.mdb is not None:
        aot = replace(aot, mdb=args.mdb)
    if args.llvm_only_bitcode is not None:
        aot = replace(aot, llvm_only_bitcode=args.llvm_only_bitcode)
    if args.msym is not None:
        aot = replace(aot, msym=args.msym)
    if args.dlsym:
        aot = replace(aot, dlsym=list(aot.dlsym) + list(args.dlsym))

    config = replace(config, aot=aot)
    if args.abi:
        config = replace(config, abi=parse_abi(args.abi))
    return config
