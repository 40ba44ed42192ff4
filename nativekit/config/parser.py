"""YAML configuration parser for NativeKit.

This module provides parsing and validation for nativekit.yaml configuration files.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from ..aot.abi import Abi
from ..aot.arguments import BuildOptions
from ..build.request import CompilationRequest
from ..core.exceptions import ConfigError
from ..core.targets import GeneratorKind, TargetPlatform

DEFAULT_CONFIG_NAME = "nativekit.yaml"


@dataclass
class AotConfig:
    """AOT code generation configuration."""

    debug: bool = False
    mdb: bool = False
    llvm_only_bitcode: bool = False
    msym: bool = False
    debug_all: bool = True
    debug_assemblies: List[str] = field(default_factory=list)
    sdk_assemblies: List[str] = field(default_factory=list)
    dlsym: List[str] = field(default_factory=list)

    def to_build_options(self) -> BuildOptions:
        return BuildOptions(
            enable_debug=self.debug,
            package_mdb=self.mdb,
            enable_llvm_only_bitcode=self.llvm_only_bitcode,
            enable_msym=self.msym,
            debug_all=self.debug_all,
            debug_assemblies=frozenset(self.debug_assemblies),
            sdk_assemblies=frozenset(self.sdk_assemblies),
            dlsym_assemblies=frozenset(self.dlsym),
        )


@dataclass
class NativeKitConfig:
    """Complete NativeKit configuration."""

    version: int
    platform: Optional[TargetPlatform] = None
    language: GeneratorKind = GeneratorKind.C
    output_dir: Optional[Path] = None
    library_name: Optional[str] = None
    shared: bool = True
    abi: Abi = Abi.ARMV7
    assemblies: List[str] = field(default_factory=list)
    runtime_root: Optional[Path] = None
    aot: AotConfig = field(default_factory=AotConfig)

    def to_request(self, dry_run: bool = False) -> CompilationRequest:
        """
        Build a compilation request from this configuration.

        Raises:
            ConfigError: If platform or output_dir is not set
        """
        if self.platform is None:
            raise ConfigError("Missing required field: platform")
        if self.output_dir is None:
            raise ConfigError("Missing required field: output_dir")

        return CompilationRequest(
            platform=self.platform,
            output_dir=self.output_dir,
            assemblies=tuple(self.assemblies),
            language=self.language,
            library_name=self.library_name,
            compile_shared_library=self.shared,
            abi=self.abi,
            build_options=self.aot.to_build_options(),
            dry_run=dry_run,
        )


def parse_config(config_path: Path) -> NativeKitConfig:
    """
    Parse nativekit.yaml configuration file.

    Relative output_dir and runtime_root values are resolved against the
    directory containing the configuration file.

    Args:
        config_path: Path to nativekit.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data, config_path.parent)


def parse_platform(value: str) -> TargetPlatform:
    try:
        return TargetPlatform(str(value).lower())
    except ValueError:
        valid = [p.value for p in TargetPlatform]
        raise ConfigError(f"Invalid platform: {value} (expected one of {valid})")


def parse_language(value: str) -> GeneratorKind:
    try:
        return GeneratorKind(str(value).lower())
    except ValueError:
        valid = [k.value for k in GeneratorKind]
        raise ConfigError(f"Invalid language: {value} (expected one of {valid})")


def parse_abi(value: str) -> Abi:
    try:
        return Abi.parse(str(value))
    except ValueError as e:
        raise ConfigError(f"Invalid abi: {e}")


def _resolve(base_dir: Path, value: Optional[str]) -> Optional[Path]:
    if value is None:
        return None
    path = Path(value)
    return path if path.is_absolute() else base_dir / path


def _parse_and_validate(data: dict, base_dir: Path) -> NativeKitConfig:
    """Parse and validate configuration data."""
    if "version" not in data:
        raise ConfigError("Missing required field: version")

    if data["version"] != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    assemblies = data.get("assemblies", [])
    if not isinstance(assemblies, list):
        raise ConfigError("assemblies must be a list")

    return NativeKitConfig(
        version=data["version"],
        platform=parse_platform(data["platform"]) if "platform" in data else None,
        language=parse_language(data.get("language", "c")),
        output_dir=_resolve(base_dir, data.get("output_dir")),
        library_name=data.get("library_name"),
        shared=bool(data.get("shared", True)),
        abi=parse_abi(data.get("abi", "ARMv7")),
        assemblies=[str(a) for a in assemblies],
        runtime_root=_resolve(base_dir, data.get("runtime_root")),
        aot=_parse_aot_config(data.get("aot", {})),
    )


def _parse_aot_config(data: dict) -> AotConfig:
    """Parse AOT configuration."""
    if data is None:
        return AotConfig()

    if not isinstance(data, dict):
        raise ConfigError("aot must be a dictionary")

    for list_field in ("debug_assemblies", "sdk_assemblies", "dlsym"):
        if not isinstance(data.get(list_field, []), list):
            raise ConfigError(f"aot.{list_field} must be a list")

    return AotConfig(
        debug=bool(data.get("debug", False)),
        mdb=bool(data.get("mdb", False)),
        llvm_only_bitcode=bool(data.get("llvm_only_bitcode", False)),
        msym=bool(data.get("msym", False)),
        debug_all=bool(data.get("debug_all", True)),
        debug_assemblies=list(data.get("debug_assemblies", [])),
        sdk_assemblies=list(data.get("sdk_assemblies", [])),
        dlsym=list(data.get("dlsym", [])),
    )
