"""
Collect generated sources from the binding generator's output directory.
"""

import logging
from pathlib import Path
from typing import Dict, List, Tuple

from ..core.exceptions import ConfigError
from ..core.targets import GeneratorKind

logger = logging.getLogger(__name__)

ALWAYS_RELEVANT_SUFFIXES: Tuple[str, ...] = (".c",)
LANGUAGE_SUFFIXES: Dict[GeneratorKind, Tuple[str, ...]] = {
    GeneratorKind.OBJECTIVEC: (".m", ".mm"),
    GeneratorKind.CPLUSPLUS: (".cpp",),
}


def get_output_files(output_dir: Path, suffix: str) -> List[Path]:
    """
    Files directly inside output_dir whose name ends with suffix (any case).

    Raises:
        ConfigError: If output_dir is not an existing directory
    """
    output_dir = Path(output_dir)
    if not output_dir.is_dir():
        raise ConfigError(f"Output directory not found: {output_dir}")

    suffix = suffix.lower()
    return [
        entry
        for entry in output_dir.iterdir()
        if entry.is_file() and entry.name.lower().endswith(suffix)
    ]


def relevant_suffixes(language: GeneratorKind) -> Tuple[str, ...]:
    return ALWAYS_RELEVANT_SUFFIXES + LANGUAGE_SUFFIXES.get(language, ())


def collect_output_files(output_dir: Path, language: GeneratorKind) -> List[Path]:
    """
    Collect the generated sources that must be compiled for a language.

    Args:
        output_dir: Directory the binding generator wrote to
        language: Language the generator emitted

    Returns:
        Matching files, sorted by path so command lines are reproducible
    """
    files = set()
    for suffix in relevant_suffixes(language):
        files.update(get_output_files(output_dir, suffix))

    result = sorted(files)
    logger.debug(
        f"Collected {len(result)} {language.value} source(s) from {output_dir}"
    )
    return result


__all__ = [
    "ALWAYS_RELEVANT_SUFFIXES",
    "LANGUAGE_SUFFIXES",
    "get_output_files",
    "relevant_suffixes",
    "collect_output_files",
]
