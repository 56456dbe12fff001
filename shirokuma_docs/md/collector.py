"""
Collect markdown files from a source directory using gitwildmatch globs.
"""

from __future__ import annotations

from collections.abc import Iterable
import logging
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)


def build_spec(patterns: Iterable[str]) -> pathspec.PathSpec:
    return pathspec.PathSpec.from_lines("gitwildmatch", list(patterns))


def collect_files(
    source_dir: Path,
    include: Iterable[str] = ("**/*.md",),
    exclude: Iterable[str] = (),
) -> list[Path]:
    """
    Return files under source_dir matching any include pattern and no
    exclude pattern. Paths are absolute, unique and sorted.
    """
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        logger.debug(f"Source directory does not exist: {source_dir}")
        return []

    include_spec = build_spec(include)
    exclude_spec = build_spec(exclude)

    files: set[Path] = set()
    for path in source_dir.rglob("*"):
        if not path.is_file():
            continue
        rel = path.relative_to(source_dir).as_posix()
        if not include_spec.match_file(rel):
            continue
        if exclude_spec.match_file(rel):
            continue
        files.add(path.resolve())

    result = sorted(files)
    logger.debug(f"Collected {len(result)} files from {source_dir}")
    return result


def relative_path(path: Path, base: Path) -> str:
    """POSIX path of `path` relative to `base` (falls back to the name)."""
    try:
        return Path(path).resolve().relative_to(Path(base).resolve()).as_posix()
    except ValueError:
        return Path(path).name
