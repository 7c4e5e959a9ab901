"""
Locates the executable entrypoint inside an unpacked package.

Candidates are ordered by their relative path so the choice is the same for
a given tree on every platform and filesystem.
"""

import fnmatch
import logging
import os
import stat
from collections.abc import Iterable
from pathlib import Path

from agp_local.utils.path import relative_posix

log = logging.getLogger(__name__)

BINARIES_DIR_SUFFIX = "bin"


def _matches_pattern(path: Path, patterns: Iterable[str]) -> bool:
    name = path.name.lower()
    return any(fnmatch.fnmatchcase(name, p.lower()) for p in patterns)


def _is_candidate(path: Path, patterns: Iterable[str]) -> bool:
    if _matches_pattern(path, patterns):
        return True
    if os.name != "nt":
        return bool(path.stat().st_mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))
    return False


def find_candidates(install_dir: Path, patterns: Iterable[str]) -> list[Path]:
    """Returns all entrypoint candidates below ``install_dir``, sorted."""
    patterns = list(patterns)
    candidates = [
        p for p in install_dir.rglob("*") if p.is_file() and _is_candidate(p, patterns)
    ]
    return sorted(candidates, key=lambda p: relative_posix(p, install_dir))


def _location_rank(candidate: Path, install_dir: Path) -> int:
    if candidate.parent == install_dir:
        return 0
    if candidate.parent.name.endswith(BINARIES_DIR_SUFFIX):
        return 1
    return 2


def find_entrypoint(install_dir: Path, patterns: Iterable[str]) -> Path | None:
    """
    Picks the entrypoint: a candidate in the install root first, then one in
    a directory whose name ends in ``bin``, otherwise the first candidate.

    Files matching a pattern always outrank files that are only marked
    executable, so shared libraries and data files shipped with exec bits
    are picked only when nothing matches by name.

    Returns ``None`` when there is no candidate or the tree cannot be read.
    """
    patterns = list(patterns)
    try:
        candidates = find_candidates(install_dir, patterns)
    except OSError as e:
        log.warning(f"Could not scan '{install_dir}' for an entrypoint: {e}")
        return None
    if not candidates:
        return None

    # min() keeps the first of equal keys, preserving the path order.
    return min(
        candidates,
        key=lambda c: (
            not _matches_pattern(c, patterns),
            _location_rank(c, install_dir),
        ),
    )
