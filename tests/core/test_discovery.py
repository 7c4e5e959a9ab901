"""Tests for entrypoint discovery."""

import os
from pathlib import Path

import pytest

from agp_local.core.discovery import find_candidates, find_entrypoint

PATTERNS = ["*.exe"]


def _touch(root: Path, *relative: str) -> None:
    for rel in relative:
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")


def test_no_candidates(tmp_path: Path):
    _touch(tmp_path, "readme.txt", "data/level1.dat")
    assert find_entrypoint(tmp_path, PATTERNS) is None


def test_root_candidate_wins(tmp_path: Path):
    _touch(tmp_path, "bin/tool.exe", "launcher.exe", "a/b/c.exe")
    assert find_entrypoint(tmp_path, PATTERNS) == tmp_path / "launcher.exe"


def test_root_candidates_ordered_lexicographically(tmp_path: Path):
    _touch(tmp_path, "zeta.exe", "Alpha.exe", "beta.exe")
    assert find_entrypoint(tmp_path, PATTERNS) == tmp_path / "Alpha.exe"


def test_binaries_directory_preferred_over_other_subdirectories(tmp_path: Path):
    _touch(tmp_path, "aaa/setup.exe", "game/x64bin/game.exe")
    assert find_entrypoint(tmp_path, PATTERNS) == tmp_path / "game/x64bin/game.exe"


def test_falls_back_to_first_candidate(tmp_path: Path):
    _touch(tmp_path, "z/last.exe", "m/middle.exe")
    assert find_entrypoint(tmp_path, PATTERNS) == tmp_path / "m/middle.exe"


def test_patterns_are_case_insensitive(tmp_path: Path):
    _touch(tmp_path, "GAME.EXE")
    assert find_entrypoint(tmp_path, PATTERNS) == tmp_path / "GAME.EXE"


def test_candidates_are_sorted_by_relative_path(tmp_path: Path):
    _touch(tmp_path, "b/x.exe", "a/y.exe", "c.exe")
    rel = [p.relative_to(tmp_path).as_posix() for p in find_candidates(tmp_path, PATTERNS)]
    assert rel == ["a/y.exe", "b/x.exe", "c.exe"]


def test_directories_are_not_candidates(tmp_path: Path):
    (tmp_path / "weird.exe").mkdir()
    assert find_entrypoint(tmp_path, PATTERNS) is None


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_executable_bit_marks_candidate(tmp_path: Path):
    _touch(tmp_path, "run_game", "notes.txt")
    os.chmod(tmp_path / "run_game", 0o755)
    assert find_entrypoint(tmp_path, PATTERNS) == tmp_path / "run_game"


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_pattern_match_outranks_executable_bit(tmp_path: Path):
    _touch(tmp_path, "libsteam_api.so", "bin/game.x86_64")
    os.chmod(tmp_path / "libsteam_api.so", 0o755)
    os.chmod(tmp_path / "bin/game.x86_64", 0o755)

    found = find_entrypoint(tmp_path, ["*.exe", "*.x86_64"])

    assert found == tmp_path / "bin/game.x86_64"


def test_unreadable_tree_yields_no_entrypoint(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    _touch(tmp_path, "game.exe")

    def denied(self, pattern):
        raise PermissionError("listing denied")

    monkeypatch.setattr(Path, "rglob", denied)

    assert find_entrypoint(tmp_path, PATTERNS) is None
