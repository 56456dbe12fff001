"""
Tests for project root discovery.
"""

from pathlib import Path

from shirokuma_docs.core import find_repo_root


def test_finds_nearest_marker(tmp_path: Path):
    (tmp_path / ".git").mkdir()
    (tmp_path / "site" / ".shirokuma").mkdir(parents=True)
    (tmp_path / "site" / "docs" / "guide").mkdir(parents=True)

    assert find_repo_root(tmp_path / "site" / "docs" / "guide") == (tmp_path / "site").resolve()
    assert find_repo_root(tmp_path) == tmp_path.resolve()


def test_marker_files_are_ignored(tmp_path: Path):
    (tmp_path / ".git").mkdir()
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / ".shirokuma").write_text("")
    assert find_repo_root(tmp_path / "sub") == tmp_path.resolve()


def test_defaults_to_cwd(tmp_path: Path):
    (tmp_path / ".git").mkdir()
    assert find_repo_root() == tmp_path.resolve()
