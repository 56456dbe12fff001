from pathlib import Path
import tomllib
from typing import Any

SHIROKUMA_VERSION = "0.4.0"
CONFIG_FILENAME = "shirokuma-docs.toml"
# Directories that mark a project root
ROOT_MARKERS = (".shirokuma", ".git")


class ConfigError(Exception):
    """Raised when shirokuma-docs.toml cannot be parsed."""


def find_repo_root(start_path: Path | None = None) -> Path:
    """
    Walk up from start_path (default: cwd) to the nearest directory holding
    one of ROOT_MARKERS. The nearest marker wins.

    Outside any project the resolved start directory is returned, so a bare
    docs folder still works with the built-in [md] defaults.
    """
    origin = Path(start_path or ".").resolve()
    for directory in (origin, *origin.parents):
        if any((directory / marker).is_dir() for marker in ROOT_MARKERS):
            return directory
    return origin


def load_config(repo_root: Path | None = None) -> dict[str, Any]:
    """
    Load shirokuma-docs.toml from the project root.
    """
    if repo_root is None:
        repo_root = find_repo_root()

    config_path = repo_root / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    return load_config_file(config_path)


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Parse an explicit config file. Missing files raise FileNotFoundError."""
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e


def get_section(config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a config table, or an empty dict when absent or malformed."""
    section = config.get(name, {})
    return section if isinstance(section, dict) else {}


def get_project_name(config: dict[str, Any]) -> str:
    return get_section(config, "project").get("name", "Project")


def get_output_path(config: dict[str, Any], repo_root: Path, kind: str) -> Path:
    """Resolve one of the [output] directories (dir, portal, generated)."""
    defaults = {
        "dir": "docs",
        "portal": "docs/portal",
        "generated": "docs/generated",
    }
    if kind not in defaults:
        raise ValueError(f"Unknown output kind: {kind}")
    value = get_section(config, "output").get(kind, defaults[kind])
    return (repo_root / value).resolve()
