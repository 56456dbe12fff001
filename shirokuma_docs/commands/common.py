"""
Helpers shared by the GitHub and generator commands.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import json
import logging
from typing import Any, NoReturn

import typer

from shirokuma_docs.core import ConfigError, find_repo_root, load_config
from shirokuma_docs.github import (
    GitHubError,
    InputValidationError,
    RepoInfo,
    RepositoryNotFoundError,
    get_repo_info,
)
from shirokuma_docs.github.formatters import OUTPUT_FORMATS

logger = logging.getLogger(__name__)

REPO_OPTION_HELP = "Target repository as owner/name (default: origin remote)"


def fail(message: str) -> NoReturn:
    typer.echo(f"❌ {message}", err=True)
    raise typer.Exit(1)


@contextmanager
def command_errors() -> Iterator[None]:
    """Turn domain errors into a one-line message and exit status 1."""
    try:
        yield
    except (GitHubError, RepositoryNotFoundError, InputValidationError, ConfigError) as e:
        logger.debug(f"{type(e).__name__}: {e}")
        fail(str(e))


def project_config() -> dict[str, Any]:
    try:
        return load_config(find_repo_root())
    except ConfigError as e:
        fail(str(e))


def resolve_repo(repo: str | None) -> RepoInfo:
    try:
        return get_repo_info(repo)
    except RepositoryNotFoundError as e:
        fail(str(e))


def check_format(fmt: str) -> None:
    if fmt not in OUTPUT_FORMATS:
        fail(f"Unknown format: {fmt}. Use one of: {', '.join(OUTPUT_FORMATS)}")


def echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))
