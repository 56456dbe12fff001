from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import re
import subprocess

logger = logging.getLogger(__name__)

REMOTE_PATTERNS = (
    re.compile(r"^git@github\.com:([^/]+)/(.+?)(?:\.git)?/?$"),
    re.compile(r"^https://github\.com/([^/]+)/(.+?)(?:\.git)?/?$"),
    re.compile(r"^ssh://git@github\.com/([^/]+)/(.+?)(?:\.git)?/?$"),
)


class RepositoryNotFoundError(Exception):
    """The target owner/repo could not be determined."""


@dataclass(frozen=True)
class RepoInfo:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_git_remote_url(url: str) -> RepoInfo | None:
    url = url.strip()
    for pattern in REMOTE_PATTERNS:
        match = pattern.match(url)
        if match and "/" not in match.group(2):
            return RepoInfo(owner=match.group(1), name=match.group(2))
    return None


def get_repo_info(repo: str | None = None, cwd: Path | None = None) -> RepoInfo:
    """
    Resolve the repository to operate on.

    An explicit ``owner/name`` wins; otherwise the ``origin`` remote of the
    git checkout at ``cwd`` is used.

    Raises:
        RepositoryNotFoundError: If neither yields a GitHub repository
    """
    if repo:
        owner, _, name = repo.partition("/")
        if not owner or not name or "/" in name:
            raise RepositoryNotFoundError(f"Invalid repository '{repo}', expected owner/name")
        return RepoInfo(owner=owner, name=name)

    try:
        result = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        raise RepositoryNotFoundError(
            "Could not determine repository: no 'origin' remote (use --repo owner/name)"
        ) from e

    info = parse_git_remote_url(result.stdout)
    if info is None:
        raise RepositoryNotFoundError(f"Remote is not a GitHub repository: {result.stdout.strip()}")
    logger.debug(f"Resolved repository {info.full_name} from git remote")
    return info
