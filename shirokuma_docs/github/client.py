"""
Thin GitHub REST/GraphQL request layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from typing import Any

import requests
import yaml

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30


class GitHubError(Exception):
    """An HTTP or GraphQL failure talking to GitHub."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class GitHubAuthError(GitHubError):
    """No GitHub token could be found."""


@dataclass
class GraphQLResult:
    data: dict[str, Any]
    errors: list[dict[str, Any]] = field(default_factory=list)


def _gh_hosts_files() -> list[Path]:
    candidates = []
    if os.environ.get("GH_CONFIG_DIR"):
        candidates.append(Path(os.environ["GH_CONFIG_DIR"]) / "hosts.yml")
    if os.environ.get("XDG_CONFIG_HOME"):
        candidates.append(Path(os.environ["XDG_CONFIG_HOME"]) / "gh" / "hosts.yml")
    candidates.append(Path.home() / ".config" / "gh" / "hosts.yml")
    return candidates


def resolve_token() -> str:
    """
    Find a GitHub token.

    Order: GH_TOKEN, GITHUB_TOKEN, then the gh CLI hosts.yml
    (github.com -> oauth_token).

    Raises:
        GitHubAuthError: If no token is available
    """
    for var in ("GH_TOKEN", "GITHUB_TOKEN"):
        token = os.environ.get(var, "").strip()
        if token:
            logger.debug(f"Using GitHub token from {var}")
            return token

    for hosts in _gh_hosts_files():
        if not hosts.is_file():
            continue
        try:
            data = yaml.safe_load(hosts.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            logger.warning(f"Could not parse {hosts}: {e}")
            continue
        token = (data.get("github.com") or {}).get("oauth_token")
        if token:
            logger.debug(f"Using GitHub token from {hosts}")
            return str(token)

    raise GitHubAuthError(
        "GitHub token not found. Set GH_TOKEN or GITHUB_TOKEN, or run 'gh auth login'."
    )


class GitHubClient:
    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: int = DEFAULT_TIMEOUT,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "shirokuma-docs",
            }
        )

    def rest(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        url = f"{self.api_url}/{path.lstrip('/')}"
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(
                method, url, params=params, json=json, timeout=self.timeout
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise GitHubError(f"GitHub API error {status}: {method} {path}", status) from e
        except requests.RequestException as e:
            raise GitHubError(f"GitHub request failed: {e}") from e

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> GraphQLResult:
        variables = dict(variables or {})
        if "query" in variables:
            raise ValueError("GraphQL variable name 'query' is reserved")
        variables = {k: v for k, v in variables.items() if v is not None}

        payload = self.rest("POST", "graphql", json={"query": query, "variables": variables})
        payload = payload or {}
        errors = payload.get("errors") or []
        data = payload.get("data")

        if errors and not data:
            messages = "; ".join(e.get("message", "unknown error") for e in errors)
            raise GitHubError(f"GraphQL error: {messages}")
        if data is None:
            raise GitHubError("GraphQL response contained no data")
        if errors:
            for err in errors:
                logger.warning(f"GraphQL partial error: {err.get('message')}")
        return GraphQLResult(data=data, errors=errors)


def get_client() -> GitHubClient:
    """Client built from the resolved token; commands call this."""
    api_url = os.environ.get("GITHUB_API_URL", DEFAULT_API_URL)
    return GitHubClient(resolve_token(), api_url=api_url)
