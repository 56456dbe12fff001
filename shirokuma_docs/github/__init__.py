"""
GitHub access for the issues, pr, discussions and projects commands.
"""

from shirokuma_docs.github.client import (
    GitHubAuthError,
    GitHubClient,
    GitHubError,
    GraphQLResult,
    get_client,
    resolve_token,
)
from shirokuma_docs.github.repo import RepoInfo, RepositoryNotFoundError, get_repo_info
from shirokuma_docs.github.validation import InputValidationError

__all__ = [
    "GitHubAuthError",
    "GitHubClient",
    "GitHubError",
    "GraphQLResult",
    "InputValidationError",
    "RepoInfo",
    "RepositoryNotFoundError",
    "get_client",
    "get_repo_info",
    "resolve_token",
]
