"""
Discussions: categories, listing, lookup by number or node ID, search and
mutations.
"""

from __future__ import annotations

import logging
from typing import Any

from shirokuma_docs.github import queries
from shirokuma_docs.github.client import GitHubClient, GitHubError
from shirokuma_docs.github.repo import RepoInfo

logger = logging.getLogger(__name__)

DISCUSSIONS_PAGE_SIZE = 50
SEARCH_LIMIT = 100


class CategoryNotFoundError(GitHubError):
    def __init__(self, name: str, available: list[str]):
        message = f"Category '{name}' not found"
        if available:
            message += f". Available categories: {', '.join(available)}"
        super().__init__(message, status=404)
        self.available = available


class DiscussionNotFoundError(GitHubError):
    def __init__(self, ref: str):
        super().__init__(f"Discussion '{ref}' not found", status=404)


def to_output(node: dict[str, Any], with_body: bool = False) -> dict[str, Any]:
    """snake_case view of a discussion node."""
    data = {
        "id": node.get("id"),
        "number": node.get("number"),
        "title": node.get("title") or "",
        "url": node.get("url") or "",
        "created_at": node.get("createdAt"),
        "updated_at": node.get("updatedAt"),
        "author": (node.get("author") or {}).get("login"),
        "category": (node.get("category") or {}).get("name"),
        "answer_chosen": bool(node.get("answerChosenAt")),
    }
    if with_body:
        data["body"] = node.get("body")
    return data


def get_categories(client: GitHubClient, repo: RepoInfo) -> tuple[str | None, list[dict[str, Any]]]:
    """Repository node ID and its discussion categories."""
    result = client.graphql(
        queries.QUERY_DISCUSSION_CATEGORIES, {"owner": repo.owner, "name": repo.name}
    )
    repository = result.data.get("repository") or {}
    nodes = (repository.get("discussionCategories") or {}).get("nodes") or []
    categories = [
        {
            "id": n["id"],
            "name": n["name"],
            "description": n.get("description") or "",
            "emoji": n.get("emoji") or "",
            "is_answerable": bool(n.get("isAnswerable")),
        }
        for n in nodes
        if n and n.get("id") and n.get("name")
    ]
    return repository.get("id"), categories


def find_category(categories: list[dict[str, Any]], name: str) -> dict[str, Any]:
    """Case-insensitive category lookup."""
    for category in categories:
        if category["name"].lower() == name.lower():
            return category
    available = [c["name"] for c in categories]
    logger.info(f"Available categories: {', '.join(available) or 'none'}")
    raise CategoryNotFoundError(name, available)


def list_discussions(
    client: GitHubClient,
    repo: RepoInfo,
    category_id: str | None = None,
    limit: int = 20,
) -> list[dict[str, Any]]:
    discussions: list[dict[str, Any]] = []
    cursor = None
    while len(discussions) < limit:
        result = client.graphql(
            queries.QUERY_DISCUSSIONS,
            {
                "owner": repo.owner,
                "name": repo.name,
                "first": min(limit - len(discussions), DISCUSSIONS_PAGE_SIZE),
                "categoryId": category_id,
                "cursor": cursor,
            },
        )
        page = (result.data.get("repository") or {}).get("discussions") or {}
        for node in page.get("nodes") or []:
            if node and node.get("id") and node.get("number"):
                discussions.append(to_output(node))
        info = page.get("pageInfo") or {}
        if not info.get("hasNextPage"):
            break
        cursor = info.get("endCursor")
    return discussions[:limit]


def get_discussion(client: GitHubClient, repo: RepoInfo, ref: str) -> dict[str, Any]:
    """Look a discussion up by number (``12`` or ``#12``) or by node ID."""
    number = ref.lstrip("#")
    if number.isdigit():
        result = client.graphql(
            queries.QUERY_DISCUSSION,
            {"owner": repo.owner, "name": repo.name, "number": int(number)},
        )
        node = (result.data.get("repository") or {}).get("discussion")
    else:
        result = client.graphql(queries.QUERY_DISCUSSION_BY_ID, {"id": ref})
        node = result.data.get("node")
    if not node or not node.get("id"):
        raise DiscussionNotFoundError(ref)
    return to_output(node, with_body=True)


def build_search_query(repo: RepoInfo, query: str | None, category: str | None = None) -> str:
    search = f"repo:{repo.full_name} type:discussion"
    if query:
        search += f" {query}"
    if category:
        search += f' category:"{category}"'
    return search


def search_discussions(
    client: GitHubClient,
    repo: RepoInfo,
    query: str | None,
    category: str | None = None,
    limit: int = 20,
) -> list[dict[str, Any]]:
    result = client.graphql(
        queries.QUERY_SEARCH_DISCUSSIONS,
        {
            "searchQuery": build_search_query(repo, query, category),
            "first": min(limit, SEARCH_LIMIT),
        },
    )
    nodes = (result.data.get("search") or {}).get("nodes") or []
    return [to_output(n) for n in nodes if n and n.get("id")]


def create_discussion(
    client: GitHubClient,
    repository_id: str,
    category_id: str,
    title: str,
    body: str,
) -> dict[str, Any]:
    result = client.graphql(
        queries.MUTATION_CREATE_DISCUSSION,
        {"repositoryId": repository_id, "categoryId": category_id, "title": title, "body": body},
    )
    discussion = (result.data.get("createDiscussion") or {}).get("discussion")
    if not discussion:
        raise GitHubError("Discussion creation returned no discussion")
    logger.info(f"Created discussion #{discussion.get('number')}")
    return discussion


def update_discussion(
    client: GitHubClient, discussion_id: str, title: str | None = None, body: str | None = None
) -> dict[str, Any]:
    result = client.graphql(
        queries.MUTATION_UPDATE_DISCUSSION,
        {"discussionId": discussion_id, "title": title, "body": body},
    )
    return (result.data.get("updateDiscussion") or {}).get("discussion") or {}


def add_discussion_comment(client: GitHubClient, discussion_id: str, body: str) -> dict[str, Any]:
    result = client.graphql(
        queries.MUTATION_ADD_DISCUSSION_COMMENT, {"discussionId": discussion_id, "body": body}
    )
    return (result.data.get("addDiscussionComment") or {}).get("comment") or {}
