"""
Issue operations over GraphQL, with the project fields of each issue
taken from the project titled like the repository.
"""

from __future__ import annotations

import logging
from typing import Any

from shirokuma_docs.github import queries
from shirokuma_docs.github.client import GitHubClient, GitHubError
from shirokuma_docs.github.projects import PROJECT_FIELD_KEYS, item_field_values
from shirokuma_docs.github.repo import RepoInfo

logger = logging.getLogger(__name__)

ISSUES_PAGE_SIZE = 50
ISSUE_STATES = ("open", "closed", "all")
CLOSE_REASONS = {"completed": "COMPLETED", "not_planned": "NOT_PLANNED"}
CLOSE_STATUS = {"COMPLETED": "Done", "NOT_PLANNED": "Not Planned"}


class IssueNotFoundError(GitHubError):
    def __init__(self, number: int):
        super().__init__(f"Issue #{number} not found", status=404)
        self.number = number


def find_project_item(node: dict[str, Any], project_title: str) -> dict[str, Any] | None:
    items = [i for i in (node.get("projectItems") or {}).get("nodes") or [] if i]
    for item in items:
        if (item.get("project") or {}).get("title") == project_title:
            return item
    return None


def _labels(node: dict[str, Any]) -> list[str]:
    nodes = (node.get("labels") or {}).get("nodes") or []
    return [label["name"] for label in nodes if label and label.get("name")]


def list_issues(
    client: GitHubClient,
    repo: RepoInfo,
    state: str = "open",
    labels: list[str] | None = None,
    statuses: list[str] | None = None,
    limit: int = 20,
) -> list[dict[str, Any]]:
    """Issues newest first, filtered client-side by state, labels and status."""
    issues: list[dict[str, Any]] = []
    cursor = None
    while len(issues) < limit:
        result = client.graphql(
            queries.QUERY_ISSUES,
            {
                "owner": repo.owner,
                "name": repo.name,
                "first": min(limit - len(issues), ISSUES_PAGE_SIZE),
                "cursor": cursor,
            },
        )
        page = (result.data.get("repository") or {}).get("issues") or {}
        for node in page.get("nodes") or []:
            if not node or not node.get("number"):
                continue
            node_state = node.get("state") or "OPEN"
            if state != "all" and node_state != state.upper():
                continue
            issue_labels = _labels(node)
            if labels and not all(label in issue_labels for label in labels):
                continue
            item = find_project_item(node, repo.name)
            fields = item_field_values(item) if item else dict.fromkeys(PROJECT_FIELD_KEYS)
            if statuses and fields["status"] not in statuses:
                continue
            issues.append(
                {
                    "number": node["number"],
                    "title": node.get("title") or "",
                    "url": node.get("url") or "",
                    "state": node_state,
                    "labels": issue_labels,
                    **fields,
                    "project_item_id": item.get("id") if item else None,
                    "created_at": node.get("createdAt"),
                    "updated_at": node.get("updatedAt"),
                }
            )
            if len(issues) >= limit:
                break
        info = page.get("pageInfo") or {}
        if not info.get("hasNextPage"):
            break
        cursor = info.get("endCursor")
    return issues


def get_issue(client: GitHubClient, repo: RepoInfo, number: int) -> dict[str, Any]:
    result = client.graphql(
        queries.QUERY_ISSUE_DETAIL, {"owner": repo.owner, "name": repo.name, "number": number}
    )
    node = (result.data.get("repository") or {}).get("issue")
    if not node:
        raise IssueNotFoundError(number)
    item = find_project_item(node, repo.name)
    issue = {
        "id": node.get("id"),
        "number": node["number"],
        "title": node.get("title"),
        "body": node.get("body"),
        "url": node.get("url"),
        "state": node.get("state"),
        "labels": _labels(node),
        "created_at": node.get("createdAt"),
        "updated_at": node.get("updatedAt"),
        "project_item_id": item.get("id") if item else None,
        "project_id": (item.get("project") or {}).get("id") if item else None,
    }
    if item:
        issue.update(item_field_values(item, with_ids=True))
    return issue


def get_issue_node(client: GitHubClient, repo: RepoInfo, number: int) -> dict[str, Any]:
    """``{id, number, title, url}`` of an issue."""
    result = client.graphql(
        queries.QUERY_ISSUE_ID, {"owner": repo.owner, "name": repo.name, "number": number}
    )
    node = (result.data.get("repository") or {}).get("issue")
    if not node or not node.get("id"):
        raise IssueNotFoundError(number)
    return node


def get_repo_id(client: GitHubClient, repo: RepoInfo) -> str:
    result = client.graphql(queries.QUERY_REPO_ID, {"owner": repo.owner, "name": repo.name})
    repo_id = (result.data.get("repository") or {}).get("id")
    if not repo_id:
        raise GitHubError(f"Repository {repo.full_name} not found", status=404)
    return repo_id


def get_label_ids(client: GitHubClient, repo: RepoInfo, names: list[str]) -> list[str]:
    """IDs for the given label names; unknown labels are logged and skipped."""
    if not names:
        return []
    result = client.graphql(queries.QUERY_LABELS, {"owner": repo.owner, "name": repo.name})
    nodes = ((result.data.get("repository") or {}).get("labels") or {}).get("nodes") or []
    known = {n["name"]: n["id"] for n in nodes if n}
    ids = []
    for name in names:
        if name in known:
            ids.append(known[name])
        else:
            logger.warning(f"Label '{name}' not found")
    return ids


def create_issue(
    client: GitHubClient,
    repo: RepoInfo,
    title: str,
    body: str | None = None,
    labels: list[str] | None = None,
) -> dict[str, Any]:
    variables = {
        "repositoryId": get_repo_id(client, repo),
        "title": title,
        "body": body,
        "labelIds": get_label_ids(client, repo, labels or []) or None,
    }
    result = client.graphql(queries.MUTATION_CREATE_ISSUE, variables)
    issue = (result.data.get("createIssue") or {}).get("issue")
    if not issue:
        raise GitHubError("Issue creation returned no issue")
    logger.info(f"Created issue #{issue.get('number')}")
    return issue


def update_issue(
    client: GitHubClient, issue_id: str, title: str | None = None, body: str | None = None
) -> dict[str, Any]:
    result = client.graphql(
        queries.MUTATION_UPDATE_ISSUE, {"id": issue_id, "title": title, "body": body}
    )
    return (result.data.get("updateIssue") or {}).get("issue") or {}


def add_comment(client: GitHubClient, subject_id: str, body: str) -> dict[str, Any]:
    result = client.graphql(queries.MUTATION_ADD_COMMENT, {"subjectId": subject_id, "body": body})
    edge = (result.data.get("addComment") or {}).get("commentEdge") or {}
    return edge.get("node") or {}


def close_issue(client: GitHubClient, issue_id: str, reason: str = "COMPLETED") -> dict[str, Any]:
    result = client.graphql(
        queries.MUTATION_CLOSE_ISSUE, {"issueId": issue_id, "stateReason": reason}
    )
    return (result.data.get("closeIssue") or {}).get("issue") or {}


def reopen_issue(client: GitHubClient, issue_id: str) -> dict[str, Any]:
    result = client.graphql(queries.MUTATION_REOPEN_ISSUE, {"issueId": issue_id})
    return (result.data.get("reopenIssue") or {}).get("issue") or {}
