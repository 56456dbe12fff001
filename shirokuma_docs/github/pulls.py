"""Pull requests over the REST API."""

from __future__ import annotations

import re
from typing import Any

from shirokuma_docs.github.client import GitHubClient, GitHubError
from shirokuma_docs.github.repo import RepoInfo

PR_STATES = ("open", "closed", "merged", "all")
REST_PAGE_LIMIT = 100

LINKED_ISSUE_RE = re.compile(r"(?:close[sd]?|fix(?:e[sd])?|resolve[sd]?)\s+#(\d+)", re.IGNORECASE)


def parse_linked_issues(body: str | None) -> list[int]:
    """Issue numbers referenced with a closing keyword, in first-seen order."""
    if not body:
        return []
    return list(dict.fromkeys(int(n) for n in LINKED_ISSUE_RE.findall(body)))


def _state(pr: dict[str, Any]) -> str:
    if pr.get("merged_at"):
        return "MERGED"
    return (pr.get("state") or "open").upper()


def to_output(pr: dict[str, Any]) -> dict[str, Any]:
    return {
        "number": pr.get("number"),
        "title": pr.get("title") or "",
        "state": _state(pr),
        "head_branch": (pr.get("head") or {}).get("ref") or "",
        "base_branch": (pr.get("base") or {}).get("ref") or "",
        "author": (pr.get("user") or {}).get("login") or "",
        # REST has no review decision; only GraphQL exposes it
        "review_decision": pr.get("review_decision"),
        "url": pr.get("html_url") or "",
    }


def list_pulls(
    client: GitHubClient, repo: RepoInfo, state: str = "open", limit: int = 20
) -> list[dict[str, Any]]:
    if state not in PR_STATES:
        raise ValueError(f"Invalid state: {state}. Use: {', '.join(PR_STATES)}")
    rest_state = "closed" if state == "merged" else state
    pulls: list[dict[str, Any]] = []
    page = 1
    while len(pulls) < limit:
        batch = client.rest(
            "GET",
            f"repos/{repo.owner}/{repo.name}/pulls",
            params={
                "state": rest_state,
                "per_page": min(REST_PAGE_LIMIT, limit),
                "page": page,
                "sort": "created",
                "direction": "desc",
            },
        ) or []
        for pr in batch:
            if state == "merged" and not pr.get("merged_at"):
                continue
            pulls.append(to_output(pr))
        if len(batch) < min(REST_PAGE_LIMIT, limit):
            break
        page += 1
    return pulls[:limit]


def get_pull(client: GitHubClient, repo: RepoInfo, number: int) -> dict[str, Any]:
    try:
        pr = client.rest("GET", f"repos/{repo.owner}/{repo.name}/pulls/{number}")
    except GitHubError as e:
        if e.status == 404:
            raise GitHubError(f"PR #{number} not found", status=404) from e
        raise
    pr = pr or {}
    body = pr.get("body") or ""
    return {
        **to_output(pr),
        "body": body,
        "labels": [label["name"] for label in pr.get("labels") or [] if label.get("name")],
        "created_at": pr.get("created_at"),
        "updated_at": pr.get("updated_at"),
        "merged_at": pr.get("merged_at"),
        "draft": bool(pr.get("draft")),
        "additions": pr.get("additions", 0),
        "deletions": pr.get("deletions", 0),
        "changed_files": pr.get("changed_files", 0),
        "review_comment_count": pr.get("review_comments", 0),
        "comment_count": pr.get("comments", 0),
        "linked_issues": parse_linked_issues(body),
    }
