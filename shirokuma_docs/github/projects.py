"""
Projects V2 helpers: project lookup, field definitions, item listing and
field updates.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any

from shirokuma_docs.github import queries
from shirokuma_docs.github.client import GitHubClient, GitHubError
from shirokuma_docs.github.validation import InputValidationError

logger = logging.getLogger(__name__)

FIELD_FALLBACKS = {"Type": ["Item Type", "ItemType"]}
PROJECT_FIELD_KEYS = ("status", "priority", "type", "size")
PROJECT_LOOKUP_LIMIT = 50
ITEMS_PAGE_SIZE = 100


@dataclass
class ProjectField:
    id: str
    name: str
    type: str
    options: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type, "options": self.options}


def get_project_id(client: GitHubClient, owner: str, title: str | None = None) -> str | None:
    """
    Find the Projects V2 project for ``owner``.

    Organization projects are tried first, then the user's. The project
    whose title equals ``title`` wins; otherwise the first one is used.
    """
    projects: list[dict[str, Any]] = []
    variables = {"login": owner, "first": PROJECT_LOOKUP_LIMIT}
    try:
        result = client.graphql(queries.QUERY_ORG_PROJECTS, variables)
        org = result.data.get("organization") or {}
        projects = (org.get("projectsV2") or {}).get("nodes") or []
    except GitHubError as e:
        logger.debug(f"Organization lookup failed for {owner}: {e}")

    if not projects:
        try:
            result = client.graphql(queries.QUERY_USER_PROJECTS, variables)
        except GitHubError as e:
            logger.debug(f"User lookup failed for {owner}: {e}")
            return None
        user = result.data.get("user") or {}
        projects = (user.get("projectsV2") or {}).get("nodes") or []

    projects = [p for p in projects if p and p.get("id")]
    if not projects:
        return None

    for project in projects:
        if title and project.get("title") == title:
            return project["id"]

    logger.warning(f"No project named '{title}'. Using '{projects[0].get('title')}' instead.")
    return projects[0]["id"]


def get_project_fields(client: GitHubClient, project_id: str) -> dict[str, ProjectField]:
    result = client.graphql(queries.QUERY_PROJECT_FIELDS, {"projectId": project_id})
    node = result.data.get("node") or {}
    fields: dict[str, ProjectField] = {}
    for raw in (node.get("fields") or {}).get("nodes") or []:
        if not raw or not raw.get("id") or not raw.get("name"):
            continue
        data_type = raw.get("dataType", "")
        if data_type not in ("SINGLE_SELECT", "TEXT"):
            continue
        fields[raw["name"]] = ProjectField(
            id=raw["id"],
            name=raw["name"],
            type=data_type,
            options={o["name"]: o["id"] for o in raw.get("options") or []},
        )
    return fields


def resolve_field_name(name: str, fields: dict[str, Any]) -> str | None:
    """Actual field name for ``name``; ``Type`` falls back to legacy names."""
    if name in fields:
        return name
    for candidate in FIELD_FALLBACKS.get(name, []):
        if candidate in fields:
            return candidate
    return None


def _single_select(node: dict[str, Any], alias: str) -> dict[str, Any]:
    value = node.get(alias)
    return value if isinstance(value, dict) else {}


def item_field_values(node: dict[str, Any], with_ids: bool = False) -> dict[str, Any]:
    """Flatten the aliased fieldValueByName results of a project item."""
    values: dict[str, Any] = {}
    for key in PROJECT_FIELD_KEYS:
        value = _single_select(node, key)
        if key == "type" and not value.get("name"):
            value = _single_select(node, "itemType")
        values[key] = value.get("name")
        if with_ids:
            values[f"{key}_option_id"] = value.get("optionId")
    return values


def fetch_items(client: GitHubClient, project_id: str) -> list[dict[str, Any]]:
    """All items of a project, 100 per page."""
    items: list[dict[str, Any]] = []
    cursor = None
    while True:
        result = client.graphql(
            queries.QUERY_PROJECT_ITEMS, {"projectId": project_id, "cursor": cursor}
        )
        node = result.data.get("node") or {}
        page = node.get("items") or {}
        for raw in page.get("nodes") or []:
            if not raw:
                continue
            content = raw.get("content") or {}
            items.append(
                {
                    "id": raw.get("id"),
                    "title": content.get("title"),
                    **item_field_values(raw),
                    "issue_number": content.get("number"),
                }
            )
        info = page.get("pageInfo") or {}
        if not info.get("hasNextPage"):
            break
        cursor = info.get("endCursor")
    logger.debug(f"Fetched {len(items)} project items")
    return items


def get_item(client: GitHubClient, item_id: str) -> dict[str, Any] | None:
    result = client.graphql(queries.QUERY_PROJECT_ITEM, {"itemId": item_id})
    node = result.data.get("node")
    if not node:
        return None
    content = node.get("content") or {}
    project = node.get("project") or {}
    return {
        "id": node.get("id"),
        "title": content.get("title"),
        "body": content.get("body"),
        "url": content.get("url"),
        "issue_number": content.get("number"),
        "content_id": content.get("id"),
        "project_id": project.get("id"),
        "project_title": project.get("title"),
        **item_field_values(node, with_ids=True),
    }


def add_item_to_project(client: GitHubClient, project_id: str, content_id: str) -> str | None:
    result = client.graphql(
        queries.MUTATION_ADD_TO_PROJECT, {"projectId": project_id, "contentId": content_id}
    )
    item = (result.data.get("addProjectV2ItemById") or {}).get("item") or {}
    return item.get("id")


def update_select_field(
    client: GitHubClient,
    project_id: str,
    item_id: str,
    project_field: ProjectField,
    option_name: str,
) -> None:
    option_id = project_field.options.get(option_name)
    if option_id is None:
        # Case-insensitive second chance
        lowered = {k.lower(): v for k, v in project_field.options.items()}
        option_id = lowered.get(option_name.lower())
    if option_id is None:
        available = ", ".join(project_field.options) or "none"
        raise InputValidationError(
            f"Invalid value '{option_name}' for {project_field.name}. Available: {available}"
        )
    client.graphql(
        queries.MUTATION_UPDATE_SELECT_FIELD,
        {
            "projectId": project_id,
            "itemId": item_id,
            "fieldId": project_field.id,
            "optionId": option_id,
        },
    )


def update_text_field(
    client: GitHubClient,
    project_id: str,
    item_id: str,
    project_field: ProjectField,
    text: str,
) -> None:
    client.graphql(
        queries.MUTATION_UPDATE_TEXT_FIELD,
        {"projectId": project_id, "itemId": item_id, "fieldId": project_field.id, "text": text},
    )


def set_item_fields(
    client: GitHubClient,
    project_id: str,
    item_id: str,
    fields: dict[str, ProjectField],
    values: dict[str, str | None],
) -> dict[str, str]:
    """Apply ``{field name: value}`` updates, skipping None values.

    Returns the updates that were applied, keyed by the requested name.
    """
    applied: dict[str, str] = {}
    for name, value in values.items():
        if value is None:
            continue
        actual = resolve_field_name(name, fields)
        if actual is None:
            logger.warning(f"Project has no field '{name}'; skipping")
            continue
        project_field = fields[actual]
        if project_field.type == "TEXT":
            update_text_field(client, project_id, item_id, project_field, value)
        else:
            update_select_field(client, project_id, item_id, project_field, value)
        applied[name] = value
    return applied
