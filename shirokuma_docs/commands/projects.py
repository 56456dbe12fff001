"""
Projects V2 commands: list, get, fields, add-issue, set.

Items can be addressed by node ID (``PVTI_...``) or by the number of the
linked issue (``#12`` or ``12``).
"""

from __future__ import annotations

import logging

import typer

from shirokuma_docs.commands.common import (
    REPO_OPTION_HELP,
    check_format,
    command_errors,
    echo_json,
    fail,
    resolve_repo,
)
from shirokuma_docs.github import GitHubClient, GitHubError, RepoInfo, get_client
from shirokuma_docs.github.formatters import PROJECT_COLUMNS, format_output
from shirokuma_docs.github.issues import get_issue_node
from shirokuma_docs.github.projects import (
    add_item_to_project,
    fetch_items,
    get_item,
    get_project_fields,
    get_project_id,
    set_item_fields,
)
from shirokuma_docs.github.validation import is_issue_number, parse_issue_number

logger = logging.getLogger(__name__)

app = typer.Typer(help="GitHub Projects V2 items and fields.", no_args_is_help=True)

HIDDEN_STATUSES = ("Done", "Released")


def _project_id(client: GitHubClient, repo: RepoInfo) -> str:
    project_id = get_project_id(client, repo.owner, repo.name)
    if project_id is None:
        raise GitHubError(f"No Projects V2 project found for {repo.owner}", status=404)
    return project_id


def _resolve_item_id(client: GitHubClient, project_id: str, ref: str) -> str:
    if not is_issue_number(ref):
        return ref
    number = parse_issue_number(ref)
    for item in fetch_items(client, project_id):
        if item.get("issue_number") == number:
            return item["id"]
    raise GitHubError(f"Issue #{number} is not in the project", status=404)


@app.command("list")
def list_command(
    status: list[str] = typer.Option(None, "--status", help="Only this status (repeatable)"),
    include_all: bool = typer.Option(False, "--all", help="Include Done and Released items"),
    fmt: str = typer.Option("json", "--format", help="json|table-json"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """List project items."""
    check_format(fmt)
    repo_info = resolve_repo(repo)
    with command_errors():
        client = get_client()
        project_id = _project_id(client, repo_info)
        items = fetch_items(client, project_id)
    if status:
        items = [i for i in items if i.get("status") in status]
    elif not include_all:
        items = [i for i in items if i.get("status") not in HIDDEN_STATUSES]
    output = {"project_id": project_id, "items": items, "total_count": len(items)}
    typer.echo(format_output(output, fmt, array_key="items", columns=PROJECT_COLUMNS))


@app.command()
def get(
    ref: str = typer.Argument(..., help="Item node ID or #issue-number"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Show one project item with its field option IDs."""
    with command_errors():
        client = get_client()
        if is_issue_number(ref):
            project_id = _project_id(client, resolve_repo(repo))
            item_id = _resolve_item_id(client, project_id, ref)
        else:
            item_id = ref
        item = get_item(client, item_id)
    if item is None:
        fail(f"Project item '{ref}' not found")
    echo_json(item)


@app.command()
def fields(repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP)):
    """Show field definitions and their options."""
    repo_info = resolve_repo(repo)
    with command_errors():
        client = get_client()
        project_id = _project_id(client, repo_info)
        project_fields = get_project_fields(client, project_id)
    echo_json({"project_id": project_id, "fields": [f.to_dict() for f in project_fields.values()]})


@app.command("add-issue")
def add_issue(
    number: str = typer.Argument(..., help="Issue number"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Add an existing issue to the project."""
    repo_info = resolve_repo(repo)
    with command_errors():
        issue_number = parse_issue_number(number)
        client = get_client()
        project_id = _project_id(client, repo_info)
        node = get_issue_node(client, repo_info, issue_number)
        item_id = add_item_to_project(client, project_id, node["id"])
    if not item_id:
        fail(f"Could not add #{issue_number} to the project")
    echo_json({"number": issue_number, "project_id": project_id, "item_id": item_id})


@app.command("set")
def set_field(
    ref: str = typer.Argument(..., help="Item node ID or #issue-number"),
    field: str = typer.Option(..., "--field", help="Field name, e.g. Status"),
    value: str = typer.Option(..., "--value", help="Option name or text"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Set a single-select or text field on a project item."""
    repo_info = resolve_repo(repo)
    with command_errors():
        client = get_client()
        project_id = _project_id(client, repo_info)
        item_id = _resolve_item_id(client, project_id, ref)
        project_fields = get_project_fields(client, project_id)
        applied = set_item_fields(client, project_id, item_id, project_fields, {field: value})
    if not applied:
        fail(f"Project has no field '{field}'")
    echo_json({"item_id": item_id, "field": field, "value": applied[field]})
