"""
Issue commands: list, show, create, update, comment, close, reopen, fields.

Every command prints JSON on stdout. Project fields (Status, Priority,
Type, Size) come from the Projects V2 project titled like the repository.
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
    project_config,
    resolve_repo,
)
from shirokuma_docs.github import GitHubClient, GitHubError, InputValidationError, RepoInfo, get_client
from shirokuma_docs.github.config import get_default_labels, get_default_status, get_list_limit
from shirokuma_docs.github.formatters import ISSUE_COLUMNS, format_output
from shirokuma_docs.github.issues import (
    CLOSE_REASONS,
    CLOSE_STATUS,
    ISSUE_STATES,
    add_comment,
    close_issue,
    create_issue,
    get_issue,
    get_issue_node,
    list_issues,
    reopen_issue,
    update_issue,
)
from shirokuma_docs.github.projects import (
    ProjectField,
    add_item_to_project,
    get_project_fields,
    get_project_id,
    set_item_fields,
)
from shirokuma_docs.github.validation import check_title_and_body, parse_issue_number, read_body

logger = logging.getLogger(__name__)

app = typer.Typer(help="GitHub issues with their project fields.", no_args_is_help=True)


def _project(client: GitHubClient, repo: RepoInfo) -> tuple[str | None, dict[str, ProjectField]]:
    project_id = get_project_id(client, repo.owner, repo.name)
    if project_id is None:
        logger.warning(f"No Projects V2 project found for {repo.owner}")
        return None, {}
    return project_id, get_project_fields(client, project_id)


def _field_values(
    status: str | None, priority: str | None, issue_type: str | None, size: str | None
) -> dict[str, str | None]:
    return {"Status": status, "Priority": priority, "Type": issue_type, "Size": size}


@app.command("list")
def list_command(
    state: str = typer.Option("open", "--state", help="open|closed|all"),
    all_issues: bool = typer.Option(False, "--all", help="Shortcut for --state all"),
    label: list[str] = typer.Option(None, "--label", help="Require this label (repeatable)"),
    status: list[str] = typer.Option(None, "--status", help="Project status (repeatable)"),
    limit: int = typer.Option(None, "--limit", help="Maximum issues (default from config)"),
    fmt: str = typer.Option("json", "--format", help="json|table-json"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """List issues, newest first."""
    check_format(fmt)
    state = "all" if all_issues else state
    if state not in ISSUE_STATES:
        fail(f"Invalid state: {state}. Use one of: {', '.join(ISSUE_STATES)}")

    config = project_config()
    repo_info = resolve_repo(repo)
    with command_errors():
        issues = list_issues(
            get_client(),
            repo_info,
            state=state,
            labels=label or None,
            statuses=status or None,
            limit=limit or get_list_limit(config),
        )
    output = {"repository": repo_info.full_name, "issues": issues, "total_count": len(issues)}
    typer.echo(format_output(output, fmt, array_key="issues", columns=ISSUE_COLUMNS))


@app.command()
def show(
    number: str = typer.Argument(..., help="Issue number (12 or #12)"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Show one issue with its project fields and option IDs."""
    repo_info = resolve_repo(repo)
    with command_errors():
        echo_json(get_issue(get_client(), repo_info, parse_issue_number(number)))


@app.command()
def create(
    title: str = typer.Option(..., "--title", help="Issue title"),
    body: str = typer.Option(None, "--body", help="Body text, '-' for stdin or @file"),
    label: list[str] = typer.Option(None, "--label", help="Label (repeatable)"),
    status: str = typer.Option(None, "--status", help="Project status (default from config)"),
    priority: str = typer.Option(None, "--priority", help="Project priority"),
    issue_type: str = typer.Option(None, "--type", help="Project type"),
    size: str = typer.Option(None, "--size", help="Project size"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Create an issue, add it to the project and set its fields."""
    config = project_config()
    repo_info = resolve_repo(repo)
    with command_errors():
        body_text = read_body(body)
        check_title_and_body(title, body_text)
        client = get_client()
        issue = create_issue(
            client, repo_info, title, body_text, label or get_default_labels(config)
        )
        output = {
            "number": issue.get("number"),
            "title": issue.get("title"),
            "url": issue.get("url"),
            "project_item_id": None,
            "fields": {},
        }

        project_id, fields = _project(client, repo_info)
        if project_id:
            item_id = add_item_to_project(client, project_id, issue["id"])
            output["project_item_id"] = item_id
            if item_id:
                values = _field_values(status or get_default_status(config), priority, issue_type, size)
                output["fields"] = set_item_fields(client, project_id, item_id, fields, values)
    echo_json(output)


@app.command()
def update(
    number: str = typer.Argument(..., help="Issue number"),
    title: str = typer.Option(None, "--title", help="New title"),
    body: str = typer.Option(None, "--body", help="New body, '-' for stdin or @file"),
    status: str = typer.Option(None, "--status", help="Project status"),
    priority: str = typer.Option(None, "--priority", help="Project priority"),
    issue_type: str = typer.Option(None, "--type", help="Project type"),
    size: str = typer.Option(None, "--size", help="Project size"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Update the title, body or project fields of an issue."""
    values = _field_values(status, priority, issue_type, size)
    if title is None and body is None and not any(values.values()):
        fail("Nothing to update. Pass --title, --body or a field option.")

    repo_info = resolve_repo(repo)
    with command_errors():
        issue_number = parse_issue_number(number)
        body_text = read_body(body)
        check_title_and_body(title, body_text, require_title=False)
        client = get_client()
        issue = get_issue(client, repo_info, issue_number)
        output = {"number": issue_number, "updated": [], "fields": {}}

        if title is not None or body_text is not None:
            update_issue(client, issue["id"], title, body_text)
            output["updated"] = [k for k, v in (("title", title), ("body", body_text)) if v is not None]

        if any(values.values()):
            project_id = issue.get("project_id")
            item_id = issue.get("project_item_id")
            if project_id:
                fields = get_project_fields(client, project_id)
            else:
                project_id, fields = _project(client, repo_info)
                if project_id is None:
                    fail(f"No project found for {repo_info.owner}; cannot set fields")
                item_id = add_item_to_project(client, project_id, issue["id"])
            output["fields"] = set_item_fields(client, project_id, item_id, fields, values)
    echo_json(output)


@app.command()
def comment(
    number: str = typer.Argument(..., help="Issue number"),
    body: str = typer.Option(..., "--body", help="Comment text, '-' for stdin or @file"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Add a comment to an issue."""
    repo_info = resolve_repo(repo)
    with command_errors():
        issue_number = parse_issue_number(number)
        body_text = read_body(body)
        check_title_and_body(None, body_text, require_title=False)
        if not body_text or not body_text.strip():
            raise InputValidationError("Comment body cannot be empty")
        client = get_client()
        node = get_issue_node(client, repo_info, issue_number)
        created = add_comment(client, node["id"], body_text)
    echo_json({"number": issue_number, "comment_id": created.get("id"), "url": created.get("url")})


@app.command()
def close(
    number: str = typer.Argument(..., help="Issue number"),
    reason: str = typer.Option("completed", "--reason", help="completed|not_planned"),
    comment_body: str = typer.Option(None, "--comment", help="Closing comment, '-' or @file"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Close an issue and move its project status to Done or Not Planned."""
    if reason not in CLOSE_REASONS:
        fail(f"Invalid reason: {reason}. Use one of: {', '.join(CLOSE_REASONS)}")
    state_reason = CLOSE_REASONS[reason]

    repo_info = resolve_repo(repo)
    with command_errors():
        issue_number = parse_issue_number(number)
        client = get_client()
        issue = get_issue(client, repo_info, issue_number)
        if comment_body:
            add_comment(client, issue["id"], read_body(comment_body))
        close_issue(client, issue["id"], state_reason)

        status = None
        if issue.get("project_id") and issue.get("project_item_id"):
            target = CLOSE_STATUS[state_reason]
            try:
                fields = get_project_fields(client, issue["project_id"])
                applied = set_item_fields(
                    client, issue["project_id"], issue["project_item_id"], fields, {"Status": target}
                )
                status = applied.get("Status")
            except (GitHubError, InputValidationError) as e:
                logger.warning(f"Status update skipped for #{issue_number}: {e}")
    echo_json({"number": issue_number, "state": "CLOSED", "state_reason": state_reason, "status": status})


@app.command()
def reopen(
    number: str = typer.Argument(..., help="Issue number"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Reopen a closed issue."""
    repo_info = resolve_repo(repo)
    with command_errors():
        issue_number = parse_issue_number(number)
        client = get_client()
        node = get_issue_node(client, repo_info, issue_number)
        reopen_issue(client, node["id"])
    echo_json({"number": issue_number, "state": "OPEN"})


@app.command()
def fields(repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP)):
    """Show the project's field definitions and options."""
    repo_info = resolve_repo(repo)
    with command_errors():
        project_id, project_fields = _project(get_client(), repo_info)
    if project_id is None:
        fail(f"No project found for {repo_info.owner}")
    echo_json({"project_id": project_id, "fields": [f.to_dict() for f in project_fields.values()]})
