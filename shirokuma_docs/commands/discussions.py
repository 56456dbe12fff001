"""
Discussion commands: categories, list, show, create, update, search, comment.
"""

from __future__ import annotations

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
from shirokuma_docs.github import GitHubError, InputValidationError, get_client
from shirokuma_docs.github.config import get_discussions_category, get_list_limit
from shirokuma_docs.github.discussions import (
    add_discussion_comment,
    create_discussion,
    find_category,
    get_categories,
    get_discussion,
    list_discussions,
    search_discussions,
    update_discussion,
)
from shirokuma_docs.github.formatters import DISCUSSION_COLUMNS, format_output
from shirokuma_docs.github.validation import check_title_and_body, read_body

app = typer.Typer(help="GitHub Discussions.", no_args_is_help=True)


@app.command()
def categories(repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP)):
    """List the repository's discussion categories."""
    repo_info = resolve_repo(repo)
    with command_errors():
        _, found = get_categories(get_client(), repo_info)
    if not found:
        typer.echo("⚠️  No discussion categories found. Are Discussions enabled?", err=True)
    echo_json({"repository": repo_info.full_name, "categories": found, "total_count": len(found)})


@app.command("list")
def list_command(
    category: str = typer.Option(None, "--category", help="Category name (default from config)"),
    limit: int = typer.Option(None, "--limit", help="Maximum discussions (default from config)"),
    fmt: str = typer.Option("json", "--format", help="json|table-json"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """List discussions in a category, newest first."""
    check_format(fmt)
    config = project_config()
    repo_info = resolve_repo(repo)
    category_name = category or get_discussions_category(config)
    with command_errors():
        client = get_client()
        _, found = get_categories(client, repo_info)
        category_id = find_category(found, category_name)["id"]
        discussions = list_discussions(
            client, repo_info, category_id, limit or get_list_limit(config)
        )
    output = {
        "repository": repo_info.full_name,
        "category": category_name,
        "discussions": discussions,
        "total_count": len(discussions),
    }
    typer.echo(format_output(output, fmt, array_key="discussions", columns=DISCUSSION_COLUMNS))


@app.command()
def show(
    ref: str = typer.Argument(..., help="Discussion number or node ID"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Show one discussion with its body."""
    repo_info = resolve_repo(repo)
    with command_errors():
        echo_json(get_discussion(get_client(), repo_info, ref))


@app.command()
def create(
    title: str = typer.Option(..., "--title", help="Discussion title"),
    body: str = typer.Option(..., "--body", help="Body text, '-' for stdin or @file"),
    category: str = typer.Option(None, "--category", help="Category name (default from config)"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Start a discussion."""
    config = project_config()
    repo_info = resolve_repo(repo)
    category_name = category or get_discussions_category(config)
    with command_errors():
        body_text = read_body(body)
        check_title_and_body(title, body_text)
        if not body_text or not body_text.strip():
            raise InputValidationError("Body cannot be empty")
        client = get_client()
        repository_id, found = get_categories(client, repo_info)
        if not repository_id:
            raise GitHubError(f"Repository {repo_info.full_name} not found", status=404)
        target = find_category(found, category_name)
        discussion = create_discussion(client, repository_id, target["id"], title, body_text)
    echo_json(
        {
            "id": discussion.get("id"),
            "number": discussion.get("number"),
            "title": discussion.get("title"),
            "url": discussion.get("url"),
            "category": target["name"],
        }
    )


@app.command()
def update(
    ref: str = typer.Argument(..., help="Discussion number or node ID"),
    title: str = typer.Option(None, "--title", help="New title"),
    body: str = typer.Option(None, "--body", help="New body, '-' for stdin or @file"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Update a discussion's title or body."""
    if title is None and body is None:
        fail("Nothing to update. Pass --title or --body.")
    repo_info = resolve_repo(repo)
    with command_errors():
        body_text = read_body(body)
        check_title_and_body(title, body_text, require_title=False)
        client = get_client()
        discussion = get_discussion(client, repo_info, ref)
        updated = update_discussion(client, discussion["id"], title, body_text)
    echo_json(
        {
            "id": discussion["id"],
            "number": discussion["number"],
            "title": updated.get("title", discussion["title"]),
            "url": updated.get("url", discussion["url"]),
        }
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Search terms"),
    category: str = typer.Option(None, "--category", help="Only this category"),
    limit: int = typer.Option(None, "--limit", help="Maximum results (default from config)"),
    fmt: str = typer.Option("json", "--format", help="json|table-json"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Search discussions in the repository."""
    check_format(fmt)
    config = project_config()
    repo_info = resolve_repo(repo)
    with command_errors():
        results = search_discussions(
            get_client(), repo_info, query, category, limit or get_list_limit(config)
        )
    output = {
        "repository": repo_info.full_name,
        "query": query,
        "discussions": results,
        "total_count": len(results),
    }
    typer.echo(format_output(output, fmt, array_key="discussions", columns=DISCUSSION_COLUMNS))


@app.command()
def comment(
    ref: str = typer.Argument(..., help="Discussion number or node ID"),
    body: str = typer.Option(..., "--body", help="Comment text, '-' for stdin or @file"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Comment on a discussion."""
    repo_info = resolve_repo(repo)
    with command_errors():
        body_text = read_body(body)
        check_title_and_body(None, body_text, require_title=False)
        if not body_text or not body_text.strip():
            raise InputValidationError("Comment body cannot be empty")
        client = get_client()
        discussion = get_discussion(client, repo_info, ref)
        created = add_discussion_comment(client, discussion["id"], body_text)
    echo_json({"discussion": discussion["number"], "comment_id": created.get("id"), "url": created.get("url")})
