"""
Pull request commands (REST).
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
from shirokuma_docs.github import get_client
from shirokuma_docs.github.config import get_list_limit
from shirokuma_docs.github.formatters import PR_COLUMNS, format_output
from shirokuma_docs.github.pulls import PR_STATES, get_pull, list_pulls
from shirokuma_docs.github.validation import parse_issue_number

app = typer.Typer(help="GitHub pull requests.", no_args_is_help=True)


@app.command("list")
def list_command(
    state: str = typer.Option("open", "--state", help="open|closed|merged|all"),
    limit: int = typer.Option(None, "--limit", help="Maximum pull requests (default from config)"),
    fmt: str = typer.Option("json", "--format", help="json|table-json"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """List pull requests, newest first."""
    check_format(fmt)
    if state not in PR_STATES:
        fail(f"Invalid state: {state}. Use one of: {', '.join(PR_STATES)}")

    config = project_config()
    repo_info = resolve_repo(repo)
    with command_errors():
        pulls = list_pulls(get_client(), repo_info, state, limit or get_list_limit(config))
    output = {"repository": repo_info.full_name, "pull_requests": pulls, "total_count": len(pulls)}
    typer.echo(format_output(output, fmt, array_key="pull_requests", columns=PR_COLUMNS))


@app.command()
def show(
    number: str = typer.Argument(..., help="Pull request number"),
    repo: str = typer.Option(None, "--repo", help=REPO_OPTION_HELP),
):
    """Show one pull request with its linked issues."""
    repo_info = resolve_repo(repo)
    with command_errors():
        echo_json(get_pull(get_client(), repo_info, parse_issue_number(number)))
