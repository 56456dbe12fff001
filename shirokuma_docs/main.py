#!/usr/bin/env python3
"""shirokuma-docs CLI - Main entry point.

Command groups:
- md: Markdown documentation (build, validate, analyze, lint, list)
- issues / pr / discussions / projects: GitHub workflow
- generate: feature map, test cases, coverage, jsdoc

Core commands: init
"""

import logging
import sys

import typer

from shirokuma_docs.commands import (
    discussions as discussion_commands,
    generate as generate_commands,
    issues as issue_commands,
    md as md_commands,
    projects as project_commands,
    pulls as pull_commands,
)
from shirokuma_docs.commands.init import init
from shirokuma_docs.core import CONFIG_FILENAME, SHIROKUMA_VERSION, find_repo_root

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

app = typer.Typer(
    name="shirokuma-docs",
    help="shirokuma-docs: documentation tooling and GitHub workflow helpers",
    add_completion=False,
    no_args_is_help=True,
)

# ============================================================================
# CORE COMMANDS
# ============================================================================
app.command(name="init")(init)

# ============================================================================
# MARKDOWN
# ============================================================================
app.add_typer(md_commands.app, name="md")

# ============================================================================
# GITHUB
# ============================================================================
app.add_typer(issue_commands.app, name="issues")
app.add_typer(pull_commands.app, name="pr")
app.add_typer(discussion_commands.app, name="discussions")
app.add_typer(project_commands.app, name="projects")

# ============================================================================
# GENERATORS
# ============================================================================
app.add_typer(generate_commands.app, name="generate")


# ============================================================================
# VERSION & CALLBACK
# ============================================================================
def version_callback(value: bool):
    if value:
        root = find_repo_root()
        typer.echo(f"shirokuma-docs v{SHIROKUMA_VERSION}")
        typer.echo(f"Root: {root}")
        typer.echo(f"Config: {'Found' if (root / CONFIG_FILENAME).exists() else 'Missing'}")
        raise typer.Exit()


@app.callback()
def common(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging."),
):
    """
    shirokuma-docs - documentation tooling

    Command groups:
      md           - Build, validate, analyze, lint and list Markdown docs
      issues       - GitHub issues with project fields
      pr           - Pull requests
      discussions  - GitHub Discussions
      projects     - Projects V2 items and fields
      generate     - Feature map, test cases, coverage, jsdoc
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


if __name__ == "__main__":
    app()
