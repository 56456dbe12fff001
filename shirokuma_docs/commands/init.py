from pathlib import Path

import tomli_w
import typer

from shirokuma_docs.core import CONFIG_FILENAME

DEFAULT_CONFIG = {
    "project": {"name": "Project", "description": ""},
    "output": {
        "dir": "docs",
        "portal": "docs/portal",
        "generated": "docs/generated",
    },
    "test_cases": {"playwright_dir": "tests/e2e"},
    "coverage": {
        "source": "coverage/coverage-summary.json",
        "thresholds": {"lines": 80},
    },
    "github": {
        "discussions_category": "Handovers",
        "list_limit": 20,
        "default_status": "Backlog",
    },
    "md": {
        "directories": {"source": "docs", "output": "dist"},
        "build": {"default_output": "dist/shirokuma-docs.md", "include": ["**/*.md"]},
        "validation": {"required_frontmatter": ["title"]},
        "list": {"default_format": "markdown", "group_by": "layer"},
    },
}

OVERVIEW_TEMPLATE = """\
---
title: "{{title}}"
type: overview
layer: 0
---

# {{title}}

## Purpose

## Scope
"""


def init(
    path: Path = typer.Option(
        Path("."), "--path", "-p", help="Directory to initialize (default: current directory)"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config file"),
):
    """
    Write a default shirokuma-docs.toml and the .shirokuma/templates/ directory.
    """
    target_root = path.resolve()
    typer.echo(f"Initializing shirokuma-docs in: {target_root}")

    config_path = target_root / CONFIG_FILENAME
    if config_path.exists() and not force:
        typer.echo(f"❌ {config_path} already exists (use --force to overwrite)", err=True)
        raise typer.Exit(1)

    target_root.mkdir(parents=True, exist_ok=True)
    with open(config_path, "wb") as f:
        tomli_w.dump(DEFAULT_CONFIG, f)
    typer.echo(f"Created configuration: {config_path}")

    templates_dir = target_root / ".shirokuma" / "templates"
    templates_dir.mkdir(parents=True, exist_ok=True)
    overview = templates_dir / "overview.md"
    if not overview.exists() or force:
        overview.write_text(OVERVIEW_TEMPLATE, encoding="utf-8")
    typer.echo(f"Created templates directory: {templates_dir}")

    typer.echo("✨ shirokuma-docs initialized successfully.")
