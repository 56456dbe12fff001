"""
Generator commands: feature-map, test-cases, coverage, jsdoc.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table
import typer

from shirokuma_docs.commands.common import fail, project_config
from shirokuma_docs.core import find_repo_root, get_output_path, get_project_name, get_section
from shirokuma_docs.fileio import write_text_atomic
from shirokuma_docs.generators.coverage import (
    DEFAULT_SOURCE,
    METRICS,
    CoverageError,
    calculate_total_coverage,
    check_thresholds,
    format_coverage_report,
    load_coverage_summary,
)
from shirokuma_docs.generators.feature_map import build_feature_map, scan_sources, write_feature_map
from shirokuma_docs.generators.test_cases import (
    collect_test_files,
    create_summary,
    extract_all,
    write_test_cases,
)
from shirokuma_docs.parsers.jsdoc import extract_jsdocs_from_file

logger = logging.getLogger(__name__)

app = typer.Typer(help="Generate documentation from source annotations.", no_args_is_help=True)
console = Console()

COVERAGE_FORMATS = ("summary", "json", "html")


@app.command("feature-map")
def feature_map(
    output: Path = typer.Option(None, "--output", "-o", help="Directory for feature-map.json"),
):
    """Catalogue screens, components, actions, modules and tables by feature."""
    config = project_config()
    repo_root = find_repo_root()
    section = get_section(config, "feature_map")
    items, module_descriptions = scan_sources(
        repo_root, section.get("include"), section.get("exclude")
    )
    data = build_feature_map(items, module_descriptions)
    json_path, html_path = write_feature_map(
        data,
        get_project_name(config),
        output or get_output_path(config, repo_root, "generated"),
        get_output_path(config, repo_root, "portal"),
    )

    table = Table(title="Feature Map")
    table.add_column("Feature", style="cyan")
    for kind in ("screens", "components", "actions", "modules", "tables"):
        table.add_column(kind.capitalize(), justify="right")
    groups = list(data["features"].items()) + [("(uncategorized)", data["uncategorized"])]
    for name, group in groups:
        table.add_row(name, *(str(len(v)) for v in group.values()))
    console.print(table)
    console.print(f"[green]✓[/green] {json_path}\n[green]✓[/green] {html_path}")


@app.command("test-cases")
def test_cases(
    output: Path = typer.Option(None, "--output", "-o", help="Directory for test-cases.md"),
):
    """Catalogue Jest and Playwright test cases with their annotations."""
    config = project_config()
    repo_root = find_repo_root()
    section = get_section(config, "test_cases")
    files = collect_test_files(repo_root, section)
    cases, file_stats = extract_all(repo_root, files)
    summary = create_summary(file_stats, cases)

    output_dir = output or (
        repo_root / section["output"] if section.get("output") else get_output_path(config, repo_root, "generated")
    )
    written = write_test_cases(
        cases,
        summary,
        get_project_name(config),
        output_dir,
        get_output_path(config, repo_root, "portal"),
    )
    console.print(
        f"Jest: {summary.jest_tests} tests in {summary.jest_files} files  "
        f"Playwright: {summary.playwright_tests} tests in {summary.playwright_files} files"
    )
    for path in written:
        console.print(f"[green]✓[/green] {path}")


@app.command()
def coverage(
    source: Path = typer.Option(None, "--source", "-s", help="coverage-summary.json path"),
    fmt: str = typer.Option("summary", "--format", "-f", help="summary|json|html"),
    fail_under: float = typer.Option(None, "--fail-under", help="Minimum line coverage percent"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the report to a file"),
):
    """Report Istanbul coverage and enforce thresholds."""
    if fmt not in COVERAGE_FORMATS:
        fail(f"Unknown format: {fmt}. Use one of: {', '.join(COVERAGE_FORMATS)}")

    config = project_config()
    repo_root = find_repo_root()
    section = get_section(config, "coverage")
    summary_path = source or repo_root / section.get("source", DEFAULT_SOURCE)
    try:
        files = load_coverage_summary(summary_path)
    except CoverageError as e:
        fail(str(e))

    report = format_coverage_report(files, fmt, get_project_name(config))
    if output is None and fmt == "html":
        output = get_output_path(config, repo_root, "portal") / "coverage.html"
    if output:
        write_text_atomic(output, report)
        typer.echo(f"✅ Wrote {output}")
    else:
        typer.echo(report)

    thresholds = {m: (section.get("thresholds") or {}).get(m) for m in METRICS}
    lines_floor = fail_under if fail_under is not None else section.get("fail_under")
    if lines_floor is not None:
        thresholds["lines"] = lines_floor
    passed, failures = check_thresholds(calculate_total_coverage(files), thresholds)
    if not passed:
        for failure in failures:
            typer.echo(f"❌ Coverage below threshold: {failure}", err=True)
        raise typer.Exit(1)


@app.command()
def jsdoc(file: Path = typer.Argument(..., help="TypeScript source file")):
    """Print the JSDoc of every exported function in a file as JSON."""
    if not file.is_file():
        fail(f"File not found: {file}")
    docs = extract_jsdocs_from_file(file.read_text(encoding="utf-8"))
    typer.echo(json.dumps([d.to_dict() for d in docs], indent=2, ensure_ascii=False))
