"""
Markdown documentation commands: build, validate, analyze, lint, list.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from rich.console import Console
import typer

from shirokuma_docs.core import ConfigError, find_repo_root, load_config, load_config_file
from shirokuma_docs.fileio import write_text_atomic
from shirokuma_docs.md import (
    AnalysisResult,
    Analyzer,
    Builder,
    BuildError,
    Linter,
    Lister,
    MdConfig,
    MdConfigError,
    TokenOptimizer,
    Validator,
    format_documents,
    format_lint_report,
    format_optimization_report,
    load_md_config,
)
from shirokuma_docs.md.collector import collect_files
from shirokuma_docs.md.types import SEVERITIES

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Validate, lint, analyze, list and build Markdown documentation.",
    no_args_is_help=True,
)
console = Console()

LIST_FORMATS = ("simple", "tree", "detailed", "markdown", "json")


def _load(config_path: Path | None) -> tuple[Path, MdConfig]:
    """Resolve the project root and the validated [md] config."""
    try:
        if config_path:
            repo_root = config_path.resolve().parent
            toml_data = load_config_file(config_path)
        else:
            repo_root = find_repo_root()
            toml_data = load_config(repo_root)
        return repo_root, load_md_config(toml_data)
    except FileNotFoundError:
        typer.echo(f"❌ Config not found: {config_path}", err=True)
        raise typer.Exit(1) from None
    except (ConfigError, MdConfigError) as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1) from None


def _write_or_echo(content: str, output: Path | None) -> None:
    if output:
        write_text_atomic(output, content)
        typer.echo(f"✅ Wrote {output}")
    else:
        typer.echo(content, nl=not content.endswith("\n"))


@app.command()
def build(
    config: Path = typer.Option(None, "--config", "-c", help="Path to shirokuma-docs.toml"),
    output: Path = typer.Option(None, "--output", "-o", help="Output file"),
    include: list[str] = typer.Option(None, "--include", help="Include glob (repeatable)"),
    exclude: list[str] = typer.Option(None, "--exclude", help="Exclude glob (repeatable)"),
    watch: bool = typer.Option(False, "--watch", "-w", help="Rebuild on changes"),
):
    """Concatenate the documentation tree into a single Markdown file."""
    repo_root, md_config = _load(config)
    builder = Builder(md_config)
    source_dir = md_config.source_dir(repo_root)
    output_path = output or repo_root / md_config.build.default_output

    def report(result) -> None:
        console.print(
            f"[green]✓[/green] Built {result.file_count} files -> {result.output_path}\n"
            f"  Size: {result.total_size / 1024:.1f} KB  "
            f"Tokens: ~{result.token_count:,}  Time: {result.build_time:.2f}s"
        )

    if watch:
        console.print(f"[dim]Watching {source_dir} (Ctrl+C to stop)[/dim]")
        builder.watch(source_dir, output_path, on_rebuild=report)
        return

    try:
        result = builder.build(source_dir, output_path, include or None, exclude or None)
    except BuildError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1) from None
    report(result)


@app.command()
def validate(
    config: Path = typer.Option(None, "--config", "-c", help="Path to shirokuma-docs.toml"),
    severity: str = typer.Option("info", "--severity", help="Minimum severity: error|warning|info"),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON"),
):
    """Check frontmatter, links, patterns and template compliance."""
    if severity not in SEVERITIES:
        typer.echo(f"❌ Invalid severity '{severity}'. Use one of: {', '.join(SEVERITIES)}", err=True)
        raise typer.Exit(1)

    repo_root, md_config = _load(config)
    result = Validator(md_config, repo_root).validate(md_config.source_dir(repo_root))
    shown = SEVERITIES[: SEVERITIES.index(severity) + 1]
    issues = [i for i in result.all_issues() if i.severity in shown]

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "valid": result.valid,
                    "files_checked": result.files_checked,
                    "issues": [i.to_dict() for i in issues],
                },
                indent=2,
                ensure_ascii=False,
            )
        )
    else:
        colors = {"error": "red", "warning": "yellow", "info": "blue"}
        for issue in issues:
            loc = f"{issue.file}:{issue.line}" if issue.line else issue.file
            console.print(
                f"[{colors[issue.severity]}]{issue.severity:<7}[/{colors[issue.severity]}] "
                f"{loc} [dim]{issue.rule}[/dim] {issue.message}",
                highlight=False,
            )
        console.print(
            f"\nChecked {result.files_checked} files: {len(result.errors)} errors, "
            f"{len(result.warnings)} warnings, {len(result.info)} info"
        )

    if not result.valid:
        raise typer.Exit(1)


def format_analysis_text(
    result: AnalysisResult, graph: str | None = None, suggest: bool = False
) -> str:
    lines = [
        "# Dependency Analysis",
        "",
        f"- Files: {result.total_files}",
        f"- Dependencies: {len(result.dependencies)}",
        f"- Cycles: {len(result.cycles)}",
        f"- Orphans: {len(result.orphans)}",
    ]
    if result.file_metrics is not None:
        lines += [
            f"- Total tokens: {result.total_tokens}",
            f"- Average tokens per file: {result.average_tokens_per_file}",
        ]
    if result.cycles:
        lines += ["", "## Cycles", ""]
        lines += [f"- {' -> '.join(cycle)}" for cycle in result.cycles]
    if result.orphans:
        lines += ["", "## Orphans", ""]
        lines += [f"- {orphan}" for orphan in result.orphans]
    if result.most_referenced:
        lines += ["", "## Most Referenced", ""]
        lines += [f"- {file} ({count})" for file, count in result.most_referenced]
    if result.file_metrics:
        lines += ["", "## Metrics", "", "| File | Lines | Tokens | Sections |", "|---|---|---|---|"]
        for m in result.file_metrics:
            lines.append(f"| {m.file} | {m.lines} | {m.tokens} | {m.top_level_sections} |")
    if suggest and result.split_suggestions:
        lines += ["", "## Split Suggestions"]
        for s in result.split_suggestions:
            lines += ["", f"### {s.file}", "", s.reason, ""]
            for section in s.sections:
                lines.append(
                    f"- {section.title} (L{section.start_line}-L{section.end_line}, "
                    f"~{section.estimated_tokens} tokens)"
                )
    if graph:
        lines += ["", "## Graph", "", graph]
    return "\n".join(lines) + "\n"


@app.command()
def analyze(
    config: Path = typer.Option(None, "--config", "-c", help="Path to shirokuma-docs.toml"),
    graph: bool = typer.Option(False, "--graph", "-g", help="Include a Mermaid dependency graph"),
    metrics: bool = typer.Option(False, "--metrics", "-m", help="Include size and token metrics"),
    suggest: bool = typer.Option(False, "--suggest", "-s", help="Suggest file splits"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the report to a file"),
    fmt: str = typer.Option("text", "--format", help="text|json"),
):
    """Analyze document dependencies, cycles and orphans."""
    if fmt not in ("text", "json"):
        typer.echo(f"❌ Unknown format: {fmt}", err=True)
        raise typer.Exit(1)

    repo_root, md_config = _load(config)
    analyzer = Analyzer(md_config)
    result = analyzer.analyze(md_config.source_dir(repo_root), include_metrics=metrics or suggest)
    mermaid = analyzer.generate_graph(result) if graph else None

    if fmt == "json":
        data = result.to_dict()
        if not suggest:
            data.pop("split_suggestions", None)
        if mermaid:
            data["graph"] = mermaid
        content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    else:
        content = format_analysis_text(result, mermaid, suggest)
    _write_or_echo(content, output)


@app.command()
def lint(
    config: Path = typer.Option(None, "--config", "-c", help="Path to shirokuma-docs.toml"),
    fix: bool = typer.Option(False, "--fix", help="Fix whitespace issues in place"),
    suggest_fixes: bool = typer.Option(
        False, "--suggest-fixes", help="Also report token optimization opportunities"
    ),
    fmt: str = typer.Option("markdown", "--format", help="markdown|json"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the report to a file"),
):
    """Lint Markdown style and structure."""
    if fmt not in ("markdown", "json"):
        typer.echo(f"❌ Unknown format: {fmt}", err=True)
        raise typer.Exit(1)

    repo_root, md_config = _load(config)
    source_dir = md_config.source_dir(repo_root)
    result = Linter(md_config).lint(source_dir, fix=fix)
    content = format_lint_report(result, fmt)

    if suggest_fixes:
        files = collect_files(source_dir, md_config.build.include, md_config.build.exclude)
        report = TokenOptimizer().analyze_paths(files, source_dir)
        if fmt == "json":
            content = json.dumps(
                {**json.loads(content), "optimization": report.to_dict()},
                indent=2,
                ensure_ascii=False,
            )
        else:
            content = f"{content}\n{format_optimization_report(report)}"

    _write_or_echo(content, output)
    if result.has_errors:
        raise typer.Exit(1)


@app.command("list")
def list_documents(
    config: Path = typer.Option(None, "--config", "-c", help="Path to shirokuma-docs.toml"),
    fmt: str = typer.Option(None, "--format", "-f", help="simple|tree|detailed|markdown|json"),
    layer: int = typer.Option(None, "--layer", help="Only documents in this layer"),
    doc_type: str = typer.Option(None, "--type", help="Only documents of this type"),
    category: str = typer.Option(None, "--category", help="Only documents in this category"),
    group_by: str = typer.Option(None, "--group-by", help="layer|type|category"),
    sort_by: str = typer.Option(None, "--sort-by", help="path|layer|title"),
    include_stats: bool = typer.Option(None, "--stats/--no-stats", help="Include statistics"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the listing to a file"),
):
    """List documents with their frontmatter metadata."""
    repo_root, md_config = _load(config)
    defaults = md_config.listing
    fmt = fmt or defaults.default_format
    if fmt not in LIST_FORMATS:
        typer.echo(f"❌ Unknown format: {fmt}. Use one of: {', '.join(LIST_FORMATS)}", err=True)
        raise typer.Exit(1)

    docs = Lister(md_config).list(
        md_config.source_dir(repo_root),
        layer=layer,
        type=doc_type,
        category=category,
        sort_by=sort_by or defaults.sort_by,
    )
    content = format_documents(
        docs,
        fmt,
        group_by=group_by or defaults.group_by,
        include_stats=defaults.include_stats if include_stats is None else include_stats,
    )
    _write_or_echo(content, output)
