"""
Coverage dashboard built from an Istanbul ``coverage-summary.json``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
import json
import logging
import math
from pathlib import Path
from typing import Any

from shirokuma_docs.generators.html import render

logger = logging.getLogger(__name__)

METRICS = ("lines", "statements", "functions", "branches")
DEFAULT_SOURCE = "coverage/coverage-summary.json"
SUMMARY_FILE_LIMIT = 10

STATUS_ICONS = {"high": "[OK]", "medium": "[--]", "low": "[!!]"}


class CoverageError(Exception):
    """Raised when a coverage summary cannot be read."""


@dataclass
class Metric:
    total: int = 0
    covered: int = 0
    pct: float = 0


@dataclass
class FileCoverage:
    path: str
    lines: Metric = field(default_factory=Metric)
    statements: Metric = field(default_factory=Metric)
    functions: Metric = field(default_factory=Metric)
    branches: Metric = field(default_factory=Metric)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _metric(value: dict[str, Any] | None) -> Metric:
    value = value or {}
    return Metric(
        total=value.get("total", 0),
        covered=value.get("covered", 0),
        pct=value.get("pct", 0),
    )


def _percent(covered: int, total: int) -> int:
    # half-up rounding, same as Istanbul's own summary
    return math.floor(covered / total * 100 + 0.5) if total > 0 else 0


def parse_istanbul_coverage(data: dict[str, Any]) -> list[FileCoverage]:
    files = []
    for key, value in data.items():
        if key == "total" or not value:
            continue
        files.append(FileCoverage(path=key, **{m: _metric(value.get(m)) for m in METRICS}))
    return files


def load_coverage_summary(path: Path) -> list[FileCoverage]:
    if not path.exists():
        raise CoverageError(f"Coverage summary not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CoverageError(f"Invalid coverage summary {path}: {e}") from e
    if not isinstance(data, dict):
        raise CoverageError(f"Invalid coverage summary {path}: expected an object")
    return parse_istanbul_coverage(data)


def calculate_total_coverage(files: list[FileCoverage]) -> FileCoverage:
    total = FileCoverage(path="total")
    for file in files:
        for name in METRICS:
            metric = getattr(total, name)
            metric.total += getattr(file, name).total
            metric.covered += getattr(file, name).covered
    for name in METRICS:
        metric = getattr(total, name)
        metric.pct = _percent(metric.covered, metric.total)
    return total


def check_thresholds(
    total: FileCoverage, thresholds: dict[str, float | None]
) -> tuple[bool, list[str]]:
    failures = []
    for name in METRICS:
        limit = thresholds.get(name)
        if limit is None:
            continue
        pct = getattr(total, name).pct
        if pct < limit:
            failures.append(f"{name}: {_fmt(pct)}% < {_fmt(limit)}%")
    return not failures, failures


def _fmt(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def get_coverage_status(pct: float) -> str:
    if pct >= 90:
        return "high"
    if pct >= 70:
        return "medium"
    return "low"


def _lowest_first(files: list[FileCoverage]) -> list[FileCoverage]:
    return sorted(files, key=lambda f: f.lines.pct)


def format_summary(files: list[FileCoverage], total: FileCoverage) -> str:
    rule = "=" * 40
    thin = "-" * 40
    lines = ["", rule, "        Coverage Summary", rule, ""]
    for name in METRICS:
        metric = getattr(total, name)
        label = f"{name.capitalize()}:"
        lines.append(f"{label:<12}{metric.covered}/{metric.total} ({_fmt(metric.pct)}%)")
    lines += ["", thin, f"Total Files: {len(files)}", thin, ""]

    for file in _lowest_first(files)[:SUMMARY_FILE_LIMIT]:
        icon = STATUS_ICONS[get_coverage_status(file.lines.pct)]
        lines.append(f"{icon} {file.path}")
        lines.append(
            f"    Lines: {_fmt(file.lines.pct)}%  Branches: {_fmt(file.branches.pct)}%"
            f"  Functions: {_fmt(file.functions.pct)}%"
        )
    if len(files) > SUMMARY_FILE_LIMIT:
        lines.append(f"... and {len(files) - SUMMARY_FILE_LIMIT} more files")
    lines.append("")
    return "\n".join(lines)


def format_json(files: list[FileCoverage], total: FileCoverage) -> str:
    payload = {
        "total": {m: asdict(getattr(total, m)) for m in METRICS},
        "files": [f.to_dict() for f in files],
    }
    return json.dumps(payload, indent=2)


def format_html(files: list[FileCoverage], total: FileCoverage, project_name: str = "Project") -> str:
    return render(
        "coverage.html",
        project_name=project_name,
        generated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        total=total,
        metrics=METRICS,
        files=_lowest_first(files),
        status=get_coverage_status,
    )


def format_coverage_report(
    files: list[FileCoverage], fmt: str = "summary", project_name: str = "Project"
) -> str:
    total = calculate_total_coverage(files)
    if fmt == "json":
        return format_json(files, total)
    if fmt == "html":
        return format_html(files, total, project_name)
    return format_summary(files, total)
