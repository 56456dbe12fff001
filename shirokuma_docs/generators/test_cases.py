"""
Test-case catalogue: collects Jest/Playwright cases and renders Markdown,
HTML and JSON.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
import json
import logging
from pathlib import Path, PurePosixPath
from typing import Any

from shirokuma_docs.fileio import write_text_atomic
from shirokuma_docs.generators.html import render
from shirokuma_docs.md.collector import collect_files, relative_path
from shirokuma_docs.parsers.test_annotations import (
    TEST_SUFFIX_RE,
    TestCase,
    compute_category_stats,
    extract_file_doc_comment,
    extract_test_cases,
    infer_category_from_test_name,
)

logger = logging.getLogger(__name__)

DEFAULT_JEST_MATCH = [
    "**/__tests__/**/*.test.ts",
    "**/__tests__/**/*.test.tsx",
    "**/*.test.ts",
    "**/*.test.tsx",
    "**/*.spec.ts",
    "**/*.spec.tsx",
]
DEFAULT_JEST_IGNORE = ["**/node_modules/**", "**/dist/**", "**/.next/**", "**/tests/e2e/**"]
DEFAULT_PLAYWRIGHT_DIR = "tests/e2e"
PLAYWRIGHT_MATCH = ["**/*.test.ts", "**/*.test.tsx", "**/*.spec.ts", "**/*.spec.tsx", "**/*.spec.js"]

FRAMEWORK_TITLES = {"jest": "Jest Tests", "playwright": "Playwright Tests"}


@dataclass
class FileStats:
    file: str
    framework: str
    describes: int
    tests: int
    module: dict[str, str]
    file_doc: dict[str, str] | None = None
    category_stats: dict[str, int] = field(default_factory=dict)


@dataclass
class TestSummary:
    __test__ = False

    total_files: int
    total_tests: int
    jest_files: int
    jest_tests: int
    playwright_files: int
    playwright_tests: int
    file_stats: list[FileStats] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def infer_module_from_path(file: str, framework: str) -> dict[str, str]:
    """Guess what a test file covers from where it lives."""
    name = TEST_SUFFIX_RE.sub("", PurePosixPath(file).name)
    if framework == "playwright" or "e2e/" in file:
        kind = "screen"
    elif "/actions/" in file or file.startswith("actions/"):
        kind = "action"
    elif "/components/" in file or file.startswith("components/"):
        kind = "component"
    else:
        kind = "unknown"
    return {"type": kind, "name": name}


def create_summary(file_stats: list[FileStats], cases: list[TestCase]) -> TestSummary:
    jest = [f for f in file_stats if f.framework == "jest"]
    playwright = [f for f in file_stats if f.framework == "playwright"]
    return TestSummary(
        total_files=len(file_stats),
        total_tests=len(cases),
        jest_files=len(jest),
        jest_tests=sum(f.tests for f in jest),
        playwright_files=len(playwright),
        playwright_tests=sum(f.tests for f in playwright),
        file_stats=file_stats,
    )


def collect_test_files(project_root: Path, config: dict[str, Any]) -> dict[str, list[Path]]:
    jest = collect_files(
        project_root,
        config.get("jest_match", DEFAULT_JEST_MATCH),
        config.get("jest_ignore", DEFAULT_JEST_IGNORE),
    )
    playwright_dir = project_root / config.get("playwright_dir", DEFAULT_PLAYWRIGHT_DIR)
    playwright = collect_files(playwright_dir, PLAYWRIGHT_MATCH, ["**/node_modules/**"])
    return {"jest": jest, "playwright": playwright}


def extract_all(
    project_root: Path, files: dict[str, list[Path]]
) -> tuple[list[TestCase], list[FileStats]]:
    cases: list[TestCase] = []
    stats: list[FileStats] = []
    for framework, paths in files.items():
        for path in paths:
            rel = relative_path(path, project_root)
            content = path.read_text(encoding="utf-8")
            file_doc = extract_file_doc_comment(content)
            file_cases = extract_test_cases(content, rel, framework)
            if file_doc and file_doc.get("app"):
                for case in file_cases:
                    case.app = case.app or file_doc["app"]
            cases.extend(file_cases)
            stats.append(
                FileStats(
                    file=rel,
                    framework=framework,
                    describes=len({c.describe for c in file_cases}),
                    tests=len(file_cases),
                    module=infer_module_from_path(rel, framework),
                    file_doc=file_doc,
                    category_stats=compute_category_stats(file_cases),
                )
            )
    return cases, stats


def _group(items, key):
    groups: dict[str, list] = defaultdict(list)
    for item in items:
        groups[key(item)].append(item)
    return groups


def _has_bdd(case: TestCase) -> bool:
    return bool(case.bdd and any(case.bdd.get(k) for k in ("given", "when", "then")))


def generate_markdown(cases: list[TestCase], summary: TestSummary) -> str:
    lines = [
        "# Test Cases",
        "",
        f"Generated: {datetime.now(timezone.utc).isoformat(timespec='seconds')}",
        "",
        "## Summary",
        "",
        "| Item | Count |",
        "|------|-------|",
        f"| Test files | {summary.total_files} |",
        f"| Test cases | {summary.total_tests} |",
        f"| Jest files | {summary.jest_files} |",
        f"| Jest tests | {summary.jest_tests} |",
        f"| Playwright files | {summary.playwright_files} |",
        f"| Playwright tests | {summary.playwright_tests} |",
        "",
    ]

    for framework, title in FRAMEWORK_TITLES.items():
        framework_cases = [c for c in cases if c.framework == framework]
        if not framework_cases:
            continue
        lines += [f"## {title}", ""]
        for file, file_cases in _group(framework_cases, lambda c: c.file).items():
            lines += [f"### {file}", ""]
            for describe, describe_cases in _group(file_cases, lambda c: c.describe).items():
                lines.append(f"#### {describe}")
                doc = next(
                    (d for d in describe_cases[0].describe_docs if d["name"] == describe), None
                )
                if doc and doc.get("testdoc"):
                    lines += ["", f"> {doc['testdoc']}"]
                    if doc.get("purpose"):
                        lines += [">", f"> **Purpose:** {doc['purpose']}"]
                lines.append("")
                for case in describe_cases:
                    lines += _case_lines(case)
                lines.append("")

    lines += [
        "## File Statistics",
        "",
        "| File | Framework | Describes | Tests |",
        "|------|-----------|-----------|-------|",
    ]
    for stat in summary.file_stats:
        lines.append(f"| {stat.file} | {stat.framework} | {stat.describes} | {stat.tests} |")
    lines.append("")
    return "\n".join(lines)


def _case_lines(case: TestCase) -> list[str]:
    name = case.description or case.it
    badge = " [BDD]" if _has_bdd(case) else ""
    out = [f"- [ ] {name} (L{case.line}){badge}"]
    if case.description and case.description != case.it:
        out.append(f"  - EN: {case.it}")
    if case.purpose:
        out.append(f"  - Purpose: {case.purpose}")
    if case.expected:
        out.append(f"  - Expected: {case.expected}")
    if case.skipped:
        out.append(f"  - Skipped{': ' + case.skip_reason if case.skip_reason else ''}")
    if _has_bdd(case):
        for key in ("given", "when", "then"):
            if case.bdd.get(key):
                out.append(f"  - **{key.capitalize()}**: {case.bdd[key]}")
        for extra in case.bdd.get("and", []):
            out.append(f"  - **And**: {extra}")
    return out


def generate_html(cases: list[TestCase], summary: TestSummary, project_name: str) -> str:
    frameworks = []
    for framework, title in FRAMEWORK_TITLES.items():
        by_file = _group([c for c in cases if c.framework == framework], lambda c: c.file)
        if by_file:
            files = [
                (file, list(_group(file_cases, lambda c: c.describe).items()))
                for file, file_cases in by_file.items()
            ]
            frameworks.append((title, files))
    return render(
        "test_cases.html",
        project_name=project_name,
        generated_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
        summary=summary,
        frameworks=frameworks,
        category_stats=compute_category_stats(cases),
        has_bdd=_has_bdd,
    )


def generate_json(cases: list[TestCase], summary: TestSummary) -> str:
    payload = {
        "test_cases": [
            {**c.to_dict(), "category": c.category or infer_category_from_test_name(c.it, c.description)}
            for c in cases
        ],
        "summary": summary.to_dict(),
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)


def write_test_cases(
    cases: list[TestCase],
    summary: TestSummary,
    project_name: str,
    output_dir: Path,
    portal_dir: Path,
) -> list[Path]:
    md_path = output_dir / "test-cases.md"
    html_path = portal_dir / "test-cases.html"
    json_path = portal_dir / "test-cases.json"
    write_text_atomic(md_path, generate_markdown(cases, summary))
    write_text_atomic(html_path, generate_html(cases, summary, project_name))
    write_text_atomic(json_path, generate_json(cases, summary) + "\n")
    return [md_path, html_path, json_path]
