"""
Token optimizer: finds phrasing and markup that waste LLM context.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import asdict, dataclass, field
import json
from pathlib import Path
import re
from typing import Any

from shirokuma_docs.md.markdown import iter_lines_outside_code

STRUCTURAL_BOLD_RE = re.compile(r"^\s*\*\*([^*]+)\*\*:\s*(.+)$")
INTERNAL_LINK_RE = re.compile(
    r"\[([^\]]+)\]\(((?:\.\./)+[^)]+\.md|\./[^)]+\.md)\)"
)

VERBOSE_PHRASES: tuple[tuple[str, str, int], ...] = (
    ("詳細なログを出力", "詳細ログ出力", 2),
    ("Combine multiple Markdown files into", "Combine files into", 3),
    ("Automatically extract", "Auto-extract", 2),
)
REDUNDANT_MODIFIERS: tuple[str, ...] = ("非常に", "とても", "Automatically", "multiple")

RECOMMENDATIONS = {
    "structural-bold": "Replace '**Label**: value' lines with plain lists or tables.",
    "verbose-phrase": "Shorten verbose phrases to their compact equivalents.",
    "internal-link": "Inline or drop relative .md links; they do not survive a combined build.",
    "redundant-modifier": "Remove intensifiers that add tokens but no meaning.",
}


@dataclass
class OptimizationIssue:
    file: str
    line: int
    rule: str
    severity: str
    message: str
    suggestion: str
    token_savings: int


@dataclass
class OptimizationReport:
    issues: list[OptimizationIssue] = field(default_factory=list)

    @property
    def total_issues(self) -> int:
        return len(self.issues)

    @property
    def total_token_savings(self) -> int:
        return sum(i.token_savings for i in self.issues)

    @property
    def issues_by_severity(self) -> dict[str, int]:
        return dict(Counter(i.severity for i in self.issues))

    @property
    def issues_by_rule(self) -> dict[str, int]:
        return dict(Counter(i.rule for i in self.issues))

    @property
    def recommendations(self) -> list[str]:
        return [RECOMMENDATIONS[r] for r in RECOMMENDATIONS if r in self.issues_by_rule]

    def to_dict(self) -> dict[str, Any]:
        return {
            "issues": [asdict(i) for i in self.issues],
            "total_issues": self.total_issues,
            "total_token_savings": self.total_token_savings,
            "issues_by_severity": self.issues_by_severity,
            "issues_by_rule": self.issues_by_rule,
            "recommendations": self.recommendations,
        }


class TokenOptimizer:
    def analyze(self, files: list[tuple[str, str]]) -> OptimizationReport:
        """Analyze (relative_path, content) pairs."""
        report = OptimizationReport()
        for rel, content in files:
            report.issues.extend(self.analyze_content(rel, content))
        return report

    def analyze_paths(self, paths: list[Path], base: Path) -> OptimizationReport:
        pairs = []
        for path in paths:
            rel = path.relative_to(base).as_posix() if path.is_relative_to(base) else path.name
            pairs.append((rel, path.read_text(encoding="utf-8")))
        return self.analyze(pairs)

    def analyze_content(self, rel: str, content: str) -> list[OptimizationIssue]:
        issues = []
        for line_no, line in iter_lines_outside_code(content):
            bold = STRUCTURAL_BOLD_RE.match(line)
            if bold:
                issues.append(
                    OptimizationIssue(
                        rel, line_no, "structural-bold", "warning",
                        "Bold label used as structure",
                        f"- {bold.group(1)}: {bold.group(2)}",
                        4,
                    )
                )

            for phrase, replacement, savings in VERBOSE_PHRASES:
                if phrase in line:
                    issues.append(
                        OptimizationIssue(
                            rel, line_no, "verbose-phrase", "info",
                            f"Verbose phrase: '{phrase}'",
                            replacement,
                            savings,
                        )
                    )

            for match in INTERNAL_LINK_RE.finditer(line):
                issues.append(
                    OptimizationIssue(
                        rel, line_no, "internal-link", "warning",
                        f"Internal link: {match.group(2)}",
                        match.group(1),
                        len(match.group(0)) // 2,
                    )
                )

            for modifier in REDUNDANT_MODIFIERS:
                count = line.count(modifier)
                for _ in range(count):
                    issues.append(
                        OptimizationIssue(
                            rel, line_no, "redundant-modifier", "info",
                            f"Redundant modifier: '{modifier}'",
                            f"Remove '{modifier}'",
                            1,
                        )
                    )
        return issues


def format_optimization_report(report: OptimizationReport, fmt: str = "markdown") -> str:
    if fmt == "json":
        return json.dumps(report.to_dict(), indent=2, ensure_ascii=False)

    out = [
        "# Token Optimization Report",
        "",
        "## Summary",
        "",
        f"- Total issues: {report.total_issues}",
        f"- Estimated token savings: {report.total_token_savings}",
        "",
        "### By Severity",
        "",
    ]
    for severity, count in report.issues_by_severity.items():
        out.append(f"- {severity}: {count}")
    out += ["", "### By Rule", ""]
    for rule, count in report.issues_by_rule.items():
        out.append(f"- {rule}: {count}")

    if report.recommendations:
        out += ["", "## Recommendations", ""]
        out += [f"- {r}" for r in report.recommendations]

    by_file: dict[str, list[OptimizationIssue]] = defaultdict(list)
    for issue in report.issues:
        by_file[issue.file].append(issue)
    if by_file:
        out += ["", "## Issues by File"]
    for file, issues in by_file.items():
        out += ["", f"### {file}", ""]
        for issue in issues:
            out.append(
                f"- L{issue.line} [{issue.severity}] {issue.rule}: {issue.message} "
                f"-> {issue.suggestion} (saves ~{issue.token_savings})"
            )
    return "\n".join(out) + "\n"
