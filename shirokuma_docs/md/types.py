"""
Result types for the markdown subsystem.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal

Severity = Literal["error", "warning", "info"]
DependencyType = Literal["frontmatter", "wiki-link", "markdown-link"]

SEVERITIES: tuple[str, ...] = ("error", "warning", "info")


@dataclass
class Issue:
    """A single validation or lint finding."""

    file: str
    rule: str
    message: str
    severity: Severity = "error"
    line: int | None = None

    def __post_init__(self) -> None:
        if self.severity not in SEVERITIES:
            raise ValueError(
                f"Invalid severity '{self.severity}'. Must be one of: {SEVERITIES}"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ValidationResult:
    errors: list[Issue] = field(default_factory=list)
    warnings: list[Issue] = field(default_factory=list)
    info: list[Issue] = field(default_factory=list)
    files_checked: int = 0

    @property
    def valid(self) -> bool:
        return not self.errors

    def add(self, issue: Issue) -> None:
        bucket = {"error": self.errors, "warning": self.warnings, "info": self.info}
        bucket[issue.severity].append(issue)

    def all_issues(self) -> list[Issue]:
        return [*self.errors, *self.warnings, *self.info]


@dataclass
class Dependency:
    source: str
    target: str
    type: DependencyType

    def to_dict(self) -> dict[str, str]:
        return {"from": self.source, "to": self.target, "type": self.type}


@dataclass
class HeadingNode:
    level: int
    text: str
    start_line: int
    end_line: int
    children: list[HeadingNode] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "text": self.text,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "children": [c.to_dict() for c in self.children],
        }


@dataclass
class FileMetrics:
    file: str
    size: int
    lines: int
    tokens: int
    headings: list[HeadingNode] = field(default_factory=list)
    top_level_sections: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "size": self.size,
            "lines": self.lines,
            "tokens": self.tokens,
            "headings": [h.to_dict() for h in self.headings],
            "top_level_sections": self.top_level_sections,
        }


@dataclass
class SectionSuggestion:
    title: str
    start_line: int
    end_line: int
    estimated_tokens: int


@dataclass
class SplitSuggestion:
    file: str
    reason: str
    lines: int
    tokens: int
    sections: list[SectionSuggestion] = field(default_factory=list)


@dataclass
class AnalysisResult:
    total_files: int = 0
    dependencies: list[Dependency] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)
    orphans: list[str] = field(default_factory=list)
    most_referenced: list[tuple[str, int]] = field(default_factory=list)
    file_metrics: list[FileMetrics] | None = None
    split_suggestions: list[SplitSuggestion] | None = None
    total_tokens: int = 0
    average_tokens_per_file: int = 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "total_files": self.total_files,
            "dependencies": [d.to_dict() for d in self.dependencies],
            "cycles": self.cycles,
            "orphans": self.orphans,
            "most_referenced": [
                {"file": f, "count": c} for f, c in self.most_referenced
            ],
            "total_tokens": self.total_tokens,
            "average_tokens_per_file": self.average_tokens_per_file,
        }
        if self.file_metrics is not None:
            data["file_metrics"] = [m.to_dict() for m in self.file_metrics]
        if self.split_suggestions is not None:
            data["split_suggestions"] = [asdict(s) for s in self.split_suggestions]
        return data


@dataclass
class BuildResult:
    file_count: int
    total_size: int
    build_time: float
    output_path: str
    token_count: int
    files: list[str] = field(default_factory=list)


@dataclass
class LintResult:
    issues: list[Issue] = field(default_factory=list)
    files_checked: int = 0
    fixed_files: list[str] = field(default_factory=list)

    def count(self, severity: Severity) -> int:
        return sum(1 for i in self.issues if i.severity == severity)

    @property
    def has_errors(self) -> bool:
        return self.count("error") > 0
