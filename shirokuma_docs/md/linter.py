"""
Style linting for documentation files, with an optional auto-fix pass.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
import json
import logging
from pathlib import Path, PurePosixPath
import re

from shirokuma_docs.md.collector import collect_files, relative_path
from shirokuma_docs.md.config import MdConfig
from shirokuma_docs.md.frontmatter import parse_frontmatter
from shirokuma_docs.md.markdown import FENCE_RE
from shirokuma_docs.md.types import Issue, LintResult

logger = logging.getLogger(__name__)

TRAILING_SPACE_RE = re.compile(r"[ \t]+$")
SETEXT_RE = re.compile(r"^(=+|-+)\s*$")
LIST_MARKER_RE = re.compile(r"^(\s*)([-*+])\s")
MERMAID_STYLE_RE = re.compile(r"^\s*style\s+\w+\s+fill:")
NAV_SECTION_RE = re.compile(
    r"^##\s*(関連ドキュメント|Related Documents?|次のステップ|Next Steps?|See Also)",
    re.IGNORECASE,
)
STRUCTURAL_BOLD_RES = (
    re.compile(r"^(\s*)[-*+]\s+\*\*[^*]+\*\*:"),
    re.compile(r"\*\*[^*]+\*\*:\s*\*\*[^*]+\*\*"),
    re.compile(r"^\*\*[^*]+\*\*:"),
)
NUMBERED_HEADING_RE = re.compile(r"^#{1,6}\s+\d+(\.\d+)*\.\s")
OVERVIEW_ALIASES = {"index.md", "readme.md", "00-overview.md", "_overview.md", "overview.md"}

MAX_BLANK_LINES = 2


class LineContext:
    """Per-line state shared by the line rules."""

    def __init__(self, lines: list[str], body_start: int):
        self.lines = lines
        self.body_start = body_start
        self.in_code: list[bool] = []
        self.fence_lang: list[str | None] = []
        lang = None
        in_code = False
        for idx, line in enumerate(lines):
            if idx < body_start:
                self.in_code.append(False)
                self.fence_lang.append(None)
                continue
            fence = FENCE_RE.match(line)
            if fence:
                if in_code:
                    in_code, lang = False, None
                else:
                    in_code = True
                    lang = line.strip().lstrip("`~").strip().lower() or None
                self.in_code.append(True)
                self.fence_lang.append(lang)
                continue
            self.in_code.append(in_code)
            self.fence_lang.append(lang if in_code else None)

    def prose(self, idx: int) -> bool:
        return idx >= self.body_start and not self.in_code[idx]


LineRule = Callable[[str, LineContext], list[Issue]]


def _trailing_spaces(rel: str, ctx: LineContext) -> list[Issue]:
    return [
        Issue(rel, "no-trailing-spaces", "Trailing whitespace", "warning", idx + 1)
        for idx, line in enumerate(ctx.lines)
        if TRAILING_SPACE_RE.search(line)
    ]


def _multiple_blanks(rel: str, ctx: LineContext) -> list[Issue]:
    issues = []
    run = 0
    for idx, line in enumerate(ctx.lines):
        run = run + 1 if not line.strip() else 0
        if run == MAX_BLANK_LINES + 1:
            issues.append(
                Issue(rel, "no-multiple-blanks", "Multiple consecutive blank lines", "warning", idx + 1)
            )
    return issues


def _heading_style(rel: str, ctx: LineContext) -> list[Issue]:
    issues = []
    for idx in range(1, len(ctx.lines)):
        line, prev = ctx.lines[idx], ctx.lines[idx - 1]
        if not (ctx.prose(idx) and ctx.prose(idx - 1)):
            continue
        if SETEXT_RE.match(line) and prev.strip() and not LIST_MARKER_RE.match(prev):
            issues.append(
                Issue(rel, "heading-style", "Use ATX-style headings (#) instead of setext", "info", idx + 1)
            )
    return issues


def _list_marker_style(rel: str, ctx: LineContext) -> list[Issue]:
    issues = []
    for idx, line in enumerate(ctx.lines):
        if not ctx.prose(idx):
            continue
        match = LIST_MARKER_RE.match(line)
        if match and match.group(2) != "-":
            issues.append(
                Issue(rel, "list-marker-style", f"Use '-' for list items instead of '{match.group(2)}'", "info", idx + 1)
            )
    return issues


def _mermaid_styling(rel: str, ctx: LineContext) -> list[Issue]:
    return [
        Issue(rel, "no-mermaid-styling", "Avoid inline styles in mermaid diagrams", "warning", idx + 1)
        for idx, line in enumerate(ctx.lines)
        if ctx.fence_lang[idx] == "mermaid" and MERMAID_STYLE_RE.match(line)
    ]


def _navigation_sections(rel: str, ctx: LineContext) -> list[Issue]:
    return [
        Issue(rel, "no-navigation-sections", "Navigation sections add no content; remove them", "warning", idx + 1)
        for idx, line in enumerate(ctx.lines)
        if ctx.prose(idx) and NAV_SECTION_RE.match(line)
    ]


def _structural_bold(rel: str, ctx: LineContext) -> list[Issue]:
    issues = []
    for idx, line in enumerate(ctx.lines):
        if ctx.prose(idx) and any(p.search(line) for p in STRUCTURAL_BOLD_RES):
            issues.append(
                Issue(rel, "no-structural-bold", "Avoid bold text as a structural label", "info", idx + 1)
            )
    return issues


def _numbered_headings(rel: str, ctx: LineContext) -> list[Issue]:
    return [
        Issue(rel, "no-numbered-headings", "Headings should not be manually numbered", "warning", idx + 1)
        for idx, line in enumerate(ctx.lines)
        if ctx.prose(idx) and NUMBERED_HEADING_RE.match(line)
    ]


LINE_RULES: dict[str, LineRule] = {
    "no-trailing-spaces": _trailing_spaces,
    "no-multiple-blanks": _multiple_blanks,
    "heading-style": _heading_style,
    "list-marker-style": _list_marker_style,
    "no-mermaid-styling": _mermaid_styling,
    "no-navigation-sections": _navigation_sections,
    "no-structural-bold": _structural_bold,
    "no-numbered-headings": _numbered_headings,
}


def fix_content(content: str) -> str:
    """Strip trailing whitespace and cap blank-line runs; frontmatter untouched."""
    fm = parse_frontmatter(content)
    head = content[: len(content) - len(fm.content)] if fm.has_frontmatter else ""
    body = "\n".join(TRAILING_SPACE_RE.sub("", line) for line in fm.content.split("\n"))
    body = re.sub(r"\n{%d,}" % (MAX_BLANK_LINES + 2), "\n" * (MAX_BLANK_LINES + 1), body)
    return head + body


class Linter:
    def __init__(self, config: MdConfig | None = None):
        self.config = config or MdConfig()

    def lint(self, source_dir: Path, fix: bool = False) -> LintResult:
        source_dir = Path(source_dir)
        options = self.config.lint
        files = collect_files(source_dir, self.config.build.include, self.config.build.exclude)
        result = LintResult()

        for path in files:
            rel = relative_path(path, source_dir)
            content = path.read_text(encoding="utf-8")
            if fix:
                fixed = fix_content(content)
                if fixed != content:
                    path.write_text(fixed, encoding="utf-8")
                    result.fixed_files.append(rel)
                    content = fixed
            result.issues.extend(self.lint_content(rel, content))
            result.files_checked += 1

        if options.consistent_structure.enabled:
            result.issues.extend(self._check_structure([relative_path(p, source_dir) for p in files]))

        if fix and result.fixed_files:
            logger.info(f"Fixed {len(result.fixed_files)} files")
        return result

    def lint_content(self, rel: str, content: str) -> list[Issue]:
        options = self.config.lint
        issues: list[Issue] = []

        naming = options.file_naming
        if naming and options.rule_enabled("file-naming"):
            name = PurePosixPath(rel).name
            if not re.search(naming.pattern, name):
                issues.append(Issue(rel, "file-naming", naming.message, "warning"))

        fm = parse_frontmatter(content)
        lines = content.split("\n")
        body_start = content[: len(content) - len(fm.content)].count("\n") if fm.has_frontmatter else 0
        ctx = LineContext(lines, body_start)

        for rule_id, rule in LINE_RULES.items():
            if options.rule_enabled(rule_id):
                issues.extend(rule(rel, ctx))
        return issues

    def _check_structure(self, files: list[str]) -> list[Issue]:
        structure = self.config.lint.consistent_structure
        by_dir: dict[str, list[str]] = defaultdict(list)
        for rel in files:
            parent = str(PurePosixPath(rel).parent)
            if parent != ".":
                by_dir[parent].append(rel)

        issues = []
        for directory, members in sorted(by_dir.items()):
            names = {PurePosixPath(m).name.lower() for m in members}
            if (
                self.config.lint.rule_enabled("consistent-structure-threshold")
                and len(members) > structure.directory_threshold
                and structure.overview_naming.lower() not in names
            ):
                issues.append(
                    Issue(
                        directory,
                        "consistent-structure-threshold",
                        f"Directory has {len(members)} files but no {structure.overview_naming}",
                        "info",
                    )
                )
            if self.config.lint.rule_enabled("consistent-structure-naming"):
                for member in members:
                    name = PurePosixPath(member).name.lower()
                    if name in OVERVIEW_ALIASES and name != structure.overview_naming.lower():
                        issues.append(
                            Issue(
                                member,
                                "consistent-structure-naming",
                                f"Overview files should be named {structure.overview_naming}",
                                "info",
                            )
                        )
        return issues


def format_lint_report(result: LintResult, fmt: str = "markdown") -> str:
    if fmt == "json":
        return json.dumps(
            {
                "files_checked": result.files_checked,
                "fixed_files": result.fixed_files,
                "summary": {s: result.count(s) for s in ("error", "warning", "info")},
                "issues": [i.to_dict() for i in result.issues],
            },
            indent=2,
            ensure_ascii=False,
        )

    out = [
        "# Lint Report",
        "",
        f"- Files checked: {result.files_checked}",
        f"- Errors: {result.count('error')}",
        f"- Warnings: {result.count('warning')}",
        f"- Info: {result.count('info')}",
    ]
    if result.fixed_files:
        out.append(f"- Fixed files: {len(result.fixed_files)}")

    by_file: dict[str, list[Issue]] = defaultdict(list)
    for issue in result.issues:
        by_file[issue.file].append(issue)
    for file, issues in by_file.items():
        out += ["", f"## {file}", ""]
        for issue in issues:
            loc = f"L{issue.line}" if issue.line else "-"
            out.append(f"- [{issue.severity}] {loc} {issue.rule}: {issue.message}")
    return "\n".join(out) + "\n"
