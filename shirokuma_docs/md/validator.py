"""
Document validation: frontmatter, dependencies, forbidden patterns, links
and template compliance.
"""

from __future__ import annotations

import logging
from pathlib import Path
import re

from shirokuma_docs.md.collector import collect_files, relative_path
from shirokuma_docs.md.config import MdConfig
from shirokuma_docs.md.frontmatter import (
    Frontmatter,
    parse_frontmatter,
    validate_frontmatter_field,
)
from shirokuma_docs.md.markdown import (
    LINK_RE,
    classify_link,
    extract_links,
    iter_lines_outside_code,
)
from shirokuma_docs.md.template import (
    VARIABLE_RE,
    extract_section_meta,
    missing_sections,
    parse_template,
)
from shirokuma_docs.md.types import Issue, ValidationResult

logger = logging.getLogger(__name__)

DEEP_HEADING_RE = re.compile(r"^#{7,}\s")
CONTEXT_BEFORE = 20
CONTEXT_AFTER = 30


def is_internal_link(url: str) -> bool:
    if url.startswith(("http://", "https://")):
        return False
    return ".md" in url or url.startswith(("../", "./", "/"))


def link_context(line: str, start: int, end: int) -> str:
    """Snippet around a match: 20 chars before, 30 after, with ellipses."""
    lo = max(0, start - CONTEXT_BEFORE)
    hi = min(len(line), end + CONTEXT_AFTER)
    snippet = line[lo:hi]
    if lo > 0:
        snippet = "..." + snippet
    if hi < len(line):
        snippet += "..."
    return snippet


class Validator:
    """Runs every configured validation rule over a documentation tree."""

    def __init__(self, config: MdConfig | None = None, project_root: Path | None = None):
        self.config = config or MdConfig()
        self.project_root = project_root

    def validate(self, source_dir: Path) -> ValidationResult:
        source_dir = Path(source_dir).resolve()
        root = Path(self.project_root).resolve() if self.project_root else source_dir.parent
        result = ValidationResult()

        files = collect_files(source_dir, self.config.build.include, self.config.build.exclude)
        for path in files:
            rel = relative_path(path, source_dir)
            content = path.read_text(encoding="utf-8")
            for issue in self.validate_file(path, rel, content, root):
                result.add(issue)
            result.files_checked += 1

        logger.info(
            f"Validated {result.files_checked} files: {len(result.errors)} errors, "
            f"{len(result.warnings)} warnings"
        )
        return result

    def validate_file(self, path: Path, rel: str, content: str, root: Path) -> list[Issue]:
        rules = self.config.validation
        fm = parse_frontmatter(content)
        issues: list[Issue] = []

        if fm.parse_error:
            issues.append(
                Issue(rel, "frontmatter-parse", f"Invalid frontmatter: {fm.parse_error}")
            )

        for name in rules.required_frontmatter:
            if name not in fm.data:
                issues.append(
                    Issue(
                        rel,
                        "required-frontmatter",
                        f"Missing required frontmatter field: {name}",
                    )
                )

        for spec in rules.frontmatter_fields:
            error = validate_frontmatter_field(fm.data, spec)
            if error:
                issues.append(Issue(rel, "frontmatter-field", error))

        issues.extend(self._check_dependencies(rel, fm, root))
        issues.extend(self._check_forbidden_patterns(rel, content))

        if rules.no_internal_links:
            issues.extend(self._check_internal_links(rel, content))
        if rules.check_links:
            issues.extend(self._check_broken_links(path, rel, fm.content, root))

        for line_no, line in iter_lines_outside_code(content):
            if DEEP_HEADING_RE.match(line):
                issues.append(
                    Issue(
                        rel,
                        "max-heading-depth",
                        "Heading depth exceeds 6 levels",
                        severity="warning",
                        line=line_no,
                    )
                )

        for meta in extract_section_meta(content):
            if meta.error:
                issues.append(
                    Issue(rel, "section-meta", meta.error, severity="warning", line=meta.line)
                )

        if rules.template_compliance.enabled:
            issues.extend(self._check_template(rel, fm))
        return issues

    def _check_dependencies(self, rel: str, fm: Frontmatter, root: Path) -> list[Issue]:
        depends_on = fm.data.get("depends_on") or []
        if isinstance(depends_on, str):
            depends_on = [depends_on]
        issues = []
        for dep in depends_on:
            if not (root / str(dep)).exists():
                issues.append(
                    Issue(rel, "dependency-exists", f"Dependency not found: {dep}")
                )
        return issues

    def _check_forbidden_patterns(self, rel: str, content: str) -> list[Issue]:
        issues = []
        lines = content.split("\n")
        for forbidden in self.config.validation.forbidden_patterns:
            try:
                pattern = re.compile(forbidden.pattern)
            except re.error:
                issues.append(
                    Issue(
                        rel,
                        "forbidden-pattern",
                        f"Invalid regex pattern: {forbidden.pattern}",
                    )
                )
                continue
            for line_no, line in enumerate(lines, start=1):
                if pattern.search(line):
                    issues.append(
                        Issue(rel, "forbidden-pattern", forbidden.message, line=line_no)
                    )
        return issues

    def _check_internal_links(self, rel: str, content: str) -> list[Issue]:
        issues = []
        for line_no, line in iter_lines_outside_code(content):
            for match in LINK_RE.finditer(line):
                if match.group(0).startswith("!"):
                    continue
                url = match.group(2)
                if not is_internal_link(url):
                    continue
                context = link_context(line, match.start(), match.end())
                issues.append(
                    Issue(
                        rel,
                        "no-internal-links",
                        f"Internal link found: {url} (context: {context})",
                        line=line_no,
                    )
                )
        return issues

    def _check_broken_links(self, path: Path, rel: str, body: str, root: Path) -> list[Issue]:
        issues = []
        for link in extract_links(body):
            kind = classify_link(link.url)
            if kind in ("external", "anchor"):
                continue
            target_str = link.url.split("#", 1)[0]
            if kind == "absolute":
                target = root / target_str.lstrip("/")
            else:
                target = path.parent / target_str
            if not target.exists():
                issues.append(
                    Issue(
                        rel,
                        "broken-link",
                        f'Broken link: "{link.url}" (target not found: {target})',
                        line=link.line,
                    )
                )
        return issues

    def _check_template(self, rel: str, fm: Frontmatter) -> list[Issue]:
        compliance = self.config.validation.template_compliance
        name = fm.data.get("template") or fm.data.get("type")
        if not name:
            return []

        root = self.project_root or Path.cwd()
        template_path = self.config.templates_dir(Path(root)) / f"{name}.md"
        if not template_path.exists():
            return [
                Issue(
                    rel,
                    "template-exists",
                    f"Template not found: {template_path.name}",
                    severity=compliance.severity,
                )
            ]

        template = parse_template(template_path.read_text(encoding="utf-8"))
        issues = []
        if compliance.check_required_sections:
            for section in missing_sections(template, fm.content):
                issues.append(
                    Issue(
                        rel,
                        "template-required-sections",
                        f"Missing required section from template '{name}': {section}",
                        severity=compliance.severity,
                    )
                )
        if compliance.check_variable_substitution:
            for line_no, line in iter_lines_outside_code(fm.content):
                for match in VARIABLE_RE.finditer(line):
                    issues.append(
                        Issue(
                            rel,
                            "template-variable-substitution",
                            f"Unsubstituted template variable: {match.group(0)}",
                            severity="warning",
                            line=line_no,
                        )
                    )
        return issues
