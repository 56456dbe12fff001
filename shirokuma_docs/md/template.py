"""
Document templates and `<!-- section-meta -->` blocks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any

import yaml

from shirokuma_docs.md.markdown import extract_headings

VARIABLE_RE = re.compile(r"\{\{\s*([\w.-]+)\s*\}\}")
SECTION_META_RE = re.compile(r"<!--\s*section-meta([\s\S]*?)-->")


@dataclass
class Template:
    headings: list[str] = field(default_factory=list)
    variables: list[str] = field(default_factory=list)
    required_sections: list[str] = field(default_factory=list)


@dataclass
class SectionMeta:
    line: int
    data: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


def find_variables(content: str) -> list[str]:
    """Unique {{variable}} names in first-seen order."""
    seen: dict[str, None] = {}
    for match in VARIABLE_RE.finditer(content):
        seen.setdefault(match.group(1), None)
    return list(seen)


def parse_template(content: str) -> Template:
    headings = [h.text for h in extract_headings(content)]
    return Template(
        headings=headings,
        variables=find_variables(content),
        required_sections=[h for h in headings if not VARIABLE_RE.search(h)],
    )


def missing_sections(template: Template, document: str) -> list[str]:
    """Required template sections absent from the document (case-insensitive)."""
    present = {h.text.strip().lower() for h in extract_headings(document)}
    return [s for s in template.required_sections if s.strip().lower() not in present]


def extract_section_meta(content: str) -> list[SectionMeta]:
    blocks = []
    for match in SECTION_META_RE.finditer(content):
        line = content.count("\n", 0, match.start()) + 1
        body = match.group(1)
        try:
            data = yaml.safe_load(body) if body.strip() else {}
        except yaml.YAMLError as e:
            blocks.append(SectionMeta(line=line, error=f"Invalid YAML: {e}"))
            continue
        if data is None:
            data = {}
        if not isinstance(data, dict):
            blocks.append(
                SectionMeta(line=line, error="section-meta must contain a YAML mapping")
            )
            continue
        blocks.append(SectionMeta(line=line, data=data))
    return blocks
