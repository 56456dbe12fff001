"""
YAML frontmatter parsing and field validation.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
import datetime as dt
import re
from typing import Any

import yaml

from shirokuma_docs.md.config import FrontmatterField

FRONTMATTER_RE = re.compile(r"^---\r?\n---\r?\n?|^---\r?\n([\s\S]*?)\r?\n---\r?\n?")
DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass
class Frontmatter:
    has_frontmatter: bool
    content: str
    data: dict[str, Any] = field(default_factory=dict)
    raw: str = ""
    parse_error: str | None = None


def parse_frontmatter(content: str) -> Frontmatter:
    """Split a document into its frontmatter mapping and body.

    YAML errors are reported through ``parse_error`` rather than raised so
    validators can turn them into issues.
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return Frontmatter(has_frontmatter=False, content=content)

    yaml_text = match.group(1) or ""
    body = content[match.end():]
    raw = match.group(0)

    if not yaml_text.strip():
        return Frontmatter(has_frontmatter=True, content=body, raw=raw)

    try:
        data = yaml.safe_load(yaml_text) or {}
    except yaml.YAMLError as e:
        return Frontmatter(
            has_frontmatter=True, content=body, raw=raw, parse_error=str(e)
        )

    if not isinstance(data, dict):
        return Frontmatter(
            has_frontmatter=True,
            content=body,
            raw=raw,
            parse_error="Frontmatter must be a mapping",
        )
    return Frontmatter(has_frontmatter=True, content=body, data=data, raw=raw)


def validate_date_format(value: Any, fmt: str | None) -> bool:
    if not fmt:
        return True
    if fmt != "YYYY-MM-DD":
        # Other formats are not checked
        return True

    # yaml.safe_load already turns bare dates into date objects
    if isinstance(value, dt.date):
        return True

    match = DATE_RE.match(str(value))
    if not match:
        return False
    year, month, day = (int(g) for g in match.groups())
    if not 1 <= month <= 12:
        return False
    return 1 <= day <= calendar.monthrange(year, month)[1]


def validate_frontmatter_field(
    data: dict[str, Any], spec: FrontmatterField
) -> str | None:
    """Return an error message for the field, or None when it is valid."""
    if spec.name not in data:
        return f"Missing required field: {spec.name}"

    value = data[spec.name]
    if spec.values and str(value) not in spec.values:
        allowed = ", ".join(spec.values)
        return (
            f'Invalid value "{value}" for field "{spec.name}". '
            f"Allowed values: {allowed}"
        )

    if spec.format and not validate_date_format(value, spec.format):
        return (
            f'Invalid date format for field "{spec.name}". '
            f"Expected format: {spec.format}"
        )
    return None
