"""Input checks for titles, bodies and issue references."""

from __future__ import annotations

from pathlib import Path
import re
import sys

MAX_TITLE_LENGTH = 256
MAX_BODY_LENGTH = 65536

ISSUE_NUMBER_RE = re.compile(r"^#?(\d+)$")


class InputValidationError(Exception):
    """User input rejected before any request is sent."""


def validate_title(title: str | None) -> str | None:
    if title is None or not title.strip():
        return "Title cannot be empty"
    if len(title) > MAX_TITLE_LENGTH:
        return f"Title too long ({len(title)} > {MAX_TITLE_LENGTH} chars)"
    return None


def validate_body(body: str | None) -> str | None:
    if body is not None and len(body) > MAX_BODY_LENGTH:
        return f"Body too long ({len(body)} > {MAX_BODY_LENGTH} chars)"
    return None


def check_title_and_body(title: str | None, body: str | None, require_title: bool = True) -> None:
    """Raise InputValidationError on the first failed check."""
    if require_title or title is not None:
        error = validate_title(title)
        if error:
            raise InputValidationError(error)
    error = validate_body(body)
    if error:
        raise InputValidationError(error)


def is_issue_number(value: str) -> bool:
    return bool(ISSUE_NUMBER_RE.match(value.strip()))


def parse_issue_number(value: str) -> int:
    match = ISSUE_NUMBER_RE.match(value.strip())
    if not match:
        raise InputValidationError(f"Invalid issue number: {value}")
    return int(match.group(1))


def read_body(value: str | None) -> str | None:
    """``-`` reads stdin, ``@path`` reads a file, anything else is literal."""
    if value is None:
        return None
    if value == "-":
        return sys.stdin.read()
    if value.startswith("@"):
        path = Path(value[1:])
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise InputValidationError(f"Cannot read body file {path}: {e}") from e
    return value
