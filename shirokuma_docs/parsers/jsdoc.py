"""
JSDoc comment parsing for TypeScript sources.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Any

AUTH_LEVELS = ("none", "authenticated", "member", "admin")
SINGLE_VALUE_TAGS = (
    "inputSchema",
    "outputSchema",
    "rateLimit",
    "returns",
    "feature",
    "dbTable",
    "module",
)

TAG_NAME_RE = re.compile(r"@(\w+)")
PARAM_RE = re.compile(r"@param\s+(?:\{([^}]+)\}\s+)?(\w+)\s*-?\s*(.*)")
THROWS_RE = re.compile(r"@throws\s+(?:\{[^}]+\}\s+)?(.*)")
ERROR_CODES_RE = re.compile(r"@errorCodes\s*([\s\S]*?)(?=@\w+|\*/)")
ERROR_CODE_LINE_RE = re.compile(r"^\s*\*?\s*-\s*([A-Z_]+):\s*(.+?)\s*\((\d{3})\)\s*$")
LINE_PREFIX_RE = re.compile(r"^\s*\*\s?")
# A doc block that directly precedes an exported function; the tempered
# dot keeps one match from spanning several comments.
EXPORTED_FUNCTION_RE = re.compile(
    r"(/\*\*(?:(?!\*/)[\s\S])*\*/)\s*export\s+(?:async\s+)?function\s+(\w+)\s*\("
)


@dataclass
class JSDocInfo:
    name: str
    raw: str
    description: str
    tags: list[str] = field(default_factory=list)
    input_schema: str | None = None
    output_schema: str | None = None
    auth_level: str | None = None
    rate_limit: str | None = None
    returns: str | None = None
    feature: str | None = None
    db_table: str | None = None
    module: str | None = None
    error_codes: list[dict[str, Any]] = field(default_factory=list)
    params: list[dict[str, Any]] = field(default_factory=list)
    throws: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = {
            "name": self.name,
            "description": self.description,
            "tags": self.tags,
            "input_schema": self.input_schema,
            "output_schema": self.output_schema,
            "auth_level": self.auth_level,
            "rate_limit": self.rate_limit,
            "returns": self.returns,
            "feature": self.feature,
            "db_table": self.db_table,
            "module": self.module,
            "error_codes": self.error_codes,
            "params": self.params,
            "throws": self.throws,
        }
        return {k: v for k, v in data.items() if v not in (None, [])}


def _strip_comment(block: str) -> list[str]:
    body = re.sub(r"^/\*\*\s*", "", block.strip())
    body = re.sub(r"\s*\*/$", "", body)
    return [LINE_PREFIX_RE.sub("", line).rstrip() for line in body.split("\n")]


def _continuation(lines: list[str], start: int) -> str:
    """Join the untagged lines that follow ``lines[start]``."""
    parts = []
    for line in lines[start + 1:]:
        text = LINE_PREFIX_RE.sub("", line).strip()
        if not text or text.startswith("@") or text == "/":
            break
        parts.append(text)
    return " ".join(parts)


def extract_tag_value(block: str, tag: str) -> str | None:
    match = re.search(rf"@{tag}[ \t]+(.+?)(?=\n|\*/|$)", block)
    if not match:
        return None
    return match.group(1).strip() or None


def extract_error_codes(block: str) -> list[dict[str, Any]]:
    match = ERROR_CODES_RE.search(block)
    if not match:
        return []
    codes = []
    for line in match.group(1).split("\n"):
        entry = ERROR_CODE_LINE_RE.match(line)
        if entry:
            codes.append(
                {
                    "code": entry.group(1),
                    "description": entry.group(2).strip(),
                    "status": int(entry.group(3)),
                }
            )
    return codes


def extract_params(block: str) -> list[dict[str, Any]]:
    lines = block.split("\n")
    params = []
    for i, line in enumerate(lines):
        match = PARAM_RE.search(line)
        if not match:
            continue
        description = " ".join(p for p in (match.group(3).strip(), _continuation(lines, i)) if p)
        param: dict[str, Any] = {"name": match.group(2), "description": description}
        if match.group(1):
            param["type"] = match.group(1).strip()
        params.append(param)
    return params


def extract_throws(block: str) -> list[str]:
    lines = block.split("\n")
    throws = []
    for i, line in enumerate(lines):
        match = THROWS_RE.search(line)
        if match:
            throws.append(" ".join(p for p in (match.group(1).strip(), _continuation(lines, i)) if p))
    return throws


def parse_jsdoc(block: str, name: str = "") -> JSDocInfo:
    lines = _strip_comment(block)
    description_lines = []
    for line in lines:
        if line.lstrip().startswith("@"):
            break
        description_lines.append(line)

    auth = extract_tag_value(block, "authLevel")
    auth = auth.lower() if auth else None

    values = {tag: extract_tag_value(block, tag) for tag in SINGLE_VALUE_TAGS}
    return JSDocInfo(
        name=name,
        raw=block,
        description="\n".join(description_lines).strip(),
        tags=list(dict.fromkeys(f"@{t}" for t in TAG_NAME_RE.findall(block))),
        input_schema=values["inputSchema"],
        output_schema=values["outputSchema"],
        auth_level=auth if auth in AUTH_LEVELS else None,
        rate_limit=values["rateLimit"],
        returns=values["returns"],
        feature=values["feature"],
        db_table=values["dbTable"],
        module=values["module"],
        error_codes=extract_error_codes(block),
        params=extract_params(block),
        throws=extract_throws(block),
    )


def extract_jsdocs_from_file(content: str) -> list[JSDocInfo]:
    """Parsed JSDoc of every documented ``export function`` in a file."""
    return [
        parse_jsdoc(match.group(1), match.group(2))
        for match in EXPORTED_FUNCTION_RE.finditer(content)
    ]
