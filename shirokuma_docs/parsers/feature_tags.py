"""
Feature-map annotation scraping.

Turns ``@screen``, ``@component``, ``@serverAction``, ``@module`` and
``@dbTable`` JSDoc blocks into feature-map items. A JSDoc block before the
first import/export/declaration describes the whole file; its metadata is
inherited by the items below it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import PurePosixPath
import re

logger = logging.getLogger(__name__)

JSDOC_BLOCK_RE = re.compile(r"/\*\*[\s\S]*?\*/")
TAG_LINE_RE = re.compile(r"@(\w+)(?:\s+(.+?))?(?:\s*\*/|\s*$)")
APP_RE = re.compile(r"(?:^|/)apps/([^/]+)/")
MODULE_PATH_RE = re.compile(r"lib/(\w+)/(\w+)\.ts$")

_LEADING = r"^(?:\/\/.*\n|\/\*[\s\S]*?\*\/\n|\s)*"
CODE_START_PATTERNS = (
    re.compile(_LEADING + r"(import)\s", re.MULTILINE),
    re.compile(_LEADING + r"(export)\s", re.MULTILINE),
    re.compile(_LEADING + r"(const|let|var|function|class|interface|type|enum)\s", re.MULTILINE),
)

ITEM_NAME_PATTERNS = (
    re.compile(r"export\s+(?:async\s+)?function\s+(\w+)"),
    re.compile(r"export\s+default\s+(?:async\s+)?function\s+(\w+)"),
    re.compile(r"export\s+const\s+(\w+)"),
    re.compile(r"(?:async\s+)?function\s+(\w+)"),
    re.compile(r"const\s+(\w+)\s*="),
)

ITEM_KINDS = ("screen", "component", "action", "module", "table")


@dataclass
class FileMetadata:
    feature: str | None = None
    used_in_screens: list[str] = field(default_factory=list)
    used_in_components: list[str] = field(default_factory=list)
    db_tables: list[str] = field(default_factory=list)
    module_description: str | None = None
    module_name: str | None = None


@dataclass
class FeatureMapItem:
    type: str
    name: str
    path: str
    feature: str | None = None
    description: str | None = None
    app: str | None = None
    route: str | None = None
    category: str | None = None
    used_components: list[str] = field(default_factory=list)
    used_actions: list[str] = field(default_factory=list)
    used_in_screens: list[str] = field(default_factory=list)
    used_in_components: list[str] = field(default_factory=list)
    used_in_actions: list[str] = field(default_factory=list)
    db_tables: list[str] = field(default_factory=list)


def extract_tags(block: str) -> dict[str, str]:
    """``{tag: value}`` for each tag line; later duplicates win."""
    tags: dict[str, str] = {}
    for line in block.split("\n"):
        match = TAG_LINE_RE.search(line)
        if not match:
            continue
        tag, value = match.group(1), match.group(2)
        if tag == "serverAction":
            # Marker tag, value is ignored
            tags[tag] = ""
        elif value:
            tags[tag] = value.strip()
    return tags


def extract_description(block: str) -> str | None:
    """Untagged lines of a JSDoc block, indentation kept."""
    lines = []
    for line in block.split("\n"):
        content = re.sub(r"^\s*\*\s?", "", line)
        trimmed = content.strip()
        if (
            not trimmed
            or trimmed.startswith(("/**", "*/", "@"))
            or trimmed == "/"
        ):
            continue
        lines.append(content)
    return "\n".join(lines) if lines else None


def split_list(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def infer_app(path: str) -> str | None:
    match = APP_RE.search(path.replace("\\", "/"))
    return match.group(1) if match else None


def find_code_start(content: str) -> int:
    """Offset of the first import, export or declaration (0 when none)."""
    for pattern in CODE_START_PATTERNS:
        match = pattern.search(content)
        if match:
            return match.start(1)
    return 0


def extract_item_name(code: str) -> str | None:
    for pattern in ITEM_NAME_PATTERNS:
        match = pattern.search(code)
        if match:
            return match.group(1)
    return None


def extract_file_metadata(content: str, code_start: int) -> FileMetadata:
    match = JSDOC_BLOCK_RE.search(content[:code_start])
    if not match:
        return FileMetadata()
    block = match.group(0)
    tags = extract_tags(block)
    return FileMetadata(
        feature=tags.get("feature"),
        used_in_screens=split_list(tags.get("usedInScreen")),
        used_in_components=split_list(tags.get("usedComponents")),
        db_tables=split_list(tags.get("dbTables")),
        module_description=tags.get("description") or extract_description(block),
        module_name=tags.get("module"),
    )


def _module_name(path: str, default_name: str | None) -> str:
    if default_name:
        return default_name.replace("/", "-")
    match = MODULE_PATH_RE.search(path)
    if match:
        return f"{match.group(1)}-{match.group(2)}"
    return re.sub(r"\.tsx?$", "", PurePosixPath(path).name) or "unknown"


def parse_block(
    block: str,
    path: str,
    default_name: str | None,
    metadata: FileMetadata,
) -> FeatureMapItem | None:
    """One feature-map item from a JSDoc block, or None when untagged."""
    tags = extract_tags(block)
    name = default_name
    if tags.get("screen"):
        kind, name = "screen", tags["screen"]
    elif tags.get("component"):
        kind, name = "component", tags["component"]
    elif "serverAction" in tags:
        kind = "action"
    elif tags.get("module"):
        kind, name = "module", _module_name(path, default_name)
    elif tags.get("dbTable"):
        kind, name = "table", tags["dbTable"]
    else:
        return None
    if not name:
        return None

    item = FeatureMapItem(
        type=kind,
        name=name,
        path=path,
        feature=tags.get("feature") or metadata.feature,
        description=extract_description(block),
        app=infer_app(path),
    )
    if kind == "screen":
        item.route = tags.get("route")
        item.used_components = split_list(tags.get("usedComponents"))
        item.used_actions = split_list(tags.get("usedActions"))
    elif kind == "component":
        item.used_in_screens = split_list(tags.get("usedInScreen"))
        item.used_actions = split_list(tags.get("usedActions"))
    elif kind == "action":
        item.used_in_screens = split_list(tags.get("usedInScreen")) or list(metadata.used_in_screens)
        item.used_in_components = (
            split_list(tags.get("usedInComponent")) or list(metadata.used_in_components)
        )
        item.db_tables = split_list(tags.get("dbTables")) or list(metadata.db_tables)
    elif kind == "module":
        item.category = tags["module"]
        item.used_in_screens = split_list(tags.get("usedInScreen"))
        item.used_in_actions = split_list(tags.get("usedInActions"))
    elif kind == "table":
        item.used_in_actions = split_list(tags.get("usedInActions"))
    return item


def parse_feature_map_tags(content: str, path: str) -> tuple[list[FeatureMapItem], FileMetadata]:
    """All feature-map items declared in one source file, plus its metadata."""
    code_start = find_code_start(content)
    metadata = extract_file_metadata(content, code_start)
    items: list[FeatureMapItem] = []

    header = JSDOC_BLOCK_RE.search(content[:code_start])
    if header:
        tags = extract_tags(header.group(0))
        if any(tags.get(t) for t in ("screen", "component", "module", "dbTable")) or "serverAction" in tags:
            default_name = None
            if "serverAction" in tags or tags.get("dbTable"):
                default_name = extract_item_name(content[header.end():])
            item = parse_block(header.group(0), path, default_name, metadata)
            if item:
                items.append(item)

    for match in JSDOC_BLOCK_RE.finditer(content):
        if match.start() < code_start:
            continue
        item = parse_block(
            match.group(0), path, extract_item_name(content[match.end():]), metadata
        )
        if item:
            items.append(item)

    logger.debug(f"{path}: {len(items)} feature-map items")
    return items, metadata
