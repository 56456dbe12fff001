"""
Document index: list files with their frontmatter metadata.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
import json
import logging
from pathlib import Path, PurePosixPath
from typing import Any

from shirokuma_docs.md.collector import collect_files, relative_path
from shirokuma_docs.md.config import MdConfig
from shirokuma_docs.md.frontmatter import parse_frontmatter
from shirokuma_docs.md.markdown import extract_title

logger = logging.getLogger(__name__)

LAYER_NAMES = {
    0: "Layer 0: Foundation",
    1: "Layer 1: Getting Started",
    2: "Layer 2: Usage",
    3: "Layer 3: Reference",
    4: "Layer 4: Advanced",
}
UNCATEGORIZED = "Uncategorized"


@dataclass
class DocumentInfo:
    path: str
    title: str
    description: str | None = None
    layer: int | None = None
    type: str | None = None
    category: str | None = None
    depends_on: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    size: int = 0
    modified: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> str | None:
    return None if value is None else str(value)


class Lister:
    def __init__(self, config: MdConfig | None = None):
        self.config = config or MdConfig()

    def list(
        self,
        source_dir: Path,
        layer: int | None = None,
        type: str | None = None,
        category: str | None = None,
        sort_by: str = "path",
    ) -> list[DocumentInfo]:
        source_dir = Path(source_dir)
        files = collect_files(source_dir, self.config.build.include, self.config.build.exclude)
        docs = [self.describe(path, source_dir) for path in files]

        if layer is not None:
            docs = [d for d in docs if d.layer == layer]
        if type:
            docs = [d for d in docs if d.type == type]
        if category:
            docs = [d for d in docs if d.category == category]

        if sort_by == "layer":
            docs.sort(key=lambda d: (d.layer if d.layer is not None else 999, d.path))
        elif sort_by == "title":
            docs.sort(key=lambda d: d.title.lower())
        else:
            docs.sort(key=lambda d: d.path)
        return docs

    def describe(self, path: Path, source_dir: Path) -> DocumentInfo:
        content = path.read_text(encoding="utf-8")
        fm = parse_frontmatter(content)
        data = fm.data
        stat = path.stat()
        title = data.get("title") or extract_title(fm.content) or path.stem
        return DocumentInfo(
            path=relative_path(path, source_dir),
            title=str(title),
            description=_as_str(data.get("description")),
            layer=_as_int(data.get("layer")),
            type=_as_str(data.get("type")),
            category=_as_str(data.get("category")),
            depends_on=_as_list(data.get("depends_on")),
            tags=_as_list(data.get("tags")),
            size=stat.st_size,
            modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc).isoformat(),
        )


def stats(docs: list[DocumentInfo]) -> dict[str, Any]:
    return {
        "total_files": len(docs),
        "layers": dict(Counter(str(d.layer) for d in docs if d.layer is not None)),
        "types": dict(Counter(d.type for d in docs if d.type)),
        "categories": dict(Counter(d.category for d in docs if d.category)),
    }


def _group_key(doc: DocumentInfo, group_by: str) -> str:
    if group_by == "layer":
        return LAYER_NAMES.get(doc.layer, UNCATEGORIZED) if doc.layer is not None else UNCATEGORIZED
    if group_by == "type":
        return doc.type or UNCATEGORIZED
    if group_by == "category":
        return doc.category or UNCATEGORIZED
    return "Documents"


def _format_tree(docs: list[DocumentInfo]) -> list[str]:
    tree: dict[str, Any] = {}
    for doc in docs:
        node = tree
        for part in PurePosixPath(doc.path).parts:
            node = node.setdefault(part, {})

    lines = ["."]

    def walk(node: dict[str, Any], prefix: str) -> None:
        names = sorted(node)
        for i, name in enumerate(names):
            last = i == len(names) - 1
            lines.append(f"{prefix}{'└── ' if last else '├── '}{name}")
            walk(node[name], prefix + ("    " if last else "│   "))

    walk(tree, "")
    return lines


def _format_detailed(docs: list[DocumentInfo]) -> list[str]:
    out = []
    for doc in docs:
        out.append(doc.path)
        out.append(f"  Title: {doc.title}")
        if doc.description:
            out.append(f"  Description: {doc.description}")
        if doc.layer is not None:
            out.append(f"  Layer: {doc.layer}")
        if doc.type:
            out.append(f"  Type: {doc.type}")
        if doc.category:
            out.append(f"  Category: {doc.category}")
        if doc.depends_on:
            out.append(f"  Depends on: {', '.join(doc.depends_on)}")
        if doc.tags:
            out.append(f"  Tags: {', '.join(doc.tags)}")
        out.append(f"  Size: {doc.size} bytes")
        out.append(f"  Modified: {doc.modified}")
        out.append("")
    return out


def _format_markdown(docs: list[DocumentInfo], group_by: str, include_stats: bool) -> list[str]:
    out = ["# Documentation Index", ""]
    groups: dict[str, list[DocumentInfo]] = defaultdict(list)
    for doc in docs:
        groups[_group_key(doc, group_by)].append(doc)

    def order(name: str) -> tuple[int, str]:
        # Known layer names first in layer order, Uncategorized last
        layer_order = list(LAYER_NAMES.values())
        if name in layer_order:
            return (layer_order.index(name), name)
        return (len(layer_order) + (1 if name == UNCATEGORIZED else 0), name)

    for name in sorted(groups, key=order):
        out += [f"## {name}", ""]
        for doc in groups[name]:
            line = f"- [{doc.title}]({doc.path})"
            if doc.description:
                line += f": {doc.description}"
            out.append(line)
        out.append("")

    if include_stats:
        summary = stats(docs)
        out += ["## Statistics", "", f"- Total files: {summary['total_files']}"]
        for label, key in (("Layers", "layers"), ("Types", "types"), ("Categories", "categories")):
            if summary[key]:
                counts = ", ".join(f"{k}: {v}" for k, v in sorted(summary[key].items()))
                out.append(f"- {label}: {counts}")
        out.append("")
    return out


def format_documents(
    docs: list[DocumentInfo],
    fmt: str = "markdown",
    group_by: str = "layer",
    include_stats: bool = True,
) -> str:
    if fmt == "json":
        payload: dict[str, Any] = {"documents": [d.to_dict() for d in docs]}
        if include_stats:
            payload["stats"] = stats(docs)
        return json.dumps(payload, indent=2, ensure_ascii=False)
    if fmt == "simple":
        return "\n".join(d.path for d in docs) + "\n"
    if fmt == "tree":
        return "\n".join(_format_tree(docs)) + "\n"
    if fmt == "detailed":
        return "\n".join(_format_detailed(docs))
    if fmt == "markdown":
        return "\n".join(_format_markdown(docs, group_by, include_stats))
    raise ValueError(f"Unknown list format: {fmt}")
