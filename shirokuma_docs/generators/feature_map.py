"""
Feature map: groups annotated screens, components, actions, modules and
tables by feature, and renders the JSON/HTML catalogue.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from typing import Any

from shirokuma_docs.fileio import write_text_atomic
from shirokuma_docs.generators.html import render
from shirokuma_docs.md.collector import collect_files, relative_path
from shirokuma_docs.parsers.feature_tags import FeatureMapItem, parse_feature_map_tags

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE = [
    "apps/*/app/**/*.tsx",
    "apps/*/components/**/*.tsx",
    "apps/*/lib/actions/**/*.ts",
    "packages/*/src/schema/**/*.ts",
]
DEFAULT_EXCLUDE = ["**/node_modules/**", "**/*.test.ts", "**/*.test.tsx", "**/*.spec.ts"]

GROUP_KEYS = {
    "screen": "screens",
    "component": "components",
    "action": "actions",
    "module": "modules",
    "table": "tables",
}

# Fields carried into the map for each item kind
KIND_FIELDS = {
    "screen": ("route", "used_components", "used_actions"),
    "component": ("used_in_screens", "used_in_components", "used_actions"),
    "action": ("used_in_screens", "used_in_components", "db_tables"),
    "module": ("category", "used_in_screens", "used_in_actions"),
    "table": ("used_in_actions",),
}


def empty_group() -> dict[str, list[dict[str, Any]]]:
    return {key: [] for key in GROUP_KEYS.values()}


def convert_item(item: FeatureMapItem) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": item.name,
        "path": item.path,
        "description": item.description,
        "app": item.app,
    }
    for name in KIND_FIELDS[item.type]:
        data[name] = getattr(item, name)
    return data


def build_table_reverse_references(items: list[FeatureMapItem]) -> None:
    """Fill each table's ``used_in_actions`` from the actions' ``db_tables``."""
    table_actions: dict[str, list[str]] = {}
    for item in items:
        if item.type != "action":
            continue
        for table in item.db_tables:
            table_actions.setdefault(table.strip().lower(), []).append(item.name)

    for item in items:
        if item.type == "table":
            actions = table_actions.get(item.name.strip().lower(), [])
            item.used_in_actions = list(dict.fromkeys(actions))


def build_feature_map(
    items: list[FeatureMapItem],
    module_descriptions: dict[str, str] | None = None,
) -> dict[str, Any]:
    features: dict[str, dict[str, list[dict[str, Any]]]] = {}
    uncategorized = empty_group()
    apps: set[str] = set()

    for item in items:
        if item.app:
            apps.add(item.app)
        group = features.setdefault(item.feature, empty_group()) if item.feature else uncategorized
        group[GROUP_KEYS[item.type]].append(convert_item(item))

    return {
        "features": dict(sorted(features.items())),
        "uncategorized": uncategorized,
        "module_descriptions": dict(module_descriptions or {}),
        "apps": sorted(apps),
        "generated_at": datetime.now(timezone.utc).isoformat(),
    }


def scan_sources(
    project_root: Path,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> tuple[list[FeatureMapItem], dict[str, str]]:
    """Parse every matching source file under ``project_root``."""
    items: list[FeatureMapItem] = []
    module_descriptions: dict[str, str] = {}
    for path in collect_files(project_root, include or DEFAULT_INCLUDE, exclude or DEFAULT_EXCLUDE):
        rel = relative_path(path, project_root)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping {rel}: {e}")
            continue
        file_items, metadata = parse_feature_map_tags(content, rel)
        items.extend(file_items)
        if metadata.module_name and metadata.module_description:
            module_descriptions[metadata.module_name] = metadata.module_description
    build_table_reverse_references(items)
    logger.info(f"Feature map: {len(items)} items")
    return items, module_descriptions


def _count(group: dict[str, list[Any]]) -> int:
    return sum(len(v) for v in group.values())


def generate_feature_map_html(feature_map: dict[str, Any], project_name: str) -> str:
    sections = [(name, group) for name, group in feature_map["features"].items()]
    if _count(feature_map["uncategorized"]):
        sections.append(("Uncategorized", feature_map["uncategorized"]))
    return render(
        "feature_map.html",
        project_name=project_name,
        generated_at=feature_map["generated_at"],
        sections=sections,
        apps=feature_map["apps"],
        module_descriptions=feature_map["module_descriptions"],
        group_keys=list(GROUP_KEYS.values()),
        total=sum(_count(g) for _, g in sections),
    )


def write_feature_map(
    feature_map: dict[str, Any],
    project_name: str,
    generated_dir: Path,
    portal_dir: Path,
) -> tuple[Path, Path]:
    json_path = generated_dir / "feature-map.json"
    html_path = portal_dir / "feature-map.html"
    write_text_atomic(json_path, json.dumps(feature_map, indent=2, ensure_ascii=False) + "\n")
    write_text_atomic(html_path, generate_feature_map_html(feature_map, project_name))
    return json_path, html_path
