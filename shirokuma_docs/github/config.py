"""Getters over the [github] table of shirokuma-docs.toml."""

from __future__ import annotations

from typing import Any

from shirokuma_docs.core import get_section

DEFAULT_DISCUSSIONS_CATEGORY = "Handovers"
DEFAULT_LIST_LIMIT = 20
DEFAULT_STATUS = "Backlog"


def get_discussions_category(config: dict[str, Any]) -> str:
    return get_section(config, "github").get("discussions_category", DEFAULT_DISCUSSIONS_CATEGORY)


def get_list_limit(config: dict[str, Any]) -> int:
    value = get_section(config, "github").get("list_limit", DEFAULT_LIST_LIMIT)
    try:
        return int(value)
    except (TypeError, ValueError):
        return DEFAULT_LIST_LIMIT


def get_default_status(config: dict[str, Any]) -> str:
    return get_section(config, "github").get("default_status", DEFAULT_STATUS)


def get_default_labels(config: dict[str, Any]) -> list[str]:
    labels = get_section(config, "github").get("labels") or []
    return [str(label) for label in labels]
