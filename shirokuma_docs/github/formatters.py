from __future__ import annotations

import json
from typing import Any

ISSUE_COLUMNS = ["number", "title", "state", "status", "priority", "type", "size"]
PR_COLUMNS = [
    "number",
    "title",
    "state",
    "head_branch",
    "base_branch",
    "author",
    "review_decision",
    "url",
]
DISCUSSION_COLUMNS = ["number", "title", "category", "author", "answer_chosen"]
PROJECT_COLUMNS = ["id", "title", "status", "priority", "type", "size", "issue_number"]

OUTPUT_FORMATS = ("json", "table-json")


def to_table_json(items: list[dict[str, Any]], columns: list[str] | None = None) -> dict[str, Any]:
    """Column-oriented view of a list of dicts; missing keys become None."""
    if columns is None:
        columns = list(items[0].keys()) if items else []
    return {
        "columns": columns,
        "rows": [[item.get(col) for col in columns] for item in items],
    }


def format_output(
    data: dict[str, Any],
    fmt: str = "json",
    array_key: str | None = None,
    columns: list[str] | None = None,
) -> str:
    if fmt == "table-json" and array_key and isinstance(data.get(array_key), list):
        out = {k: v for k, v in data.items() if k != array_key}
        out.update(to_table_json(data[array_key], columns))
        return json.dumps(out, indent=2, ensure_ascii=False)
    return json.dumps(data, indent=2, ensure_ascii=False)
