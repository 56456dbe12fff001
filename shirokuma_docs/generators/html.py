"""
Jinja2 environment shared by the HTML generators.
"""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

TEMPLATE_DIR = Path(__file__).parent / "templates"


@functools.lru_cache(maxsize=1)
def get_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["pct"] = lambda value: f"{value:.1f}%" if isinstance(value, float) else f"{value}%"
    return env


def render(template_name: str, **context: Any) -> str:
    return get_environment().get_template(template_name).render(**context)
