"""
Content transforms applied during `md build`.

Each transform is a plain ``str -> str`` function. `enabled_transforms`
picks them from the build options in a fixed order.
"""

from __future__ import annotations

from collections.abc import Callable
import functools
import logging
import re

from shirokuma_docs.md.config import BuildOptions
from shirokuma_docs.md.markdown import (
    HEADING_RE,
    PLACEHOLDER,
    protect_code_blocks,
    restore_code_blocks,
)

logger = logging.getLogger(__name__)

Transform = Callable[[str], str]

NUMBERED_HEADING_RE = re.compile(r"^(#{1,6}\s+)\d+(\.\d+)*\.\s+(.+)$", re.MULTILINE)
SECTION_META_BLOCK_RE = re.compile(r"<!--\s*section-meta[\s\S]*?-->")
HTML_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")
EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
BADGE_HOSTS = ("shields.io", "codecov", "badgen.net", "badge.svg", "travis-ci")
BADGE_RE = re.compile(
    r"\[!\[[^\]]*\]\(([^)]+)\)\]\([^)]*\)"  # linked badge
    r"|!\[[^\]]*\]\(([^)]+)\)"  # bare image
)
INTERNAL_LINK_RE = re.compile(r"\[([^\]]+)\]\((?:\.\.?/)+[^)\s]*?\.md(?:#[^)]*)?\)")
BLOCKQUOTE_RE = re.compile(r"^\s*>.*$")


def _outside_code(func: Transform) -> Transform:
    """Run the transform with fenced code blocks swapped out."""

    @functools.wraps(func)
    def wrapper(content: str) -> str:
        protected, blocks = protect_code_blocks(content)
        return restore_code_blocks(func(protected), blocks)

    return wrapper


@_outside_code
def strip_heading_numbers(content: str) -> str:
    return NUMBERED_HEADING_RE.sub(r"\1\3", content)


@_outside_code
def strip_section_meta(content: str) -> str:
    content = SECTION_META_BLOCK_RE.sub("", content)
    return EXCESS_NEWLINES_RE.sub("\n\n", content)


@_outside_code
def remove_comments(content: str) -> str:
    return HTML_COMMENT_RE.sub("", content)


def normalize_headings(separator: str = " / ") -> Transform:
    """Prefix each heading with the text of its ancestors."""

    @_outside_code
    def transform(content: str) -> str:
        stack: list[str | None] = []
        out = []
        for line in content.split("\n"):
            match = HEADING_RE.match(line)
            if not match:
                out.append(line)
                continue
            level = len(match.group(1))
            text = match.group(2)
            stack = stack[: level - 1]
            stack += [None] * (level - 1 - len(stack))
            stack.append(text)
            path = separator.join(s for s in stack if s)
            out.append(f"{match.group(1)} {path}")
        return "\n".join(out)

    return transform


@_outside_code
def remove_badges(content: str) -> str:
    def _drop(match: re.Match) -> str:
        url = match.group(1) or match.group(2) or ""
        return "" if any(host in url for host in BADGE_HOSTS) else match.group(0)

    out = []
    for line in content.split("\n"):
        cleaned = BADGE_RE.sub(_drop, line)
        if cleaned != line and not cleaned.strip():
            continue
        out.append(cleaned.rstrip() if cleaned != line else cleaned)
    return "\n".join(out)


@_outside_code
def remove_duplicates(content: str) -> str:
    """Drop paragraphs that repeat an earlier paragraph verbatim."""
    seen: set[str] = set()
    kept = []
    for block in re.split(r"\n{2,}", content):
        key = block.strip()
        is_structural = (
            not key
            or HEADING_RE.match(key)
            or PLACEHOLDER.split("{")[0] in key
        )
        if not is_structural and key in seen:
            continue
        if key:
            seen.add(key)
        kept.append(block)
    return "\n\n".join(kept)


@_outside_code
def remove_blockquotes(content: str) -> str:
    return "\n".join(
        line for line in content.split("\n") if not BLOCKQUOTE_RE.match(line)
    )


@_outside_code
def remove_internal_links(content: str) -> str:
    return INTERNAL_LINK_RE.sub(r"\1", content)


def normalize_whitespace(content: str) -> str:
    lines = [line.rstrip() for line in content.split("\n")]
    content = EXCESS_NEWLINES_RE.sub("\n\n", "\n".join(lines))
    return content.strip("\n") + "\n"


def enabled_transforms(build: BuildOptions) -> list[tuple[str, Transform]]:
    """Transforms switched on by the build options, in application order."""
    opts = build.optimizations
    steps: list[tuple[str, Transform]] = []
    if build.strip_section_meta:
        steps.append(("strip-section-meta", strip_section_meta))
    if build.strip_heading_numbers:
        steps.append(("strip-heading-numbers", strip_heading_numbers))
    if opts.remove_comments:
        steps.append(("remove-comments", remove_comments))
    if opts.remove_badges:
        steps.append(("remove-badges", remove_badges))
    if opts.remove_blockquotes:
        steps.append(("remove-blockquotes", remove_blockquotes))
    if opts.remove_internal_links:
        steps.append(("remove-internal-links", remove_internal_links))
    if opts.normalize_headings:
        steps.append(("normalize-headings", normalize_headings(opts.heading_separator)))
    if opts.remove_duplicates:
        steps.append(("remove-duplicates", remove_duplicates))
    if opts.normalize_whitespace:
        steps.append(("normalize-whitespace", normalize_whitespace))
    return steps


def apply_transforms(content: str, steps: list[tuple[str, Transform]]) -> str:
    for name, transform in steps:
        content = transform(content)
        logger.debug(f"Applied transform {name}")
    return content
