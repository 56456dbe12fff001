"""
Line-oriented Markdown helpers: headings, slugs, code fences, links and
token estimates.

These are deliberately regex based; documents are never parsed into a full
AST.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import re

from shirokuma_docs.md.types import HeadingNode

HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*#*\s*$")
FENCE_RE = re.compile(r"^\s*(```|~~~)")
FENCED_BLOCK_RE = re.compile(r"^(```|~~~)[^\n]*\n[\s\S]*?^\1[ \t]*$", re.MULTILINE)
LINK_RE = re.compile(r"!?\[([^\]]*)\]\(([^)]+)\)")
REF_LINK_RE = re.compile(r"^\[([^\]]+)\]:\s*(.+)$")

# Kana, CJK ideographs, Hangul and full-width forms
CJK_RE = re.compile(
    "[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af\uf900-\ufaff\uff00-\uffef]"
)

PLACEHOLDER = "\x00CODEBLOCK{}\x00"


@dataclass
class Heading:
    level: int
    text: str
    line: int


@dataclass
class Link:
    text: str
    url: str
    line: int


def estimate_tokens(text: str) -> int:
    """Approximate LLM token count.

    CJK characters count as one token each; everything else is roughly
    four characters per token.
    """
    if not text:
        return 0
    cjk = len(CJK_RE.findall(text))
    other = len(text) - cjk
    return cjk + math.ceil(other / 4)


def iter_lines_outside_code(content: str):
    """Yield (line_number, line) for lines not inside fenced code blocks."""
    in_code = False
    for idx, line in enumerate(content.split("\n"), start=1):
        if FENCE_RE.match(line):
            in_code = not in_code
            continue
        if not in_code:
            yield idx, line


def code_line_mask(lines: list[str]) -> list[bool]:
    """True for every line that is part of a fenced block (fences included)."""
    mask = []
    in_code = False
    for line in lines:
        if FENCE_RE.match(line):
            mask.append(True)
            in_code = not in_code
            continue
        mask.append(in_code)
    return mask


def extract_headings(content: str) -> list[Heading]:
    headings = []
    for line_no, line in iter_lines_outside_code(content):
        match = HEADING_RE.match(line)
        if match:
            headings.append(
                Heading(level=len(match.group(1)), text=match.group(2), line=line_no)
            )
    return headings


def build_heading_tree(headings: list[Heading], total_lines: int) -> list[HeadingNode]:
    """Nest headings by level and compute the line span of each section."""
    nodes: list[HeadingNode] = []
    for i, heading in enumerate(headings):
        end = total_lines
        for later in headings[i + 1:]:
            if later.level <= heading.level:
                end = later.line - 1
                break
        nodes.append(
            HeadingNode(
                level=heading.level,
                text=heading.text,
                start_line=heading.line,
                end_line=end,
            )
        )

    roots: list[HeadingNode] = []
    stack: list[HeadingNode] = []
    for node in nodes:
        while stack and stack[-1].level >= node.level:
            stack.pop()
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)
    return roots


def slugify(text: str) -> str:
    slug = text.strip().lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    return re.sub(r"\s+", "-", slug)


def protect_code_blocks(content: str) -> tuple[str, list[str]]:
    """Swap fenced code blocks for placeholders so transforms skip them."""
    blocks: list[str] = []

    def _stash(match: re.Match) -> str:
        blocks.append(match.group(0))
        return PLACEHOLDER.format(len(blocks) - 1)

    return FENCED_BLOCK_RE.sub(_stash, content), blocks


def restore_code_blocks(content: str, blocks: list[str]) -> str:
    for i, block in enumerate(blocks):
        content = content.replace(PLACEHOLDER.format(i), block, 1)
    return content


def extract_links(content: str) -> list[Link]:
    """Inline links (including images) and reference definitions, by line."""
    links = []
    for line_no, line in iter_lines_outside_code(content):
        for match in LINK_RE.finditer(line):
            links.append(Link(text=match.group(1), url=match.group(2), line=line_no))
        ref = REF_LINK_RE.match(line)
        if ref:
            links.append(Link(text=ref.group(1), url=ref.group(2).strip(), line=line_no))
    return links


def classify_link(url: str) -> str:
    if url.startswith(("http://", "https://", "mailto:")):
        return "external"
    if url.startswith("#"):
        return "anchor"
    if url.startswith("/"):
        return "absolute"
    return "relative"


def extract_title(body: str) -> str | None:
    for heading in extract_headings(body):
        if heading.level == 1:
            return heading.text
    return None
