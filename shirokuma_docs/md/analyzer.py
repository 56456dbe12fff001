"""
Document dependency analysis: link graph, cycles, orphans, metrics and
split suggestions.
"""

from __future__ import annotations

from collections import Counter
import logging
from pathlib import Path, PurePosixPath
import posixpath
import re

import networkx as nx

from shirokuma_docs.md.collector import collect_files, relative_path
from shirokuma_docs.md.config import MdConfig
from shirokuma_docs.md.frontmatter import parse_frontmatter
from shirokuma_docs.md.markdown import build_heading_tree, estimate_tokens, extract_headings
from shirokuma_docs.md.types import (
    AnalysisResult,
    Dependency,
    FileMetrics,
    SectionSuggestion,
    SplitSuggestion,
)

logger = logging.getLogger(__name__)

WIKI_LINK_RE = re.compile(r"\[\[([^\]]+)\]\]")
MD_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)]+\.md)(?:#[^)]*)?\)")

MAX_LINES = 200
MAX_TOKENS = 2000
MIN_SECTION_LINES = 50
TOP_REFERENCED = 10


class Analyzer:
    """Builds the dependency graph for a documentation tree."""

    def __init__(self, config: MdConfig | None = None):
        self.config = config or MdConfig()

    def analyze(self, source_dir: Path, include_metrics: bool = False) -> AnalysisResult:
        source_dir = Path(source_dir)
        files = collect_files(
            source_dir,
            self.config.build.include,
            self.config.build.exclude,
        )

        graph = nx.MultiDiGraph()
        metrics: list[FileMetrics] = []
        suggestions: list[SplitSuggestion] = []
        rel_paths: list[str] = []

        for path in files:
            rel = relative_path(path, source_dir)
            rel_paths.append(rel)
            content = path.read_text(encoding="utf-8")
            graph.add_node(rel)

            for dep in self.extract_dependencies(rel, content):
                graph.add_edge(dep.source, dep.target, type=dep.type)

            if include_metrics:
                file_metrics = self.compute_metrics(rel, content)
                metrics.append(file_metrics)
                suggestion = self.suggest_split(file_metrics, content)
                if suggestion:
                    suggestions.append(suggestion)

        dependencies = [
            Dependency(source=u, target=v, type=data["type"])
            for u, v, data in graph.edges(data=True)
        ]

        result = AnalysisResult(
            total_files=len(files),
            dependencies=dependencies,
            cycles=detect_cycles(graph),
            orphans=find_orphans(rel_paths, dependencies),
            most_referenced=most_referenced(dependencies),
        )

        if include_metrics:
            total = sum(m.tokens for m in metrics)
            result.file_metrics = metrics
            result.split_suggestions = suggestions
            result.total_tokens = total
            result.average_tokens_per_file = round(total / len(metrics)) if metrics else 0

        logger.info(
            f"Analyzed {result.total_files} files: {len(dependencies)} dependencies, "
            f"{len(result.cycles)} cycles, {len(result.orphans)} orphans"
        )
        return result

    def extract_dependencies(self, rel: str, content: str) -> list[Dependency]:
        """Edges from frontmatter `dependencies`, [[wiki]] and [text](x.md) links."""
        deps: list[Dependency] = []
        fm = parse_frontmatter(content)

        declared = fm.data.get("dependencies") or []
        if isinstance(declared, str):
            declared = [declared]
        for target in declared:
            deps.append(Dependency(rel, str(target), "frontmatter"))

        for match in WIKI_LINK_RE.finditer(fm.content):
            target = match.group(1).split("|", 1)[0].strip()
            if not PurePosixPath(target).suffix:
                target += ".md"
            deps.append(Dependency(rel, target, "wiki-link"))

        for match in MD_LINK_RE.finditer(fm.content):
            url = match.group(2)
            if url.startswith(("http://", "https://")):
                continue
            deps.append(Dependency(rel, resolve_link(rel, url), "markdown-link"))

        return deps

    def compute_metrics(self, rel: str, content: str) -> FileMetrics:
        lines = content.split("\n")
        tree = build_heading_tree(extract_headings(content), len(lines))
        return FileMetrics(
            file=rel,
            size=len(content.encode("utf-8")),
            lines=len(lines),
            tokens=estimate_tokens(content),
            headings=tree,
            top_level_sections=len(tree),
        )

    def suggest_split(self, metrics: FileMetrics, content: str) -> SplitSuggestion | None:
        too_many_lines = metrics.lines > MAX_LINES
        too_many_tokens = metrics.tokens > MAX_TOKENS
        if not (too_many_lines or too_many_tokens):
            return None

        lines = content.split("\n")
        sections = []
        for node in _flatten(metrics.headings):
            if node.level != 2:
                continue
            span = node.end_line - node.start_line + 1
            if span < MIN_SECTION_LINES:
                continue
            body = "\n".join(lines[node.start_line - 1:node.end_line])
            sections.append(
                SectionSuggestion(
                    title=node.text,
                    start_line=node.start_line,
                    end_line=node.end_line,
                    estimated_tokens=estimate_tokens(body),
                )
            )

        if not sections:
            return None

        if too_many_lines and too_many_tokens:
            reason = f"File is too large ({metrics.lines} lines, {metrics.tokens} tokens)"
        elif too_many_lines:
            reason = f"File has too many lines ({metrics.lines})"
        else:
            reason = f"File has too many tokens ({metrics.tokens})"

        return SplitSuggestion(
            file=metrics.file,
            reason=reason,
            lines=metrics.lines,
            tokens=metrics.tokens,
            sections=sections,
        )

    def generate_graph(self, result: AnalysisResult) -> str:
        """Render the dependency edges as a Mermaid flowchart."""
        ids: dict[str, str] = {}

        def node_id(name: str) -> str:
            if name not in ids:
                ids[name] = f"N{len(ids)}"
            return ids[name]

        out = ["```mermaid", "graph TD"]
        for dep in result.dependencies:
            src, dst = node_id(dep.source), node_id(dep.target)
            arrow = "-.->" if dep.type == "wiki-link" else "-->"
            out.append(f'  {src}["{dep.source}"] {arrow} {dst}["{dep.target}"]')
        out.append("```")
        return "\n".join(out)


def resolve_link(rel: str, url: str) -> str:
    """Resolve a link target against the linking file's directory."""
    url = url.split("#", 1)[0]
    if url.startswith("/"):
        return url.lstrip("/")
    base = posixpath.dirname(rel)
    return posixpath.normpath(posixpath.join(base, url))


def detect_cycles(graph: nx.MultiDiGraph) -> list[list[str]]:
    """Depth-first search with an explicit recursion stack.

    Each cycle is reported as ``[v0, ..., vk]`` with ``vk == v0``.
    """
    visited: set[str] = set()
    on_stack: set[str] = set()
    path: list[str] = []
    cycles: list[list[str]] = []

    def visit(node: str) -> None:
        visited.add(node)
        on_stack.add(node)
        path.append(node)
        for neighbor in dict.fromkeys(graph.successors(node)):
            if neighbor in on_stack:
                start = path.index(neighbor)
                cycles.append(path[start:] + [neighbor])
            elif neighbor not in visited:
                visit(neighbor)
        path.pop()
        on_stack.discard(node)

    for node in list(graph.nodes):
        if node not in visited:
            visit(node)
    return cycles


def find_orphans(files: list[str], dependencies: list[Dependency]) -> list[str]:
    targets = {d.target for d in dependencies}
    targets |= {PurePosixPath(t).name for t in targets}
    return [f for f in files if f not in targets and PurePosixPath(f).name not in targets]


def most_referenced(dependencies: list[Dependency]) -> list[tuple[str, int]]:
    counts = Counter(d.target for d in dependencies)
    return counts.most_common(TOP_REFERENCED)


def _flatten(nodes):
    for node in nodes:
        yield node
        yield from _flatten(node.children)
