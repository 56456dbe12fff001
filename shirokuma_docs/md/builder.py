"""
Combine a documentation tree into a single Markdown file.

Pipeline: collect -> read frontmatter -> sort -> transform -> join -> TOC ->
atomic write.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
import heapq
import logging
from pathlib import Path, PurePosixPath
import posixpath
import time
from typing import Any

from shirokuma_docs.fileio import write_text_atomic
from shirokuma_docs.md import watcher
from shirokuma_docs.md.collector import collect_files, relative_path
from shirokuma_docs.md.config import MdConfig
from shirokuma_docs.md.frontmatter import parse_frontmatter
from shirokuma_docs.md.markdown import estimate_tokens, extract_headings, slugify
from shirokuma_docs.md.plugins import apply_transforms, enabled_transforms
from shirokuma_docs.md.types import BuildResult

logger = logging.getLogger(__name__)

UNMATCHED_GROUP = 999
DEFAULT_LAYER = 999


class BuildError(Exception):
    """Raised when a build cannot produce output."""


@dataclass
class Document:
    path: Path
    rel: str
    raw: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return str(self.data.get("title") or PurePosixPath(self.rel).stem)

    @property
    def layer(self) -> int:
        try:
            return int(self.data.get("layer", DEFAULT_LAYER))
        except (TypeError, ValueError):
            return DEFAULT_LAYER

    @property
    def category(self) -> str:
        return str(self.data.get("category") or "")

    @property
    def depends_on(self) -> list[str]:
        deps = self.data.get("depends_on") or []
        return [deps] if isinstance(deps, str) else [str(d) for d in deps]


class Builder:
    def __init__(self, config: MdConfig | None = None):
        self.config = config or MdConfig()

    def build(
        self,
        source_dir: Path,
        output: Path | None = None,
        include: list[str] | None = None,
        exclude: list[str] | None = None,
    ) -> BuildResult:
        started = time.perf_counter()
        opts = self.config.build
        source_dir = Path(source_dir)
        output_path = Path(output or opts.default_output)

        files = collect_files(source_dir, include or opts.include, exclude or opts.exclude)
        # Never fold a previous build back into itself
        files = [f for f in files if f != output_path.resolve()]
        if not files:
            raise BuildError(f"No files found in {source_dir}")

        docs = [self._load(path, source_dir) for path in files]
        docs = self.sort_documents(docs)

        steps = enabled_transforms(opts)
        parts = []
        for doc in docs:
            text = doc.body if opts.frontmatter.strip else doc.raw
            parts.append(apply_transforms(text, steps).strip("\n"))

        content = opts.file_separator.join(parts)
        if opts.toc.enabled:
            toc = self.generate_toc(content)
            content = f"{toc}\n\n{opts.file_separator.strip()}\n\n{content}"
        content = content.rstrip("\n") + "\n"

        write_text_atomic(output_path, content)

        result = BuildResult(
            file_count=len(docs),
            total_size=len(content.encode("utf-8")),
            build_time=round(time.perf_counter() - started, 3),
            output_path=str(output_path),
            token_count=estimate_tokens(content),
            files=[d.rel for d in docs],
        )
        logger.info(
            f"Build complete: {result.file_count} files -> {result.output_path} "
            f"({result.total_size} bytes, ~{result.token_count} tokens)"
        )
        return result

    def _load(self, path: Path, source_dir: Path) -> Document:
        raw = path.read_text(encoding="utf-8")
        fm = parse_frontmatter(raw)
        if fm.parse_error:
            logger.warning(f"{path}: {fm.parse_error}")
        return Document(
            path=path,
            rel=relative_path(path, source_dir),
            raw=raw,
            body=fm.content,
            data=fm.data,
        )

    def sort_documents(self, docs: list[Document]) -> list[Document]:
        if self.config.build.sort != "custom":
            return sorted(docs, key=lambda d: d.rel)
        return self._custom_sort(docs)

    def _group(self, doc: Document) -> int:
        for index, entry in enumerate(self.config.sort_order):
            if entry.pattern in doc.rel:
                return index
        return UNMATCHED_GROUP

    def _custom_sort(self, docs: list[Document]) -> list[Document]:
        """Group by the first matching ``sort_order`` pattern, then order each
        group with Kahn's algorithm over depends_on. Ties are broken by layer,
        category and title. Dependencies on documents in another group do not
        reorder anything, and documents caught in a cycle go to the end of
        their group."""
        groups: dict[int, list[Document]] = {}
        for doc in docs:
            groups.setdefault(self._group(doc), []).append(doc)

        ordered: list[Document] = []
        for index in sorted(groups):
            ordered.extend(_order_group(groups[index]))
        return ordered

    def generate_toc(self, content: str) -> str:
        toc = self.config.build.toc
        lines = [f"# {toc.title}", ""]
        for heading in extract_headings(content):
            if heading.level <= toc.depth:
                indent = "  " * (heading.level - 1)
                lines.append(f"{indent}- [{heading.text}](#{slugify(heading.text)})")
        return "\n".join(lines)

    def watch(
        self,
        source_dir: Path,
        output: Path | None = None,
        debounce: float = 0.5,
        on_rebuild: Callable[[BuildResult], None] | None = None,
        max_rebuilds: int | None = None,
    ) -> None:
        """Build once, then rebuild whenever a source file changes.

        Changes arrive from a watchdog observer and are debounced so a burst
        of saves produces one rebuild. Runs until interrupted, or until
        ``max_rebuilds`` change-triggered rebuilds have run.
        """
        source_dir = Path(source_dir)
        opts = self.config.build
        output_path = Path(output or opts.default_output)

        def rebuild() -> None:
            try:
                result = self.build(source_dir, output_path)
            except BuildError as e:
                logger.warning(f"Rebuild skipped: {e}")
                return
            if on_rebuild:
                on_rebuild(result)

        rebuild()

        queue = watcher.ChangeQueue(debounce_seconds=debounce)
        handler = watcher.DocsEventHandler(
            source_dir, queue, opts.include, opts.exclude, output=output_path
        )
        observer = watcher.Observer()
        observer.schedule(handler, str(source_dir), recursive=True)
        observer.start()
        logger.info(f"Watching {source_dir} for changes")

        rebuilds = 0
        try:
            while max_rebuilds is None or rebuilds < max_rebuilds:
                if not queue.wait(timeout=1.0):
                    continue
                changed = queue.get_ready()
                if not changed:
                    time.sleep(min(debounce, 0.1))
                    continue
                logger.info(f"{len(changed)} file(s) changed, rebuilding")
                rebuild()
                rebuilds += 1
        except KeyboardInterrupt:
            logger.info("Watch stopped")
        finally:
            observer.stop()
            observer.join()


def _order_group(docs: list[Document]) -> list[Document]:
    def key(i: int) -> tuple:
        d = docs[i]
        return (d.layer, d.category, d.title, d.rel)

    dependents: dict[int, list[int]] = {i: [] for i in range(len(docs))}
    in_degree = [0] * len(docs)
    for i, doc in enumerate(docs):
        for dep in doc.depends_on:
            j = _find_document(docs, dep)
            if j is None or j == i:
                continue
            dependents[j].append(i)
            in_degree[i] += 1

    ready = [(key(i), i) for i in range(len(docs)) if in_degree[i] == 0]
    heapq.heapify(ready)
    ordered: list[int] = []
    while ready:
        _, i = heapq.heappop(ready)
        ordered.append(i)
        for j in dependents[i]:
            in_degree[j] -= 1
            if in_degree[j] == 0:
                heapq.heappush(ready, (key(j), j))

    if len(ordered) < len(docs):
        placed = set(ordered)
        remaining = sorted((i for i in range(len(docs)) if i not in placed), key=key)
        logger.warning(
            f"Circular depends_on among {len(remaining)} documents; appending in default order"
        )
        ordered.extend(remaining)
    return [docs[i] for i in ordered]


def _find_document(docs: list[Document], dep: str) -> int | None:
    dep = posixpath.normpath(dep)
    for i, doc in enumerate(docs):
        if doc.rel == dep or dep.endswith("/" + doc.rel):
            return i
    name = PurePosixPath(dep).name
    for i, doc in enumerate(docs):
        if PurePosixPath(doc.rel).name == name:
            return i
    return None
