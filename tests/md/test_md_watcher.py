"""
Tests for change detection used by watch mode.
"""

from pathlib import Path

from watchdog.events import DirModifiedEvent, FileModifiedEvent, FileMovedEvent

from shirokuma_docs.md.watcher import ChangeQueue, DocsEventHandler


def _handler(tmp_path: Path, **kwargs) -> tuple[DocsEventHandler, ChangeQueue]:
    (tmp_path / "docs").mkdir(exist_ok=True)
    queue = ChangeQueue(debounce_seconds=0)
    return DocsEventHandler(tmp_path / "docs", queue, **kwargs), queue


def test_queue_holds_changes_until_quiet():
    queue = ChangeQueue(debounce_seconds=60)
    queue.add("a.md")
    assert queue.has_pending()
    assert queue.get_ready() == []
    assert queue.wait(timeout=0)


def test_queue_releases_after_debounce():
    queue = ChangeQueue(debounce_seconds=0)
    queue.add("a.md")
    queue.add("a.md")
    assert queue.get_ready() == ["a.md"]
    assert not queue.has_pending()
    assert not queue.wait(timeout=0)


def test_handler_queues_matching_markdown(tmp_path: Path):
    handler, queue = _handler(tmp_path)
    path = tmp_path / "docs" / "guide" / "a.md"
    handler.dispatch(FileModifiedEvent(str(path)))
    assert queue.get_ready() == [str(path.resolve())]


def test_handler_ignores_noise(tmp_path: Path):
    output = tmp_path / "docs" / "out.md"
    handler, queue = _handler(tmp_path, exclude=["drafts/**"], output=output)
    handler.dispatch(FileModifiedEvent(str(tmp_path / "docs" / "notes.txt")))
    handler.dispatch(FileModifiedEvent(str(tmp_path / "docs" / "drafts" / "x.md")))
    handler.dispatch(FileModifiedEvent(str(output)))
    handler.dispatch(FileModifiedEvent(str(tmp_path / "elsewhere.md")))
    handler.dispatch(DirModifiedEvent(str(tmp_path / "docs")))
    assert not queue.has_pending()


def test_handler_counts_rename_into_tree(tmp_path: Path):
    handler, queue = _handler(tmp_path)
    src = tmp_path / "docs" / "a.md.swp"
    dest = tmp_path / "docs" / "a.md"
    handler.dispatch(FileMovedEvent(str(src), str(dest)))
    assert queue.get_ready() == [str(dest.resolve())]
