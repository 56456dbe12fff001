"""
Tests for the document lister and its output formats.
"""

import json

import pytest

from shirokuma_docs.md.lister import Lister, format_documents, stats

DOCS = {
    "docs/intro.md": "---\ntitle: Intro\nlayer: 1\ntype: guide\ndescription: Start here\n---\n",
    "docs/ref/api.md": "---\nlayer: 3\ntype: reference\ncategory: api\ntags: core\n---\n# API Reference\n",
    "docs/notes.md": "Just notes\n",
}


@pytest.fixture
def docs_dir(write_files):
    return write_files(DOCS) / "docs"


def test_list_reads_metadata(docs_dir):
    docs = Lister().list(docs_dir)

    assert [d.path for d in docs] == ["intro.md", "notes.md", "ref/api.md"]
    intro, notes, api = docs
    assert (intro.title, intro.layer, intro.type) == ("Intro", 1, "guide")
    assert notes.title == "notes"
    assert notes.layer is None
    assert api.title == "API Reference"
    assert api.tags == ["core"]
    assert api.size > 0
    assert api.modified


def test_list_filters(docs_dir):
    lister = Lister()
    assert [d.path for d in lister.list(docs_dir, layer=3)] == ["ref/api.md"]
    assert [d.path for d in lister.list(docs_dir, type="guide")] == ["intro.md"]
    assert [d.path for d in lister.list(docs_dir, category="api")] == ["ref/api.md"]


def test_list_sorting(docs_dir):
    lister = Lister()
    assert [d.path for d in lister.list(docs_dir, sort_by="layer")] == [
        "intro.md",
        "ref/api.md",
        "notes.md",
    ]
    assert [d.title for d in lister.list(docs_dir, sort_by="title")] == [
        "API Reference",
        "Intro",
        "notes",
    ]


def test_stats(docs_dir):
    summary = stats(Lister().list(docs_dir))
    assert summary == {
        "total_files": 3,
        "layers": {"1": 1, "3": 1},
        "types": {"guide": 1, "reference": 1},
        "categories": {"api": 1},
    }


def test_format_simple_and_tree(docs_dir):
    docs = Lister().list(docs_dir)
    assert format_documents(docs, "simple") == "intro.md\nnotes.md\nref/api.md\n"
    assert format_documents(docs, "tree").splitlines() == [
        ".",
        "├── intro.md",
        "├── notes.md",
        "└── ref",
        "    └── api.md",
    ]


def test_format_markdown_groups_by_layer(docs_dir):
    text = format_documents(Lister().list(docs_dir), "markdown")
    lines = text.splitlines()

    assert lines[0] == "# Documentation Index"
    headings = [line for line in lines if line.startswith("## ")]
    assert headings == [
        "## Layer 1: Getting Started",
        "## Layer 3: Reference",
        "## Uncategorized",
        "## Statistics",
    ]
    assert "- [Intro](intro.md): Start here" in lines
    assert "- Total files: 3" in lines


def test_format_markdown_without_stats(docs_dir):
    text = format_documents(Lister().list(docs_dir), "markdown", group_by="type", include_stats=False)
    assert "## guide" in text
    assert "## Statistics" not in text


def test_format_detailed(docs_dir):
    text = format_documents(Lister().list(docs_dir), "detailed")
    assert "  Title: Intro" in text
    assert "  Category: api" in text


def test_format_json(docs_dir):
    data = json.loads(format_documents(Lister().list(docs_dir), "json"))
    assert [d["path"] for d in data["documents"]] == ["intro.md", "notes.md", "ref/api.md"]
    assert data["stats"]["total_files"] == 3


def test_format_unknown(docs_dir):
    with pytest.raises(ValueError, match="Unknown list format: yaml"):
        format_documents([], "yaml")


def test_non_string_type_is_listed_as_text(write_files):
    docs_dir = write_files(
        {
            "docs/a.md": "---\ntitle: A\ntype: 2024\n---\n",
            "docs/b.md": "---\ntitle: B\ntype: guide\n---\n",
        }
    ) / "docs"
    docs = Lister().list(docs_dir)
    assert [d.type for d in docs] == ["2024", "guide"]

    text = format_documents(docs, "markdown", group_by="type")
    headings = [line for line in text.splitlines() if line.startswith("## ")]
    assert headings == ["## 2024", "## guide", "## Statistics"]
    assert "- Types: 2024: 1, guide: 1" in text
