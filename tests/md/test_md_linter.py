"""
Tests for the style linter and its fixer.
"""

import json

from shirokuma_docs.md.config import MdConfig
from shirokuma_docs.md.linter import Linter, fix_content, format_lint_report


def _rules(content: str, config: MdConfig | None = None) -> list[tuple[str, int | None]]:
    issues = Linter(config).lint_content("doc.md", content)
    return [(i.rule, i.line) for i in issues]


def test_trailing_spaces_and_blank_runs():
    rules = _rules("# T  \n\n\n\nbody")
    assert ("no-trailing-spaces", 1) in rules
    assert ("no-multiple-blanks", 4) in rules


def test_list_marker_and_code_blocks():
    rules = _rules("* item\n```\n* code\n```\n- fine\n")
    assert rules == [("list-marker-style", 1)]


def test_setext_heading():
    assert _rules("Title\n=====\n") == [("heading-style", 2)]


def test_numbered_headings_navigation_and_bold():
    content = "## 1. Intro\n\n## Related Documents\n\n**Label**: value\n"
    rules = _rules(content)
    assert ("no-numbered-headings", 1) in rules
    assert ("no-navigation-sections", 3) in rules
    assert ("no-structural-bold", 5) in rules


def test_mermaid_styling():
    content = "```mermaid\ngraph TD\n  style A fill:#f9f\n```\n"
    assert _rules(content) == [("no-mermaid-styling", 3)]


def test_frontmatter_is_not_linted_as_prose():
    assert _rules("---\nnotes: |\n  * x\n---\n# Doc\n") == []


def test_rule_can_be_disabled():
    config = MdConfig.model_validate({"lint": {"builtin_rules": {"no-trailing-spaces": False}}})
    assert _rules("text  \n", config) == []


def test_file_naming_rule():
    config = MdConfig.model_validate(
        {"lint": {"file_naming": {"pattern": r"^[a-z0-9-]+\.md$", "message": "Use kebab-case"}}}
    )
    issues = Linter(config).lint_content("guide/Bad_Name.md", "# x\n")
    assert [(i.rule, i.message) for i in issues] == [("file-naming", "Use kebab-case")]


def test_fix_content_keeps_frontmatter():
    content = "---\ntitle: x  \n---\nline  \n\n\n\n\nend"
    assert fix_content(content) == "---\ntitle: x  \n---\nline\n\n\nend"


def test_lint_with_fix_rewrites_files(write_files):
    root = write_files({"docs/a.md": "# A  \n", "docs/b.md": "# B\n"})
    result = Linter().lint(root / "docs", fix=True)

    assert result.files_checked == 2
    assert result.fixed_files == ["a.md"]
    assert (root / "docs" / "a.md").read_text() == "# A\n"
    assert not any(i.rule == "no-trailing-spaces" for i in result.issues)


def test_consistent_structure(write_files):
    files = {f"docs/guide/page-{i}.md": "# P\n" for i in range(5)}
    files["docs/ref/index.md"] = "# Ref\n"
    root = write_files(files)
    config = MdConfig.model_validate({"lint": {"consistent_structure": {"enabled": True}}})

    result = Linter(config).lint(root / "docs")
    structural = [(i.file, i.rule) for i in result.issues if i.rule.startswith("consistent")]
    assert structural == [
        ("guide", "consistent-structure-threshold"),
        ("ref/index.md", "consistent-structure-naming"),
    ]


def test_format_lint_report(write_files):
    root = write_files({"docs/a.md": "* item  \n"})
    result = Linter().lint(root / "docs")

    report = format_lint_report(result)
    assert report.startswith("# Lint Report\n")
    assert "- Files checked: 1" in report
    assert "## a.md" in report
    assert "- [warning] L1 no-trailing-spaces: Trailing whitespace" in report

    data = json.loads(format_lint_report(result, "json"))
    assert data["files_checked"] == 1
    assert data["summary"] == {"error": 0, "warning": 1, "info": 1}
    assert not result.has_errors
