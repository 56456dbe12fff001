"""
Tests for document validation rules.
"""

from shirokuma_docs.md.config import MdConfig
from shirokuma_docs.md.validator import Validator, is_internal_link, link_context


def _config(**validation) -> MdConfig:
    return MdConfig.model_validate({"validation": validation})


def test_valid_document(write_files):
    root = write_files({"docs/a.md": "---\ntitle: A\n---\n# A\n\nPlain text.\n"})
    result = Validator(_config(required_frontmatter=["title"]), root).validate(root / "docs")
    assert result.valid
    assert result.files_checked == 1
    assert result.all_issues() == []


def test_missing_required_frontmatter(write_files):
    root = write_files({"docs/a.md": "# A\n"})
    result = Validator(_config(required_frontmatter=["title"]), root).validate(root / "docs")
    assert not result.valid
    assert [(i.rule, i.message) for i in result.errors] == [
        ("required-frontmatter", "Missing required frontmatter field: title")
    ]


def test_frontmatter_field_rules(write_files):
    root = write_files({"docs/a.md": "---\nstatus: wip\n---\n# A\n"})
    config = _config(frontmatter_fields=[{"name": "status", "values": ["draft", "final"]}])
    result = Validator(config, root).validate(root / "docs")
    assert [i.rule for i in result.errors] == ["frontmatter-field"]
    assert "Allowed values: draft, final" in result.errors[0].message


def test_invalid_frontmatter_is_an_error(write_files):
    root = write_files({"docs/a.md": "---\ntitle: [bad\n---\n# A\n"})
    result = Validator(_config(), root).validate(root / "docs")
    assert result.errors[0].rule == "frontmatter-parse"
    assert result.errors[0].message.startswith("Invalid frontmatter:")


def test_internal_links_reported_with_context(write_files):
    root = write_files({"docs/a.md": "# A\nSee [other](other.md) for more.\n```\n[x](code.md)\n```\n"})
    result = Validator(_config(), root).validate(root / "docs")
    assert len(result.errors) == 1
    issue = result.errors[0]
    assert issue.rule == "no-internal-links"
    assert issue.line == 2
    assert issue.message.startswith("Internal link found: other.md (context: ")


def test_internal_links_can_be_disabled(write_files):
    root = write_files({"docs/a.md": "See [other](other.md).\n"})
    result = Validator(_config(no_internal_links=False), root).validate(root / "docs")
    assert result.valid


def test_forbidden_patterns(write_files):
    root = write_files({"docs/a.md": "# A\nTODO: finish\n"})
    config = _config(
        forbidden_patterns=[
            {"pattern": "TODO", "message": "No TODO markers"},
            {"pattern": "(", "message": "broken"},
        ]
    )
    result = Validator(config, root).validate(root / "docs")
    messages = [(i.message, i.line) for i in result.errors]
    assert ("No TODO markers", 2) in messages
    assert ("Invalid regex pattern: (", None) in messages


def test_missing_dependency(write_files):
    root = write_files(
        {
            "docs/a.md": "---\ndepends_on:\n  - docs/b.md\n  - docs/missing.md\n---\n# A\n",
            "docs/b.md": "# B\n",
        }
    )
    result = Validator(_config(), root).validate(root / "docs")
    assert [i.message for i in result.errors] == ["Dependency not found: docs/missing.md"]


def test_broken_links(write_files):
    root = write_files(
        {
            "docs/a.md": "# A\n[ok](b.md) [gone](missing.md) [web](https://x.io) [top](#a)\n",
            "docs/b.md": "# B\n",
        }
    )
    config = _config(no_internal_links=False, check_links=True)
    result = Validator(config, root).validate(root / "docs")
    assert [i.rule for i in result.errors] == ["broken-link"]
    assert result.errors[0].message.startswith('Broken link: "missing.md"')


def test_deep_heading_and_bad_section_meta_are_warnings(write_files):
    root = write_files(
        {"docs/a.md": "# A\n####### too deep\n<!-- section-meta\nkey: [bad\n-->\n"}
    )
    result = Validator(_config(), root).validate(root / "docs")
    assert result.valid
    assert sorted(i.rule for i in result.warnings) == ["max-heading-depth", "section-meta"]


def test_template_compliance(write_files):
    root = write_files(
        {
            ".shirokuma/templates/overview.md": "# {{title}}\n## Purpose\n## Scope\n",
            "docs/a.md": "---\ntype: overview\n---\n# {{title}}\n## Purpose\n",
        }
    )
    config = _config(template_compliance={"enabled": True})
    result = Validator(config, root).validate(root / "docs")

    assert [i.message for i in result.errors] == [
        "Missing required section from template 'overview': Scope"
    ]
    assert [i.rule for i in result.warnings] == ["template-variable-substitution"]


def test_template_not_found(write_files):
    root = write_files({"docs/a.md": "---\ntemplate: missing\n---\n# A\n"})
    config = _config(template_compliance={"enabled": True, "severity": "warning"})
    result = Validator(config, root).validate(root / "docs")
    assert [i.message for i in result.warnings] == ["Template not found: missing.md"]


def test_is_internal_link():
    assert is_internal_link("guide.md")
    assert is_internal_link("./images/x.png")
    assert not is_internal_link("https://example.com/a.md")
    assert not is_internal_link("image.png")


def test_link_context_ellipses():
    line = "x" * 30 + "[a](a.md)" + "y" * 40
    start = line.index("[")
    context = link_context(line, start, start + len("[a](a.md)"))
    assert context.startswith("...")
    assert context.endswith("...")
    assert "[a](a.md)" in context


def test_empty_frontmatter_with_later_rule_is_valid(write_files):
    root = write_files({"docs/a.md": "---\n---\n# T\n\n---\n\nMore\n"})
    result = Validator(_config(), root).validate(root / "docs")
    assert result.valid
    assert result.errors == []
