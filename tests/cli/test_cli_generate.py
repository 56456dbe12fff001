"""
CLI tests for the generate command group.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from shirokuma_docs.main import app

runner = CliRunner()


def metric(covered, total):
    return {"total": total, "covered": covered, "pct": round(covered / total * 100, 2)}


COVERAGE = {
    "total": {},
    "src/a.ts": {m: metric(9, 10) for m in ("lines", "statements", "functions", "branches")},
    "src/b.ts": {m: metric(5, 10) for m in ("lines", "statements", "functions", "branches")},
}


@pytest.fixture
def project(write_files, tmp_path: Path) -> Path:
    (tmp_path / ".git").mkdir()
    return write_files(
        {
            "shirokuma-docs.toml": '[project]\nname = "Demo"\n',
            "coverage/coverage-summary.json": json.dumps(COVERAGE),
        }
    )


def test_coverage_summary_passes_without_thresholds(project: Path):
    result = runner.invoke(app, ["generate", "coverage"])
    assert result.exit_code == 0, result.output
    assert "Lines:      14/20 (70%)" in result.stdout


def test_coverage_fail_under(project: Path):
    result = runner.invoke(app, ["generate", "coverage", "--fail-under", "80"])
    assert result.exit_code == 1
    assert "Coverage below threshold: lines: 70% < 80%" in result.stderr


def test_coverage_thresholds_from_config(project: Path):
    (project / "shirokuma-docs.toml").write_text(
        '[coverage]\nthresholds = { lines = 60, branches = 75 }\n'
    )
    result = runner.invoke(app, ["generate", "coverage", "-f", "json"])
    assert result.exit_code == 1
    assert json.loads(result.stdout)["total"]["lines"]["pct"] == 70
    assert "branches: 70% < 75%" in result.stderr
    assert "lines:" not in result.stderr


def test_coverage_html_defaults_to_portal(project: Path):
    result = runner.invoke(app, ["generate", "coverage", "-f", "html"])
    assert result.exit_code == 0, result.output
    html = (project / "docs" / "portal" / "coverage.html").read_text()
    assert "Demo Coverage" in html


def test_coverage_missing_summary(tmp_path: Path):
    (tmp_path / ".git").mkdir()
    result = runner.invoke(app, ["generate", "coverage"])
    assert result.exit_code == 1
    assert "Coverage summary not found" in result.stderr


def test_coverage_rejects_unknown_format(project: Path):
    result = runner.invoke(app, ["generate", "coverage", "-f", "xml"])
    assert result.exit_code == 1
    assert "Unknown format: xml" in result.stderr


def test_test_cases_writes_catalogue(project: Path, write_files):
    write_files(
        {
            "src/math.test.ts": 'describe("add", () => {\n  it("adds numbers", () => {})\n})\n',
            "tests/e2e/home.spec.ts": 'test("loads", async () => {\n})\n',
        }
    )
    result = runner.invoke(app, ["generate", "test-cases", "-o", "out"])
    assert result.exit_code == 0, result.output
    assert "Jest: 1 tests in 1 files" in result.stdout
    markdown = (project / "out" / "test-cases.md").read_text()
    assert "- [ ] adds numbers (L2)" in markdown
    data = json.loads((project / "docs" / "portal" / "test-cases.json").read_text())
    assert data["summary"]["playwright_tests"] == 1


def test_feature_map_writes_json(project: Path, write_files):
    write_files(
        {
            "apps/web/app/page.tsx": "/**\n * @screen HomeScreen\n * @feature Home\n */\nexport default function Page() {}\n",
        }
    )
    result = runner.invoke(app, ["generate", "feature-map"])
    assert result.exit_code == 0, result.output
    data = json.loads((project / "docs" / "generated" / "feature-map.json").read_text())
    assert [s["name"] for s in data["features"]["Home"]["screens"]] == ["HomeScreen"]
    assert (project / "docs" / "portal" / "feature-map.html").exists()


def test_jsdoc_prints_exported_functions(write_files, tmp_path: Path):
    write_files(
        {
            "src/posts.ts": "/**\n * Create a post\n * @param title - Post title\n */\nexport function createPost(title: string) {}\n",
        }
    )
    result = runner.invoke(app, ["generate", "jsdoc", "src/posts.ts"])
    assert result.exit_code == 0, result.output
    docs = json.loads(result.stdout)
    assert [d["name"] for d in docs] == ["createPost"]


def test_jsdoc_missing_file():
    result = runner.invoke(app, ["generate", "jsdoc", "nope.ts"])
    assert result.exit_code == 1
    assert "File not found: nope.ts" in result.stderr
