"""
Tests for the Istanbul coverage report.
"""

import json

import pytest

from shirokuma_docs.generators.coverage import (
    CoverageError,
    calculate_total_coverage,
    check_thresholds,
    format_coverage_report,
    get_coverage_status,
    load_coverage_summary,
    parse_istanbul_coverage,
)


def entry(lines, functions, branches=(0, 0)):
    def metric(covered, total):
        pct = round(covered / total * 100, 2) if total else 100
        return {"total": total, "covered": covered, "pct": pct}

    return {
        "lines": metric(*lines),
        "statements": metric(*lines),
        "functions": metric(*functions),
        "branches": metric(*branches),
    }


SUMMARY = {
    "total": entry((14, 20), (1, 3)),
    "src/a.ts": entry((9, 10), (1, 2)),
    "src/b.ts": entry((5, 10), (0, 1)),
    "src/empty.ts": {},
}


@pytest.fixture
def files():
    return parse_istanbul_coverage(SUMMARY)


def test_parse_skips_total_and_empty_entries(files):
    assert [f.path for f in files] == ["src/a.ts", "src/b.ts"]
    assert files[0].lines.pct == 90


def test_calculate_total_coverage(files):
    total = calculate_total_coverage(files)
    assert (total.lines.covered, total.lines.total, total.lines.pct) == (14, 20, 70)
    # 1/3 rounds half-up to 33
    assert total.functions.pct == 33
    assert total.branches.pct == 0


def test_check_thresholds(files):
    total = calculate_total_coverage(files)
    assert check_thresholds(total, {"lines": 70}) == (True, [])
    assert check_thresholds(total, {"lines": 80, "functions": 33.5, "branches": None}) == (
        False,
        ["lines: 70% < 80%", "functions: 33% < 33.5%"],
    )


def test_get_coverage_status():
    assert get_coverage_status(90) == "high"
    assert get_coverage_status(70) == "medium"
    assert get_coverage_status(69.9) == "low"


def test_summary_format(files):
    lines = format_coverage_report(files).splitlines()

    assert "        Coverage Summary" in lines
    assert "Lines:      14/20 (70%)" in lines
    assert "Functions:  1/3 (33%)" in lines
    assert "Total Files: 2" in lines
    # lowest line coverage first
    assert lines.index("[!!] src/b.ts") < lines.index("[OK] src/a.ts")
    assert "    Lines: 50%  Branches: 100%  Functions: 0%" in lines


def test_summary_truncates_file_list():
    data = {f"src/f{i}.ts": entry((i, 20), (1, 1)) for i in range(12)}
    text = format_coverage_report(parse_istanbul_coverage(data))
    assert "... and 2 more files" in text


def test_json_format(files):
    data = json.loads(format_coverage_report(files, "json"))
    assert data["total"]["lines"] == {"total": 20, "covered": 14, "pct": 70}
    assert [f["path"] for f in data["files"]] == ["src/a.ts", "src/b.ts"]


def test_html_format(files):
    html = format_coverage_report(files, "html", "Demo")
    assert "Demo Coverage" in html
    assert "<code>src/b.ts</code>" in html
    assert "70%" in html


def test_load_coverage_summary(tmp_path):
    path = tmp_path / "coverage-summary.json"
    with pytest.raises(CoverageError, match="Coverage summary not found"):
        load_coverage_summary(path)

    path.write_text("{not json")
    with pytest.raises(CoverageError, match="Invalid coverage summary"):
        load_coverage_summary(path)

    path.write_text("[]")
    with pytest.raises(CoverageError, match="expected an object"):
        load_coverage_summary(path)

    path.write_text(json.dumps(SUMMARY))
    assert len(load_coverage_summary(path)) == 2
