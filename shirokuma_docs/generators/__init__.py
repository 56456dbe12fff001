"""
Static documentation generators: feature map, test-case catalogue and
coverage dashboard.
"""

from shirokuma_docs.generators.coverage import (
    CoverageError,
    calculate_total_coverage,
    check_thresholds,
    format_coverage_report,
    load_coverage_summary,
    parse_istanbul_coverage,
)
from shirokuma_docs.generators.feature_map import build_feature_map, scan_sources, write_feature_map
from shirokuma_docs.generators.test_cases import (
    collect_test_files,
    create_summary,
    extract_all,
    generate_markdown,
    write_test_cases,
)

__all__ = [
    "CoverageError",
    "build_feature_map",
    "calculate_total_coverage",
    "check_thresholds",
    "collect_test_files",
    "create_summary",
    "extract_all",
    "format_coverage_report",
    "generate_markdown",
    "load_coverage_summary",
    "parse_istanbul_coverage",
    "scan_sources",
    "write_feature_map",
    "write_test_cases",
]
