"""
Regex-based scrapers for TypeScript sources: JSDoc, feature-map tags and
test annotations.
"""

from shirokuma_docs.parsers.feature_tags import FeatureMapItem, parse_feature_map_tags
from shirokuma_docs.parsers.jsdoc import JSDocInfo, extract_jsdocs_from_file, parse_jsdoc
from shirokuma_docs.parsers.test_annotations import (
    TestCase,
    extract_file_doc_comment,
    extract_test_cases,
)

__all__ = [
    "FeatureMapItem",
    "JSDocInfo",
    "TestCase",
    "extract_file_doc_comment",
    "extract_jsdocs_from_file",
    "extract_test_cases",
    "parse_feature_map_tags",
    "parse_jsdoc",
]
