"""
Markdown documentation subsystem.

Validates, lints, analyzes, lists and builds a tree of Markdown documents
configured through the [md] table of shirokuma-docs.toml.
"""

from shirokuma_docs.md.analyzer import Analyzer
from shirokuma_docs.md.builder import Builder, BuildError
from shirokuma_docs.md.config import MdConfig, MdConfigError, load_md_config
from shirokuma_docs.md.linter import Linter, format_lint_report
from shirokuma_docs.md.lister import DocumentInfo, Lister, format_documents
from shirokuma_docs.md.token_optimizer import TokenOptimizer, format_optimization_report
from shirokuma_docs.md.types import AnalysisResult, BuildResult, Issue, LintResult, ValidationResult
from shirokuma_docs.md.validator import Validator

__all__ = [
    "AnalysisResult",
    "Analyzer",
    "BuildError",
    "BuildResult",
    "Builder",
    "DocumentInfo",
    "Issue",
    "LintResult",
    "Linter",
    "Lister",
    "MdConfig",
    "MdConfigError",
    "TokenOptimizer",
    "ValidationResult",
    "Validator",
    "format_documents",
    "format_lint_report",
    "format_optimization_report",
    "load_md_config",
]
