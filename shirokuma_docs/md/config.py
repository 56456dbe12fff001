"""
Configuration schema for the markdown subsystem ([md] table).
"""

from __future__ import annotations

import logging
from pathlib import Path
import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class MdConfigError(Exception):
    """Raised when the [md] configuration is invalid."""


# --- Directories & build ---


class Directories(BaseModel):
    source: str = "docs"
    output: str = "dist"
    config: str = ".shirokuma"
    templates: str | None = None


class FrontmatterOptions(BaseModel):
    strip: bool = True


class TocOptions(BaseModel):
    enabled: bool = False
    depth: int = Field(default=3, ge=1, le=6)
    title: str = "Table of Contents"


class Optimizations(BaseModel):
    remove_internal_links: bool = False
    normalize_whitespace: bool = True
    normalize_headings: bool = False
    heading_separator: str = " / "
    remove_comments: bool = False
    remove_badges: bool = False
    remove_duplicates: bool = False
    remove_blockquotes: bool = False


class BuildOptions(BaseModel):
    default_output: str = "dist/shirokuma-docs.md"
    include: list[str] = Field(default_factory=lambda: ["**/*.md"])
    exclude: list[str] = Field(default_factory=list)
    frontmatter: FrontmatterOptions = Field(default_factory=FrontmatterOptions)
    toc: TocOptions = Field(default_factory=TocOptions)
    file_separator: str = "\n\n---\n\n"
    sort: Literal["path", "custom"] = "path"
    strip_section_meta: bool = True
    strip_heading_numbers: bool = False
    optimizations: Optimizations = Field(default_factory=Optimizations)


class SortOrderEntry(BaseModel):
    pattern: str


# --- Validation ---


class FrontmatterField(BaseModel):
    name: str
    values: list[str] = Field(default_factory=list)
    format: str | None = None


class ForbiddenPattern(BaseModel):
    pattern: str
    message: str


class TemplateCompliance(BaseModel):
    enabled: bool = False
    check_required_sections: bool = True
    check_variable_substitution: bool = True
    severity: Literal["error", "warning"] = "error"


class ValidationOptions(BaseModel):
    required_frontmatter: list[str] = Field(default_factory=list)
    frontmatter_fields: list[FrontmatterField] = Field(default_factory=list)
    forbidden_patterns: list[ForbiddenPattern] = Field(default_factory=list)
    no_internal_links: bool = True
    check_links: bool = False
    template_compliance: TemplateCompliance = Field(
        default_factory=TemplateCompliance
    )


# --- Lint & list ---


class FileNamingRule(BaseModel):
    pattern: str
    message: str = "File name does not match the naming convention"

    @field_validator("pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid regex {value!r}: {e}") from e
        return value


class ConsistentStructure(BaseModel):
    enabled: bool = False
    directory_threshold: int = 4
    overview_naming: str = "overview.md"


class LintOptions(BaseModel):
    builtin_rules: dict[str, bool] = Field(default_factory=dict)
    file_naming: FileNamingRule | None = None
    consistent_structure: ConsistentStructure = Field(
        default_factory=ConsistentStructure
    )

    def rule_enabled(self, rule_id: str) -> bool:
        # Rules are opt-out: only an explicit false disables them
        return self.builtin_rules.get(rule_id, True) is not False


class ListOptions(BaseModel):
    default_format: Literal["simple", "tree", "detailed", "markdown", "json"] = (
        "markdown"
    )
    include_stats: bool = True
    group_by: Literal["layer", "type", "category", "none"] = "layer"
    sort_by: Literal["path", "layer", "title"] = "path"


class MdConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    directories: Directories = Field(default_factory=Directories)
    build: BuildOptions = Field(default_factory=BuildOptions)
    sort_order: list[SortOrderEntry] = Field(default_factory=list)
    validation: ValidationOptions = Field(default_factory=ValidationOptions)
    lint: LintOptions = Field(default_factory=LintOptions)
    # TOML key is [md.list]; renamed so the builtin stays usable in annotations
    listing: ListOptions = Field(default_factory=ListOptions, alias="list")

    def source_dir(self, repo_root: Path) -> Path:
        return (repo_root / self.directories.source).resolve()

    def templates_dir(self, repo_root: Path) -> Path:
        if self.directories.templates:
            return (repo_root / self.directories.templates).resolve()
        return (repo_root / self.directories.config / "templates").resolve()


def load_md_config(toml_data: dict[str, Any]) -> MdConfig:
    """
    Build an MdConfig from the parsed shirokuma-docs.toml data.

    Args:
        toml_data: Full parsed TOML dict (the [md] table is optional)

    Returns:
        Validated MdConfig, with defaults for anything not configured

    Raises:
        MdConfigError: If the [md] table has invalid values
    """
    section = toml_data.get("md", {})
    if not isinstance(section, dict):
        raise MdConfigError("[md] must be a table")

    try:
        config = MdConfig.model_validate(section)
    except ValidationError as e:
        raise MdConfigError(f"Invalid [md] configuration: {e}") from e

    logger.debug(
        f"Loaded md config: source={config.directories.source}, "
        f"sort={config.build.sort}"
    )
    return config
