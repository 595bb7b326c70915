"""
Guide Validation Engine.

This package provides layered validation for packaging guides:
- Structure Validation (teaching order, required stages, project layout)
- Snippet Validation (Python parses, tests assert, config matches package)
- Markdown Format Validation (rendered README shape)
"""

from .structure import StructureValidator, StructureValidationResult, StructureIssue
from .snippets import SnippetValidator, SnippetValidationResult, SnippetIssue
from .markdown_format import (
    MarkdownFormatValidator,
    MarkdownFormatResult,
    FrontmatterValidation,
    SectionValidation,
    SectionRequirement,
    validate_guide_md,
)
from .engine import ValidationEngine, ValidationResult

__all__ = [
    # Structure
    "StructureValidator",
    "StructureValidationResult",
    "StructureIssue",
    # Snippets
    "SnippetValidator",
    "SnippetValidationResult",
    "SnippetIssue",
    # Markdown Format
    "MarkdownFormatValidator",
    "MarkdownFormatResult",
    "FrontmatterValidation",
    "SectionValidation",
    "SectionRequirement",
    "validate_guide_md",
    # Engine
    "ValidationEngine",
    "ValidationResult",
]
