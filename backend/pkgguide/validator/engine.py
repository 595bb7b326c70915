"""
Validation Engine.

Combines all validation layers into a unified validation pipeline.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..loader import load_guide
from ..models import Guide
from ..render import GLOSSARY_HEADING, render_guide
from ..settings import GuideSettings
from .markdown_format import STAGE_SECTION_NAMES, MarkdownFormatResult, MarkdownFormatValidator
from .snippets import SnippetValidationResult, SnippetValidator
from .structure import StructureValidationResult, StructureValidator


logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """
    Combined result from all validation layers.

    Contains results from:
    - Structure Validation (teaching order, stages, layout)
    - Snippet Validation (Python, tests, config)
    - Markdown Format Validation (the rendered document)
    """

    valid: bool
    structure_result: Optional[StructureValidationResult] = None
    snippet_result: Optional[SnippetValidationResult] = None
    format_result: Optional[MarkdownFormatResult] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def total_errors(self) -> int:
        """Total number of errors across all layers."""
        count = len(self.errors)
        if self.structure_result:
            count += len(self.structure_result.errors)
        if self.snippet_result:
            count += self.snippet_result.total_errors
        if self.format_result:
            count += self.format_result.total_errors
        return count

    @property
    def total_warnings(self) -> int:
        """Total number of warnings across all layers."""
        count = len(self.warnings)
        if self.structure_result:
            count += len(self.structure_result.warnings)
        if self.snippet_result:
            count += self.snippet_result.total_warnings
        if self.format_result:
            count += self.format_result.total_warnings
        return count

    def summary(self) -> str:
        """Generate a summary of validation results."""
        lines = []
        status = "PASSED" if self.valid else "FAILED"
        lines.append(f"Validation {status}")
        lines.append(f"  Errors: {self.total_errors}")
        lines.append(f"  Warnings: {self.total_warnings}")

        if self.snippet_result:
            lines.append(f"  Snippets Checked: {self.snippet_result.checked}")
        if self.format_result:
            lines.append(f"  Format Score: {self.format_result.compliance_score:.0%}")

        for error in self.errors:
            lines.append(f"  - {error}")
        if self.structure_result:
            for issue in self.structure_result.issues:
                lines.append(f"  - [{issue.severity}] {issue}")
        if self.snippet_result:
            for issue in self.snippet_result.issues:
                lines.append(f"  - [{issue.severity}] {issue}")
        if self.format_result:
            frontmatter = self.format_result.frontmatter
            for err in frontmatter.errors + self.format_result.fence_errors:
                lines.append(f"  - [error] {err}")
            for warning in frontmatter.warnings:
                lines.append(f"  - [warning] {warning}")
            for section in self.format_result.sections:
                for err in section.errors:
                    lines.append(f"  - [error] {err}")
                for warning in section.warnings:
                    lines.append(f"  - [warning] {warning}")

        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "total_errors": self.total_errors,
            "total_warnings": self.total_warnings,
            "errors": self.errors,
            "warnings": self.warnings,
            "layers": {
                "structure": {
                    "valid": self.structure_result.valid,
                    "stages_found": self.structure_result.stages_found,
                    "missing_stages": self.structure_result.missing_stages,
                    "issues": [i.to_dict() for i in self.structure_result.issues],
                } if self.structure_result else None,
                "snippets": {
                    "valid": self.snippet_result.valid,
                    "checked": self.snippet_result.checked,
                    "issues": [i.to_dict() for i in self.snippet_result.issues],
                } if self.snippet_result else None,
                "format": self.format_result.to_dict() if self.format_result else None,
            },
        }


class ValidationEngine:
    """
    Runs every validation layer over a guide.

    Layers run independently; a failure in one does not stop the others.
    """

    def __init__(self, settings: Optional[GuideSettings] = None):
        self.settings = settings or GuideSettings()
        self.structure_validator = StructureValidator(self.settings)
        self.snippet_validator = SnippetValidator()
        self.format_validator = MarkdownFormatValidator()

    def validate(self, guide: Guide, strict: bool = False) -> ValidationResult:
        """
        Validate a guide.

        Args:
            guide: Guide to validate.
            strict: Treat warnings as failures.

        Returns:
            ValidationResult combining all layers.
        """
        structure_result = self.structure_validator.validate(guide)
        snippet_result = self.snippet_validator.validate(guide)
        format_result = self.format_validator.validate_content(
            render_guide(guide),
            file_path="<rendered>",
            heading_map=self._heading_map(guide),
        )

        result = ValidationResult(
            valid=structure_result.valid and snippet_result.valid and format_result.valid,
            structure_result=structure_result,
            snippet_result=snippet_result,
            format_result=format_result,
        )

        if strict and result.total_warnings:
            result.valid = False
            result.errors.append(f"Strict mode: {result.total_warnings} warnings")

        logger.info(
            f"Validated '{guide.title}': "
            f"{result.total_errors} errors, {result.total_warnings} warnings"
        )
        return result

    @staticmethod
    def _heading_map(guide: Guide) -> Dict[str, str]:
        """Map each rendered section title to its stage's canonical name."""
        heading_map = {
            section.title.strip().lower(): STAGE_SECTION_NAMES[section.stage]
            for section in guide.sections
        }
        if guide.glossary:
            heading_map[GLOSSARY_HEADING.lower()] = GLOSSARY_HEADING
        return heading_map

    def validate_file(self, path: Path, strict: bool = False) -> ValidationResult:
        """
        Load a guide from YAML and validate it.

        Load failures are reported as errors in the result.
        """
        try:
            guide = load_guide(path)
        except ValidationError as e:
            errors = [
                f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
                for err in e.errors()
            ]
            return ValidationResult(valid=False, errors=errors)
        except (FileNotFoundError, ValueError) as e:
            return ValidationResult(valid=False, errors=[str(e)])

        return self.validate(guide, strict=strict)
