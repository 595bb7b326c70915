"""
Markdown Format Validator

Validates rendered guide documents (README.md) for the shape a packaging
tutorial needs.

Format Requirements:
1. Frontmatter (required): name, version
2. Required Sections: Terminology, Test First, Example Module,
   Packaging Configuration, Build, Install
3. Recommended Sections: Publish, Glossary
4. Code fences must be balanced
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from ..models import GuideStage


class SectionRequirement(Enum):
    """Section requirement level."""
    REQUIRED = "required"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


@dataclass
class FrontmatterValidation:
    """Result of frontmatter validation."""
    valid: bool
    name: Optional[str] = None
    version: Optional[str] = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class SectionValidation:
    """Result of section validation."""
    name: str
    requirement: SectionRequirement
    present: bool
    line_number: Optional[int] = None
    content_length: int = 0
    has_content: bool = False
    has_code: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class MarkdownFormatResult:
    """Complete format validation result."""
    valid: bool
    package_name: str
    file_path: str
    frontmatter: FrontmatterValidation
    sections: list[SectionValidation] = field(default_factory=list)
    fence_errors: list[str] = field(default_factory=list)
    total_errors: int = 0
    total_warnings: int = 0
    compliance_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.valid,
            "package_name": self.package_name,
            "file_path": self.file_path,
            "frontmatter": {
                "valid": self.frontmatter.valid,
                "name": self.frontmatter.name,
                "version": self.frontmatter.version,
                "errors": self.frontmatter.errors,
                "warnings": self.frontmatter.warnings,
            },
            "sections": [
                {
                    "name": s.name,
                    "requirement": s.requirement.value,
                    "present": s.present,
                    "has_content": s.has_content,
                    "has_code": s.has_code,
                    "errors": s.errors,
                    "warnings": s.warnings,
                }
                for s in self.sections
            ],
            "fence_errors": self.fence_errors,
            "total_errors": self.total_errors,
            "total_warnings": self.total_warnings,
            "compliance_score": self.compliance_score,
        }

    def summary(self) -> str:
        """Generate human-readable summary."""
        lines = []
        status = "PASSED" if self.valid else "FAILED"
        lines.append(f"Guide Format Check: {status}")
        lines.append(f"  Package: {self.package_name}")
        lines.append(f"  File: {self.file_path}")
        lines.append(f"  Compliance Score: {self.compliance_score:.0%}")
        lines.append(f"  Errors: {self.total_errors}, Warnings: {self.total_warnings}")

        if self.frontmatter.errors:
            lines.append("\n  Frontmatter Errors:")
            for err in self.frontmatter.errors:
                lines.append(f"    - {err}")

        if self.fence_errors:
            lines.append("\n  Code Fence Errors:")
            for err in self.fence_errors:
                lines.append(f"    - {err}")

        missing_required = [s for s in self.sections
                           if s.requirement == SectionRequirement.REQUIRED and not s.present]
        if missing_required:
            lines.append("\n  Missing Required Sections:")
            for s in missing_required:
                lines.append(f"    - {s.name}")

        missing_recommended = [s for s in self.sections
                              if s.requirement == SectionRequirement.RECOMMENDED and not s.present]
        if missing_recommended:
            lines.append("\n  Missing Recommended Sections:")
            for s in missing_recommended:
                lines.append(f"    - {s.name}")

        return "\n".join(lines)


# Section definitions with requirements, in teaching order
SECTION_DEFINITIONS = {
    "Terminology": SectionRequirement.REQUIRED,
    "Test First": SectionRequirement.REQUIRED,
    "Example Module": SectionRequirement.REQUIRED,
    "Packaging Configuration": SectionRequirement.REQUIRED,
    "Build": SectionRequirement.REQUIRED,
    "Install": SectionRequirement.REQUIRED,
    "Publish": SectionRequirement.RECOMMENDED,
    "Glossary": SectionRequirement.RECOMMENDED,
}

# Sections whose body must include at least one fenced block
CODE_SECTIONS = {"Test First", "Example Module", "Packaging Configuration", "Build", "Install"}

# Maps lowercase alternative names to canonical section names
SECTION_ALIASES = {
    # Terminology alternatives
    "modules, packages and libraries": "Terminology",
    "concepts": "Terminology",
    "key terms": "Terminology",
    "background": "Terminology",
    # Test First alternatives
    "test-driven development": "Test First",
    "tdd": "Test First",
    "testing": "Test First",
    "write a failing test": "Test First",
    # Example Module alternatives
    "the module": "Example Module",
    "write the code": "Example Module",
    # Packaging Configuration alternatives
    "describe the package": "Packaging Configuration",
    "configuration": "Packaging Configuration",
    "pyproject.toml": "Packaging Configuration",
    "project layout": "Packaging Configuration",
    # Build alternatives
    "building": "Build",
    "distribution archives": "Build",
    # Install alternatives
    "installing": "Install",
    "installation": "Install",
    # Publish alternatives
    "publishing": "Publish",
    "distribution": "Publish",
    "upload": "Publish",
    # Glossary alternatives
    "terms": "Glossary",
    "definitions": "Glossary",
}

# Canonical section name for each stage, used when the guide itself is at hand
STAGE_SECTION_NAMES = {
    GuideStage.TERMINOLOGY: "Terminology",
    GuideStage.TEST_FIRST: "Test First",
    GuideStage.EXAMPLE_MODULE: "Example Module",
    GuideStage.PACKAGING_CONFIG: "Packaging Configuration",
    GuideStage.BUILD: "Build",
    GuideStage.INSTALL: "Install",
    GuideStage.PUBLISH: "Publish",
}

FENCE_PATTERN = re.compile(r"^\s*(```|~~~)")
NUMBER_PREFIX_PATTERN = re.compile(r"^\d+[.)]\s*")


class MarkdownFormatValidator:
    """
    Validator for rendered guide documents.

    Validates:
    1. Frontmatter presence and required fields (name, version)
    2. Required sections of the teaching sequence
    3. Recommended sections (Publish, Glossary)
    4. Balanced code fences and code in the hands-on sections
    """

    def __init__(self) -> None:
        """Initialize validator."""
        self.section_definitions = SECTION_DEFINITIONS.copy()
        self.section_aliases = SECTION_ALIASES.copy()

    def validate_file(self, file_path: str | Path) -> MarkdownFormatResult:
        """
        Validate a guide Markdown file.

        Args:
            file_path: Path to the README.md file

        Returns:
            MarkdownFormatResult with validation details
        """
        file_path = Path(file_path)

        if not file_path.exists():
            return MarkdownFormatResult(
                valid=False,
                package_name="unknown",
                file_path=str(file_path),
                frontmatter=FrontmatterValidation(
                    valid=False,
                    errors=[f"File not found: {file_path}"]
                ),
                total_errors=1,
            )

        content = file_path.read_text(encoding="utf-8")
        return self.validate_content(content, str(file_path))

    def validate_content(
        self,
        content: str,
        file_path: str = "README.md",
        heading_map: Optional[dict[str, str]] = None,
    ) -> MarkdownFormatResult:
        """
        Validate guide Markdown content.

        Args:
            content: Markdown content to validate
            file_path: File path for reporting
            heading_map: Lowercase heading text -> canonical section name.
                When given, only these headings count and the alias and
                partial-name matching used for hand-written files is skipped.

        Returns:
            MarkdownFormatResult with validation details
        """
        frontmatter = self._validate_frontmatter(content)
        fence_errors = self._validate_fences(content)
        sections = self._validate_sections(content, heading_map)

        total_errors = len(frontmatter.errors) + len(fence_errors)
        total_warnings = len(frontmatter.warnings)

        for section in sections:
            total_errors += len(section.errors)
            total_warnings += len(section.warnings)

        compliance_score = self._calculate_compliance_score(frontmatter, sections)

        valid = (
            frontmatter.valid
            and not fence_errors
            and all(s.present for s in sections if s.requirement == SectionRequirement.REQUIRED)
        )

        return MarkdownFormatResult(
            valid=valid,
            package_name=frontmatter.name or "unknown",
            file_path=file_path,
            frontmatter=frontmatter,
            sections=sections,
            fence_errors=fence_errors,
            total_errors=total_errors,
            total_warnings=total_warnings,
            compliance_score=compliance_score,
        )

    def _validate_frontmatter(self, content: str) -> FrontmatterValidation:
        """Validate frontmatter section."""
        errors = []
        warnings = []
        name = None
        version = None

        match = re.match(r'^---\s*\n(.*?)\n---', content, re.DOTALL)
        if not match:
            errors.append("Missing frontmatter block (--- ... ---)")
            return FrontmatterValidation(valid=False, errors=errors)

        frontmatter_content = match.group(1)

        name_match = re.search(r'^name:\s*["\']?([^"\'\n]+)["\']?\s*$',
                               frontmatter_content, re.MULTILINE)
        if name_match:
            name = name_match.group(1).strip()
        else:
            errors.append("Missing required field: name")

        version_match = re.search(r'^version:\s*["\']?([^"\'\n]+)["\']?\s*$',
                                  frontmatter_content, re.MULTILINE)
        if version_match:
            version = version_match.group(1).strip()
        else:
            errors.append("Missing required field: version")

        if not re.search(r'^description:', frontmatter_content, re.MULTILINE):
            warnings.append("No description in frontmatter")

        return FrontmatterValidation(
            valid=len(errors) == 0,
            name=name,
            version=version,
            errors=errors,
            warnings=warnings,
        )

    @staticmethod
    def _validate_fences(content: str) -> list[str]:
        """Check that every opened code fence is closed."""
        open_line = None
        for i, line in enumerate(content.split('\n'), 1):
            if FENCE_PATTERN.match(line):
                open_line = None if open_line else i
        if open_line:
            return [f"Code fence opened on line {open_line} is never closed"]
        return []

    def _validate_sections(
        self,
        content: str,
        heading_map: Optional[dict[str, str]] = None,
    ) -> list[SectionValidation]:
        """Validate required and recommended sections."""
        results = []
        sections_found: dict[str, tuple[int, list[str]]] = {}

        current_section = None
        in_fence = False

        for i, line in enumerate(content.split('\n'), 1):
            if FENCE_PATTERN.match(line):
                in_fence = not in_fence
            match = None if in_fence else re.match(r'^##\s+(.+?)\s*$', line)
            if match:
                normalized = self._normalize_section_name(match.group(1), heading_map)
                current_section = normalized
                if normalized and normalized not in sections_found:
                    sections_found[normalized] = (i, [])
            elif current_section and current_section in sections_found:
                sections_found[current_section][1].append(line)

        for section_name, requirement in self.section_definitions.items():
            present = section_name in sections_found
            line_number = None
            content_text = ""
            if present:
                line_number, body_lines = sections_found[section_name]
                content_text = '\n'.join(body_lines)

            has_content = len(content_text.strip()) > 10
            has_code = any(FENCE_PATTERN.match(body_line) for body_line in content_text.split('\n'))

            errors = []
            warnings = []

            if requirement == SectionRequirement.REQUIRED and not present:
                errors.append(f"Missing required section: {section_name}")
            elif requirement == SectionRequirement.RECOMMENDED and not present:
                warnings.append(f"Missing recommended section: {section_name}")
            elif present and not has_content:
                warnings.append(f"Section '{section_name}' appears empty or minimal")
            elif present and section_name in CODE_SECTIONS and not has_code:
                warnings.append(f"Section '{section_name}' has no code block")

            results.append(SectionValidation(
                name=section_name,
                requirement=requirement,
                present=present,
                line_number=line_number,
                content_length=len(content_text),
                has_content=has_content,
                has_code=has_code,
                errors=errors,
                warnings=warnings,
            ))

        return results

    def _normalize_section_name(
        self,
        name: str,
        heading_map: Optional[dict[str, str]] = None,
    ) -> Optional[str]:
        """Normalize section name to canonical form."""
        name_lower = NUMBER_PREFIX_PATTERN.sub("", name.lower().strip())

        if heading_map is not None:
            return heading_map.get(name.lower().strip(), heading_map.get(name_lower))

        for canonical in self.section_definitions:
            if canonical.lower() == name_lower:
                return canonical

        if name_lower in self.section_aliases:
            return self.section_aliases[name_lower]

        # Partial match, e.g. "Build the Package"
        for canonical in self.section_definitions:
            if canonical.lower() in name_lower:
                return canonical

        return None

    def _calculate_compliance_score(
        self,
        frontmatter: FrontmatterValidation,
        sections: list[SectionValidation]
    ) -> float:
        """Calculate overall compliance score (0.0 to 1.0)."""
        total_points = 0.0
        earned_points = 0.0

        # Frontmatter: 20 points
        total_points += 20
        if frontmatter.valid:
            earned_points += 20
        elif frontmatter.name or frontmatter.version:
            earned_points += 10

        for section in sections:
            if section.requirement == SectionRequirement.REQUIRED:
                weight, base = 12, 9
            elif section.requirement == SectionRequirement.RECOMMENDED:
                weight, base = 6, 4
            else:
                continue
            total_points += weight
            if section.present:
                earned_points += base
                if section.has_content:
                    earned_points += weight - base

        return earned_points / total_points if total_points > 0 else 0.0


def validate_guide_md(file_path: str | Path) -> MarkdownFormatResult:
    """
    Convenience function to validate a rendered guide file.

    Args:
        file_path: Path to the README.md file

    Returns:
        MarkdownFormatResult with validation details
    """
    validator = MarkdownFormatValidator()
    return validator.validate_file(file_path)
