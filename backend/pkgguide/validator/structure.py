"""
Structure Validator.

Checks that a guide follows the teaching sequence and that its layout
contains what the narrative refers to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..models import STAGE_ORDER, Guide, GuideStage
from ..settings import GuideSettings


@dataclass
class StructureIssue:
    """A single structural problem."""

    code: str
    message: str
    severity: str = "error"
    section: Optional[str] = None

    def __str__(self) -> str:
        where = f" [{self.section}]" if self.section else ""
        return f"{self.code}{where}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
            "section": self.section,
        }


@dataclass
class StructureValidationResult:
    """Result of structure validation."""

    valid: bool
    issues: List[StructureIssue] = field(default_factory=list)
    stages_found: List[str] = field(default_factory=list)
    missing_stages: List[str] = field(default_factory=list)

    @property
    def errors(self) -> List[StructureIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> List[StructureIssue]:
        return [i for i in self.issues if i.severity == "warning"]


class StructureValidator:
    """
    Validates guide structure.

    Checks:
    1. Sections appear in teaching order (stages never go backwards)
    2. Required stages are present (error), recommended ones too (warning)
    3. Layout contains the config file, a tests directory and the package
    4. Sections are not empty
    """

    def __init__(self, settings: Optional[GuideSettings] = None):
        self.settings = settings or GuideSettings()

    def validate(self, guide: Guide) -> StructureValidationResult:
        issues: List[StructureIssue] = []

        issues.extend(self._check_order(guide))
        missing, stage_issues = self._check_stages(guide)
        issues.extend(stage_issues)
        issues.extend(self._check_layout(guide))
        issues.extend(self._check_empty_sections(guide))

        return StructureValidationResult(
            valid=not any(i.severity == "error" for i in issues),
            issues=issues,
            stages_found=[s.value for s in guide.stages()],
            missing_stages=missing,
        )

    def _check_order(self, guide: Guide) -> List[StructureIssue]:
        issues = []
        position = {stage: i for i, stage in enumerate(STAGE_ORDER)}
        highest = -1
        previous = None
        for section in guide.sections:
            current = position[section.stage]
            if current < highest:
                issues.append(StructureIssue(
                    code="STAGE_ORDER",
                    message=(
                        f"'{section.stage.value}' comes after "
                        f"'{previous.value}' in the teaching sequence"
                    ),
                    section=section.title,
                ))
            else:
                highest = current
                previous = section.stage
        return issues

    def _check_stages(self, guide: Guide):
        issues = []
        missing = []
        present = {s.value for s in guide.stages()}
        known = {s.value for s in GuideStage}

        for stage in self.settings.required_stages + self.settings.recommended_stages:
            if stage not in known:
                issues.append(StructureIssue(
                    code="UNKNOWN_STAGE",
                    message=f"Configured stage '{stage}' does not exist",
                    severity="warning",
                ))

        for stage in self.settings.required_stages:
            if stage in known and stage not in present:
                missing.append(stage)
                issues.append(StructureIssue(
                    code="MISSING_STAGE",
                    message=f"Missing required stage: {stage}",
                ))

        for stage in self.settings.recommended_stages:
            if stage in known and stage not in present:
                missing.append(stage)
                issues.append(StructureIssue(
                    code="MISSING_STAGE",
                    message=f"Missing recommended stage: {stage}",
                    severity="warning",
                ))

        return missing, issues

    def _check_layout(self, guide: Guide) -> List[StructureIssue]:
        issues = []
        layout = guide.layout
        import_name = guide.package.import_name()

        if not layout.has_path(self.settings.config_file):
            issues.append(StructureIssue(
                code="LAYOUT_CONFIG",
                message=f"Layout does not include {self.settings.config_file}",
            ))

        if not layout.has_path("tests"):
            issues.append(StructureIssue(
                code="LAYOUT_TESTS",
                message="Layout does not include a tests/ directory",
            ))

        if not (layout.has_path(f"src/{import_name}") or layout.has_path(import_name)):
            issues.append(StructureIssue(
                code="LAYOUT_PACKAGE",
                message=f"Layout does not include the package directory '{import_name}'",
            ))

        return issues

    @staticmethod
    def _check_empty_sections(guide: Guide) -> List[StructureIssue]:
        return [
            StructureIssue(
                code="EMPTY_SECTION",
                message="Section has no prose, snippets or commands",
                severity="warning",
                section=section.title,
            )
            for section in guide.sections
            if section.is_empty
        ]
