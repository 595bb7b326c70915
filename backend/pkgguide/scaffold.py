"""
Scaffolding Module for pkgguide.

Writes the guide's example project to disk and runs pre-flight checks on
a project directory before the reader builds it.
"""

from __future__ import annotations

import hashlib
import json
import logging
import tomllib
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .content import sample_module_source, sample_test_source
from .models import Guide, dist_import_name
from .render import render_guide
from .settings import GuideSettings


logger = logging.getLogger(__name__)

MANIFEST_NAME = "scaffold.manifest.json"


@dataclass
class ScaffoldResult:
    """
    Result of writing an example project.

    Attributes:
        package_name: Distribution name of the project.
        version: Version written to the config file.
        root: Project directory.
        created_at: Creation timestamp.
        files: Relative paths of written files.
        checksums: SHA-256 checksum (first 16 hex chars) per file.
    """

    package_name: str
    version: str
    root: str
    created_at: str
    files: List[str] = field(default_factory=list)
    checksums: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "package_name": self.package_name,
            "version": self.version,
            "root": self.root,
            "created_at": self.created_at,
            "files": self.files,
            "checksums": self.checksums,
        }


@dataclass
class PreflightCheck:
    """
    A pre-flight check item.

    Attributes:
        name: Check name.
        passed: Whether the check passed.
        message: Status message.
        severity: Check severity (error, warning, info).
    """

    name: str
    passed: bool
    message: str
    severity: str = "error"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "passed": self.passed,
            "message": self.message,
            "severity": self.severity,
        }


@dataclass
class PreflightResult:
    """Result of pre-flight checks."""

    success: bool
    checks: List[PreflightCheck] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "success": self.success,
            "checks": [c.to_dict() for c in self.checks],
        }

    def summary(self) -> str:
        lines = [f"Pre-flight {'PASSED' if self.success else 'FAILED'}"]
        for check in self.checks:
            mark = "ok" if check.passed else check.severity
            lines.append(f"  [{mark}] {check.name}: {check.message}")
        return "\n".join(lines)


class ProjectScaffolder:
    """
    Writes the example project described by a guide.

    Files written:
    - the packaging config with name, version and a build-system table
    - src/<package>/__init__.py and src/<package>/sample.py
    - tests/test_sample.py
    - README.md rendered from the guide
    """

    def __init__(self, guide: Guide, settings: Optional[GuideSettings] = None):
        """Initialize with the guide to scaffold."""
        self.guide = guide
        self.settings = settings or GuideSettings()

    def planned_files(self) -> Dict[str, str]:
        """Relative path -> content for every file the scaffold writes."""
        package = self.guide.package
        import_name = package.import_name()
        return {
            self.settings.config_file: package.to_toml(include_build_system=True),
            f"src/{import_name}/__init__.py": f'__version__ = "{package.version}"\n',
            f"src/{import_name}/sample.py": sample_module_source(),
            "tests/test_sample.py": sample_test_source(import_name),
            "README.md": render_guide(self.guide),
        }

    def create(self, dest: Path, overwrite: bool = False) -> ScaffoldResult:
        """
        Write the project into dest.

        Args:
            dest: Target directory; created if missing.
            overwrite: Allow writing into a non-empty directory.

        Returns:
            ScaffoldResult describing what was written.

        Raises:
            FileExistsError: If dest is a file, or is non-empty and overwrite
                is False.
        """
        dest = Path(dest)
        if dest.exists() and not dest.is_dir():
            raise FileExistsError(f"Destination is not a directory: {dest}")
        if dest.exists() and any(dest.iterdir()) and not overwrite:
            raise FileExistsError(f"Destination is not empty: {dest}")

        dest.mkdir(parents=True, exist_ok=True)
        result = ScaffoldResult(
            package_name=self.guide.package.name,
            version=self.guide.package.version,
            root=str(dest),
            created_at=datetime.now(timezone.utc).isoformat(),
        )

        for rel_path, content in self.planned_files().items():
            target = dest / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            result.files.append(rel_path)
            result.checksums[rel_path] = self._compute_checksum(target)
            logger.debug(f"Wrote {target}")

        with open(dest / MANIFEST_NAME, "w", encoding="utf-8") as f:
            json.dump(result.to_dict(), f, indent=2)

        logger.info(f"Scaffolded {result.package_name} {result.version} in {dest}")
        return result

    @staticmethod
    def _compute_checksum(path: Path) -> str:
        """Compute SHA256 checksum of a file."""
        hasher = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                hasher.update(chunk)
        return hasher.hexdigest()[:16]


class PreflightChecker:
    """
    Performs pre-flight checks on a project before it is built.
    """

    def __init__(self, project_dir: Path, settings: Optional[GuideSettings] = None):
        """Initialize with the project directory."""
        self.project_dir = Path(project_dir)
        self.settings = settings or GuideSettings()

    def run_checks(self) -> PreflightResult:
        """
        Run all pre-flight checks.

        Returns:
            PreflightResult with all check results.
        """
        config, config_check = self._check_config_exists()
        checks = [config_check]
        checks.append(self._check_metadata(config))
        checks.append(self._check_package_dir(config))
        checks.append(self._check_tests_dir())
        checks.append(self._check_readme())
        checks.append(self._check_no_todos())

        # Errors fail, warnings are ok
        success = all(c.passed or c.severity != "error" for c in checks)
        return PreflightResult(success=success, checks=checks)

    def _check_config_exists(self):
        config_path = self.project_dir / self.settings.config_file
        if not config_path.exists():
            return None, PreflightCheck(
                name="config_exists",
                passed=False,
                message=f"{self.settings.config_file} not found",
            )
        try:
            with open(config_path, "rb") as f:
                config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            return None, PreflightCheck(
                name="config_exists",
                passed=False,
                message=f"{self.settings.config_file} is not valid TOML: {e}",
            )
        return config, PreflightCheck(
            name="config_exists",
            passed=True,
            message=f"{self.settings.config_file} exists",
        )

    @staticmethod
    def _project_table(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        project = (config or {}).get("project")
        return project if isinstance(project, dict) else {}

    def _check_metadata(self, config: Optional[Dict[str, Any]]) -> PreflightCheck:
        """Check that name and version are set."""
        project = self._project_table(config)
        missing = [k for k in ("name", "version") if not project.get(k)]
        if not missing:
            return PreflightCheck(
                name="metadata",
                passed=True,
                message=f"{project['name']} {project['version']}",
            )
        return PreflightCheck(
            name="metadata",
            passed=False,
            message=f"Missing project.{' and project.'.join(missing)}",
        )

    def _check_package_dir(self, config: Optional[Dict[str, Any]]) -> PreflightCheck:
        name = self._project_table(config).get("name")
        if not name:
            return PreflightCheck(
                name="package_dir",
                passed=False,
                message="Package name unknown",
                severity="warning",
            )
        import_name = dist_import_name(str(name))
        for candidate in (self.project_dir / "src" / import_name, self.project_dir / import_name):
            if (candidate / "__init__.py").exists():
                return PreflightCheck(
                    name="package_dir",
                    passed=True,
                    message=f"Package found at {candidate.relative_to(self.project_dir)}",
                )
        return PreflightCheck(
            name="package_dir",
            passed=False,
            message=f"No {import_name}/__init__.py under src/ or the project root",
        )

    def _check_tests_dir(self) -> PreflightCheck:
        tests_dir = self.project_dir / "tests"
        if tests_dir.is_dir() and any(tests_dir.glob("test_*.py")):
            return PreflightCheck(name="tests", passed=True, message="tests/ has test modules")
        return PreflightCheck(
            name="tests",
            passed=False,
            message="No test_*.py files in tests/ - write the tests first",
            severity="warning",
        )

    def _check_readme(self) -> PreflightCheck:
        if (self.project_dir / "README.md").exists():
            return PreflightCheck(name="readme", passed=True, message="README.md exists")
        return PreflightCheck(
            name="readme",
            passed=False,
            message="README.md not found - run 'pkgguide render'",
            severity="warning",
        )

    def _check_no_todos(self) -> PreflightCheck:
        """Check that no TODO markers remain in source files."""
        todo_count = 0
        for path in self.project_dir.rglob("*.py"):
            try:
                todo_count += path.read_text(encoding="utf-8").count("TODO")
            except (OSError, UnicodeDecodeError):
                logger.warning(f"Could not read {path}")
        if todo_count == 0:
            return PreflightCheck(name="no_todos", passed=True, message="No TODO markers found")
        return PreflightCheck(
            name="no_todos",
            passed=False,
            message=f"Found {todo_count} TODO markers",
            severity="warning",
        )


def scaffold_project(
    guide: Guide,
    dest: Path,
    overwrite: bool = False,
    settings: Optional[GuideSettings] = None,
) -> ScaffoldResult:
    """Convenience function to scaffold a guide's example project."""
    return ProjectScaffolder(guide, settings).create(dest, overwrite=overwrite)


def run_preflight_checks(
    project_dir: Path,
    settings: Optional[GuideSettings] = None,
) -> PreflightResult:
    """Convenience function to run pre-flight checks."""
    return PreflightChecker(project_dir, settings).run_checks()
