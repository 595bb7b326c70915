"""
Tests for pkgguide validators.
"""

import pytest

from backend.pkgguide.content import build_default_guide
from backend.pkgguide.models import (
    CodeSnippet,
    GuideSection,
    GuideStage,
    LayoutEntry,
    PackageConfig,
    ProjectLayout,
    SnippetKind,
)
from backend.pkgguide.render import render_guide
from backend.pkgguide.settings import GuideSettings
from backend.pkgguide.validator import (
    MarkdownFormatValidator,
    SectionRequirement,
    SnippetValidator,
    StructureValidator,
    ValidationEngine,
    validate_guide_md,
)


@pytest.fixture
def guide():
    return build_default_guide()


def replace_sections(guide, sections):
    return guide.model_copy(update={"sections": sections})


class TestStructureValidator:
    """Tests for the structure layer."""

    def test_default_guide_is_valid(self, guide):
        result = StructureValidator().validate(guide)
        assert result.valid
        assert result.issues == []
        assert result.stages_found[0] == "terminology"

    def test_out_of_order_section(self, guide):
        """Test a stage that goes backwards is an error."""
        sections = list(guide.sections)
        sections[1], sections[4] = sections[4], sections[1]
        result = StructureValidator().validate(replace_sections(guide, sections))
        assert not result.valid
        assert any(i.code == "STAGE_ORDER" for i in result.errors)

    def test_missing_required_stage(self, guide):
        sections = [s for s in guide.sections if s.stage != GuideStage.BUILD]
        result = StructureValidator().validate(replace_sections(guide, sections))
        assert not result.valid
        assert "build" in result.missing_stages
        assert any("Missing required stage: build" in i.message for i in result.errors)

    def test_missing_recommended_stage_is_warning(self, guide):
        sections = [s for s in guide.sections if s.stage != GuideStage.PUBLISH]
        result = StructureValidator().validate(replace_sections(guide, sections))
        assert result.valid
        assert [w.code for w in result.warnings] == ["MISSING_STAGE"]

    def test_unknown_configured_stage(self, guide):
        settings = GuideSettings(recommended_stages=["publish", "celebrate"])
        result = StructureValidator(settings).validate(guide)
        assert result.valid
        assert any(w.code == "UNKNOWN_STAGE" for w in result.warnings)

    def test_layout_checks(self, guide):
        """Test layout must include config, tests and the package."""
        layout = ProjectLayout(root="x", entries=[LayoutEntry(path="README.md")])
        result = StructureValidator().validate(guide.model_copy(update={"layout": layout}))
        codes = {i.code for i in result.errors}
        assert codes == {"LAYOUT_CONFIG", "LAYOUT_TESTS", "LAYOUT_PACKAGE"}

    def test_flat_layout_package(self, guide):
        """Test a package at the project root counts too."""
        layout = ProjectLayout(
            root="mypackage",
            entries=[
                LayoutEntry(path="mypackage/__init__.py"),
                LayoutEntry(path="tests/"),
                LayoutEntry(path="pyproject.toml"),
            ],
        )
        result = StructureValidator().validate(guide.model_copy(update={"layout": layout}))
        assert result.valid

    def test_empty_section_warning(self, guide):
        sections = list(guide.sections) + [
            GuideSection(stage=GuideStage.PUBLISH, title="Afterword"),
        ]
        result = StructureValidator().validate(replace_sections(guide, sections))
        assert result.valid
        assert any(w.code == "EMPTY_SECTION" and w.section == "Afterword" for w in result.warnings)


class TestSnippetValidator:
    """Tests for the snippet layer."""

    def check(self, kind, code, package=None):
        package = package or PackageConfig(name="demo", version="0.1.0")
        return SnippetValidator().check_snippet(CodeSnippet(kind=kind, code=code), package)

    def test_default_guide_snippets(self, guide):
        result = SnippetValidator().validate(guide)
        assert result.valid
        assert result.checked == 5
        assert result.issues == []

    def test_python_syntax_error(self):
        issues = self.check(SnippetKind.PYTHON, "def add(a, b)\n    return a + b\n")
        assert len(issues) == 1
        message, severity, line = issues[0]
        assert message.startswith("Invalid Python")
        assert severity == "error"
        assert line == 1

    def test_test_without_assertions(self):
        issues = self.check(SnippetKind.TEST, "x = 1\n")
        assert issues == [("Test snippet has no test_ function or assert", "error", None)]

    def test_test_function_without_assert(self):
        issues = self.check(SnippetKind.TEST, "def test_it():\n    pass\n")
        assert issues[0][1] == "warning"

    def test_bare_assert_is_enough(self):
        assert self.check(SnippetKind.TEST, "assert 1 + 1 == 2\n") == []

    def test_undefined_name(self):
        """Test a name used without an import is an error."""
        code = "def greet(name: Optional[str] = None):\n    return name\n"
        issues = self.check(SnippetKind.PYTHON, code)
        assert issues == [("Name 'Optional' is used but never defined or imported", "error", 1)]

    def test_defined_names_pass(self):
        code = (
            "import os.path\n"
            "from typing import Optional as Opt\n"
            "\n"
            "def join(parts: Opt[list] = None):\n"
            "    try:\n"
            "        total = [p for p in parts or []]\n"
            "    except TypeError as e:\n"
            "        raise ValueError(str(e))\n"
            "    return os.path.join(*total)\n"
        )
        assert self.check(SnippetKind.PYTHON, code) == []

    def test_star_import_skips_name_check(self):
        assert self.check(SnippetKind.PYTHON, "from typing import *\nx: Optional[int] = None\n") == []

    def test_test_snippet_name_check(self):
        issues = self.check(SnippetKind.TEST, "def test_it():\n    assert add_numbers(1, 1) == 2\n")
        assert [i[0] for i in issues] == [
            "Name 'add_numbers' is used but never defined or imported",
        ]

    def test_empty_snippet(self):
        assert self.check(SnippetKind.SHELL, "   ")[0][0] == "Snippet is empty"

    def test_config_matches_package(self):
        code = '[project]\nname = "demo"\nversion = "0.1.0"\n'
        assert self.check(SnippetKind.CONFIG, code) == []

    def test_config_version_mismatch(self):
        code = '[project]\nname = "demo"\nversion = "0.2.0"\n'
        issues = self.check(SnippetKind.CONFIG, code)
        assert len(issues) == 1
        assert "project.version is '0.2.0'" in issues[0][0]

    def test_config_missing_key(self):
        issues = self.check(SnippetKind.CONFIG, '[project]\nname = "demo"\n')
        assert issues == [("Config snippet is missing project.version", "error", None)]

    def test_config_invalid_toml(self):
        issues = self.check(SnippetKind.CONFIG, "[project\nname = demo\n")
        assert issues[0][0].startswith("Invalid TOML")

    def test_config_without_project_table(self):
        issues = self.check(SnippetKind.CONFIG, '[tool.other]\nx = 1\n')
        assert issues[0][0] == "Config snippet has no [project] table"

    def test_issue_location(self, guide):
        bad = GuideSection(
            stage=GuideStage.PUBLISH,
            title="Extra",
            snippets=[CodeSnippet(kind=SnippetKind.PYTHON, code="def (:\n")],
        )
        result = SnippetValidator().validate(
            replace_sections(guide, list(guide.sections) + [bad])
        )
        assert not result.valid
        assert result.total_errors == 1
        assert result.issues[0].section == "Extra"
        assert result.issues[0].index == 0


class TestMarkdownFormatValidator:
    """Tests for the rendered document layer."""

    def test_rendered_default_guide(self, guide):
        result = MarkdownFormatValidator().validate_content(render_guide(guide))
        assert result.valid
        assert result.package_name == "mypackage"
        assert result.frontmatter.version == "0.1.0"
        assert result.total_errors == 0
        assert result.total_warnings == 0
        assert result.compliance_score == pytest.approx(1.0)
        assert all(s.present for s in result.sections)

    def test_missing_frontmatter(self):
        result = MarkdownFormatValidator().validate_content("# Title\n\n## Build\n\ntext\n")
        assert not result.valid
        assert "Missing frontmatter block (--- ... ---)" in result.frontmatter.errors

    def test_missing_version(self):
        content = "---\nname: demo\n---\n# Demo\n"
        result = MarkdownFormatValidator().validate_content(content)
        assert result.frontmatter.errors == ["Missing required field: version"]

    def test_missing_required_sections(self):
        content = "---\nname: demo\nversion: 1.0\ndescription: d\n---\n## Build\n\nRun the build tool.\n"
        result = MarkdownFormatValidator().validate_content(content)
        assert not result.valid
        missing = [s.name for s in result.sections
                   if s.requirement == SectionRequirement.REQUIRED and not s.present]
        assert "Terminology" in missing
        assert "Build" not in missing
        assert "Missing Required Sections" in result.summary()

    def test_aliases_and_numbering(self):
        validator = MarkdownFormatValidator()
        assert validator._normalize_section_name("3. Installation") == "Install"
        assert validator._normalize_section_name("TDD") == "Test First"
        assert validator._normalize_section_name("Build the Package") == "Build"
        assert validator._normalize_section_name("Contents") is None

    def test_heading_map_overrides_name_matching(self):
        """Test a heading map is the only source of section names."""
        content = (
            "---\nname: demo\nversion: 1.0\n---\n"
            "## 1. Testing Before Building\n\nWrite tests, then run them.\n"
            "## 2. Build\n\nRun the build tool now.\n"
        )
        heading_map = {"testing before building": "Test First"}
        result = MarkdownFormatValidator().validate_content(content, heading_map=heading_map)
        present = {s.name for s in result.sections if s.present}
        assert present == {"Test First"}

        validator = MarkdownFormatValidator()
        assert validator._normalize_section_name("Testing Before Building") == "Build"

    def test_unclosed_fence(self, guide):
        content = render_guide(guide) + "\n```python\nprint('x')\n"
        result = MarkdownFormatValidator().validate_content(content)
        assert not result.valid
        assert result.fence_errors

    def test_headings_inside_fences_ignored(self):
        content = (
            "---\nname: demo\nversion: 1.0\n---\n"
            "## Terminology\n\nSome words about modules.\n\n```text\n## Build\n```\n"
        )
        result = MarkdownFormatValidator().validate_content(content)
        build = [s for s in result.sections if s.name == "Build"][0]
        assert not build.present

    def test_section_without_code_warns(self):
        content = "---\nname: demo\nversion: 1.0\n---\n## Build\n\nRun the build tool now.\n"
        result = MarkdownFormatValidator().validate_content(content)
        build = [s for s in result.sections if s.name == "Build"][0]
        assert build.warnings == ["Section 'Build' has no code block"]

    def test_validate_missing_file(self, tmp_path):
        result = validate_guide_md(tmp_path / "README.md")
        assert not result.valid
        assert result.total_errors == 1


class TestValidationEngine:
    """Tests for the combined engine."""

    def test_default_guide(self, guide):
        result = ValidationEngine().validate(guide, strict=True)
        assert result.valid
        assert result.total_errors == 0
        assert result.total_warnings == 0
        assert "Validation PASSED" in result.summary()

    def test_strict_fails_on_warnings(self, guide):
        sections = [s for s in guide.sections if s.stage != GuideStage.PUBLISH]
        relaxed = ValidationEngine().validate(replace_sections(guide, sections))
        strict = ValidationEngine().validate(replace_sections(guide, sections), strict=True)
        assert relaxed.valid
        assert relaxed.total_warnings > 0
        assert not strict.valid
        assert strict.errors[0].startswith("Strict mode")

    def test_sections_mapped_by_stage(self, guide):
        """Test retitled sections are recognized by their stage, not their wording."""
        titles = {
            GuideStage.TERMINOLOGY: "Some Words First",
            GuideStage.TEST_FIRST: "Testing Before Building",
            GuideStage.EXAMPLE_MODULE: "Making It Pass",
            GuideStage.PACKAGING_CONFIG: "Naming Things",
            GuideStage.BUILD: "Making Archives",
            GuideStage.INSTALL: "Getting It Onto a Machine",
            GuideStage.PUBLISH: "Sharing",
        }
        sections = [s.model_copy(update={"title": titles[s.stage]}) for s in guide.sections]
        result = ValidationEngine().validate(replace_sections(guide, sections), strict=True)
        assert result.valid
        found = {s.name: s.line_number for s in result.format_result.sections if s.present}
        assert len(found) == 8
        assert found["Test First"] < found["Build"]

    def test_summary_lists_format_issues(self, guide):
        """Test format-layer errors and warnings appear in the summary."""
        sections = [s for s in guide.sections if s.stage != GuideStage.PUBLISH]
        result = ValidationEngine().validate(replace_sections(guide, sections))
        summary = result.summary()
        assert "  - [warning] Missing recommended section: Publish" in summary

        result = ValidationEngine().validate(guide.model_copy(update={"summary": ""}))
        assert "  - [warning] No description in frontmatter" in result.summary()

    def test_to_dict(self, guide):
        data = ValidationEngine().validate(guide).to_dict()
        assert data["valid"] is True
        assert set(data["layers"]) == {"structure", "snippets", "format"}
        assert data["layers"]["snippets"]["checked"] == 5

    def test_validate_missing_file(self, tmp_path):
        result = ValidationEngine().validate_file(tmp_path / "guide.yaml")
        assert not result.valid
        assert "not found" in result.errors[0]

    def test_validate_schema_error(self, tmp_path):
        path = tmp_path / "guide.yaml"
        path.write_text(
            "title: Demo\npackage:\n  name: demo\n  version: nope\nlayout:\n  root: demo\n",
            encoding="utf-8",
        )
        result = ValidationEngine().validate_file(path)
        assert not result.valid
        assert result.errors[0].startswith("package.version:")
        assert result.to_dict()["layers"]["structure"] is None
