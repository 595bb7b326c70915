"""
Default guide content.

Builds the packaging tutorial in teaching order. Example code is quoted
from the sample module so the guide shows exactly the code under test.
"""

from __future__ import annotations

import ast
import inspect
from typing import List, Optional

from . import sample
from .commands import CommandBuilder
from .models import (
    CodeSnippet,
    GlossaryTerm,
    Guide,
    GuideSection,
    GuideStage,
    LayoutEntry,
    PackageConfig,
    ProjectLayout,
    SnippetKind,
    ToolKind,
)
from .settings import GuideSettings


DEFAULT_PACKAGE = PackageConfig(name="mypackage", version="0.1.0")
DEFAULT_REPOSITORY_URL = "https://github.com/example/mypackage.git"

MISSING_FUNCTION_OUTPUT = (
    "E   ImportError: cannot import name 'add_numbers' from '{import_name}.sample'"
)


def sample_module_source() -> str:
    """Source of the example module as the reader should write it, minus its docstring."""
    source = inspect.getsource(sample)
    body = ast.parse(source).body
    if (
        body
        and isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    ):
        source = "\n".join(source.splitlines()[body[0].end_lineno:])
    return source.strip("\n") + "\n"


def sample_test_source(import_name: str) -> str:
    """Test module the reader writes before the example module exists."""
    return (
        f"from {import_name}.sample import add_numbers, hello_world\n"
        "\n"
        "\n"
        "def test_add_numbers():\n"
        "    assert add_numbers(1, 1) == 2\n"
        "    assert add_numbers(1, -1) == 0\n"
        "\n"
        "\n"
        "def test_hello_world():\n"
        '    assert hello_world() == "Hello, World!"\n'
    )


def default_layout(package: PackageConfig, config_file: str = "pyproject.toml") -> ProjectLayout:
    import_name = package.import_name()
    return ProjectLayout(
        root=package.normalized_name(),
        entries=[
            LayoutEntry(path=f"src/{import_name}/__init__.py", description="marks the package"),
            LayoutEntry(path=f"src/{import_name}/sample.py", description="the example module"),
            LayoutEntry(path="tests/test_sample.py", description="tests, written first"),
            LayoutEntry(path=config_file, description="name and version"),
            LayoutEntry(path="README.md"),
        ],
    )


def default_glossary() -> List[GlossaryTerm]:
    return [
        GlossaryTerm(
            term="Module",
            definition="A single .py file whose functions and classes can be imported.",
        ),
        GlossaryTerm(
            term="Package",
            definition="A directory of modules with an __init__.py, installable and shareable as a unit.",
        ),
        GlossaryTerm(
            term="Library",
            definition="One or more packages published for other projects to reuse.",
        ),
        GlossaryTerm(
            term="Build artifact",
            definition="A distributable archive (sdist or wheel) produced by the build tool in dist/.",
        ),
        GlossaryTerm(
            term="Editable install",
            definition="An install that points at the source tree, so edits take effect without reinstalling.",
        ),
        GlossaryTerm(
            term="Test runner",
            definition="The tool that discovers test_ functions, runs them and reports pass or fail.",
        ),
    ]


def build_default_guide(
    package: Optional[PackageConfig] = None,
    settings: Optional[GuideSettings] = None,
    repository_url: str = DEFAULT_REPOSITORY_URL,
) -> Guide:
    """
    Assemble the packaging tutorial.

    Args:
        package: Name and version of the example package.
        settings: Tool names used in the narrated commands.
        repository_url: Remote repository shown in the install-from-URL step.

    Returns:
        A Guide with one section per stage, in teaching order.
    """
    package = package or DEFAULT_PACKAGE
    settings = settings or GuideSettings()
    commands = CommandBuilder(settings)
    import_name = package.import_name()
    layout = default_layout(package, settings.config_file)

    sections = [
        GuideSection(
            stage=GuideStage.TERMINOLOGY,
            title="Modules, Packages and Libraries",
            body=(
                "A module is one Python file. A package groups modules in a "
                "directory so they can be imported together, and a library is "
                "a package (or several) published for others to install. "
                "This guide builds a small package from an empty directory "
                "to something anyone can install."
            ),
        ),
        GuideSection(
            stage=GuideStage.TEST_FIRST,
            title="Write the Test First",
            body=(
                "Before writing any code, describe what it should do in a test. "
                "Run the test runner with no arguments. It will fail and report "
                "that the function does not exist yet. That failure tells you "
                "what to write next."
            ),
            snippets=[
                CodeSnippet(
                    kind=SnippetKind.TEST,
                    code=sample_test_source(import_name),
                    filename="tests/test_sample.py",
                ),
                CodeSnippet(
                    kind=SnippetKind.OUTPUT,
                    code=MISSING_FUNCTION_OUTPUT.format(import_name=import_name),
                    caption="The first run fails",
                ),
            ],
            commands=[
                commands.step(
                    ToolKind.TEST_RUNNER,
                    commands.test_command(),
                    description="Run the tests from the project root.",
                    expected="The run fails: the function does not exist.",
                ),
            ],
        ),
        GuideSection(
            stage=GuideStage.EXAMPLE_MODULE,
            title="Write the Example Module",
            body=(
                "Now write just enough code to make the test pass. Run the "
                "test runner again and every test should pass."
            ),
            snippets=[
                CodeSnippet(
                    kind=SnippetKind.PYTHON,
                    code=sample_module_source(),
                    filename=f"src/{import_name}/sample.py",
                ),
            ],
            commands=[
                commands.step(
                    ToolKind.TEST_RUNNER,
                    commands.test_command(),
                    expected="All tests pass.",
                ),
            ],
        ),
        GuideSection(
            stage=GuideStage.PACKAGING_CONFIG,
            title="Describe the Package",
            body=(
                f"The package is described by {settings.config_file} at the "
                "project root. Two keys are enough to start: the package name "
                "and its version string."
            ),
            snippets=[
                CodeSnippet(
                    kind=SnippetKind.TREE,
                    code=layout.tree(),
                    caption="Project layout",
                ),
                CodeSnippet(
                    kind=SnippetKind.CONFIG,
                    code=package.to_toml(include_build_system=True),
                    filename=settings.config_file,
                ),
            ],
        ),
        GuideSection(
            stage=GuideStage.BUILD,
            title="Build the Package",
            body=(
                "The build tool reads the configuration and writes distributable "
                "archives into dist/."
            ),
            commands=[
                commands.step(
                    ToolKind.BUILD,
                    commands.build_command(),
                    expected=(
                        f"dist/ contains {import_name}-{package.version}.tar.gz and "
                        f"{import_name}-{package.version}-py3-none-any.whl."
                    ),
                ),
            ],
        ),
        GuideSection(
            stage=GuideStage.INSTALL,
            title="Install the Package",
            body=(
                "Install from the project directory, or in editable mode while "
                "you keep working on it. Once pushed to a repository, it can be "
                "installed straight from its URL."
            ),
            commands=[
                commands.step(
                    ToolKind.INSTALLER,
                    commands.install_command("."),
                    description="Install from the local path.",
                ),
                commands.step(
                    ToolKind.INSTALLER,
                    commands.install_command(".", editable=True),
                    description="Install in editable mode.",
                ),
                commands.step(
                    ToolKind.INSTALLER,
                    commands.install_from_url(repository_url),
                    description="Install from a remote repository.",
                    expected=f"`import {import_name}` works from any directory.",
                ),
            ],
        ),
        GuideSection(
            stage=GuideStage.PUBLISH,
            title="Publish the Package",
            body=(
                "Upload the archives in dist/ to a package index so others can "
                "install the package by name."
            ),
            commands=[
                commands.step(
                    ToolKind.UPLOADER,
                    commands.upload_command(),
                    expected=f"{settings.installer} install {package.name} works for everyone.",
                ),
            ],
        ),
    ]

    return Guide(
        title=f"Packaging {package.name}: From Module to Library",
        summary=(
            "A walkthrough of modules, packages and libraries, test-driven "
            "development, and building, installing and publishing a package."
        ),
        package=package,
        layout=layout,
        sections=sections,
        glossary=default_glossary(),
    )
