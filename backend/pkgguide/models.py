"""
Pydantic models for packaging guides.

A guide is an ordered list of sections, each tied to one stage of the
teaching sequence, plus the package configuration, the illustrative
project layout and a glossary.
"""

from __future__ import annotations

import re
import shlex
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class GuideStage(str, Enum):
    """Stages of the teaching sequence."""

    TERMINOLOGY = "terminology"
    TEST_FIRST = "test_first"
    EXAMPLE_MODULE = "example_module"
    PACKAGING_CONFIG = "packaging_config"
    BUILD = "build"
    INSTALL = "install"
    PUBLISH = "publish"


STAGE_ORDER: List[GuideStage] = [
    GuideStage.TERMINOLOGY,
    GuideStage.TEST_FIRST,
    GuideStage.EXAMPLE_MODULE,
    GuideStage.PACKAGING_CONFIG,
    GuideStage.BUILD,
    GuideStage.INSTALL,
    GuideStage.PUBLISH,
]


class SnippetKind(str, Enum):
    """Kinds of code fragments embedded in a guide."""

    PYTHON = "python"
    TEST = "test"
    CONFIG = "config"
    SHELL = "shell"
    TREE = "tree"
    OUTPUT = "output"


FENCE_LANGUAGES = {
    SnippetKind.PYTHON: "python",
    SnippetKind.TEST: "python",
    SnippetKind.CONFIG: "toml",
    SnippetKind.SHELL: "bash",
    SnippetKind.TREE: "text",
    SnippetKind.OUTPUT: "text",
}


class ToolKind(str, Enum):
    """External tools the guide tells the reader to invoke."""

    TEST_RUNNER = "test_runner"
    BUILD = "build"
    INSTALLER = "installer"
    UPLOADER = "uploader"


DIST_NAME_PATTERN = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9._-]*[A-Za-z0-9])?$")
VERSION_PATTERN = re.compile(
    r"^\d+(\.\d+)*((a|b|rc)\d+)?(\.post\d+)?(\.dev\d+)?$"
)
SAFE_ARG_PATTERN = re.compile(r"^[\w@%+=:,./*-]+$")


def normalize_dist_name(name: str) -> str:
    """Lowercase a distribution name and collapse runs of -_. into -."""
    return re.sub(r"[-_.]+", "-", name).lower()


def dist_import_name(name: str) -> str:
    """Import package name for a distribution name."""
    return normalize_dist_name(name).replace("-", "_")


class PackageConfig(BaseModel):
    """The two-key package configuration: name and version."""

    name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not DIST_NAME_PATTERN.match(v):
            raise ValueError(
                f"'{v}' is not a valid distribution name "
                "(letters, digits, '.', '_' or '-', alphanumeric at both ends)"
            )
        return v

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: str) -> str:
        if not VERSION_PATTERN.match(v):
            raise ValueError(
                f"'{v}' is not a valid version (expected e.g. 0.1.0, 1.0rc1)"
            )
        return v

    def normalized_name(self) -> str:
        """Name as an index would compare it."""
        return normalize_dist_name(self.name)

    def import_name(self) -> str:
        """Name usable as a Python import package."""
        return dist_import_name(self.name)

    def to_toml(self, include_build_system: bool = False) -> str:
        lines = []
        if include_build_system:
            lines.append("[build-system]")
            lines.append('requires = ["setuptools>=61"]')
            lines.append('build-backend = "setuptools.build_meta"')
            lines.append("")
        lines.append("[project]")
        lines.append(f'name = "{self.name}"')
        lines.append(f'version = "{self.version}"')
        return "\n".join(lines) + "\n"


class LayoutEntry(BaseModel):
    """
    One path in the illustrative project tree.

    Directory paths end with '/'.
    """

    path: str = Field(..., min_length=1)
    description: Optional[str] = None

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.replace("\\", "/")
        if v.startswith("/"):
            raise ValueError(f"Layout path must be relative: {v}")
        parts = v.rstrip("/").split("/")
        if any(p in ("", "..", ".") for p in parts):
            raise ValueError(f"Layout path has an empty or parent segment: {v}")
        return v

    @property
    def is_dir(self) -> bool:
        return self.path.endswith("/")

    @property
    def parts(self) -> List[str]:
        return self.path.rstrip("/").split("/")


class ProjectLayout(BaseModel):
    """Illustrative directory layout of the example project."""

    root: str = Field(..., min_length=1)
    entries: List[LayoutEntry] = Field(default_factory=list)

    def has_path(self, path: str) -> bool:
        wanted = path.rstrip("/")
        for entry in self.entries:
            entry_path = entry.path.rstrip("/")
            if entry_path == wanted or entry_path.startswith(wanted + "/"):
                return True
        return False

    def files(self) -> List[LayoutEntry]:
        return [e for e in self.entries if not e.is_dir]

    def tree(self) -> str:
        """Render the layout as an ASCII tree, implying parent directories."""
        nested: dict = {}
        descriptions = {}
        for entry in self.entries:
            node = nested
            for part in entry.parts[:-1]:
                node = node.setdefault(part + "/", {})
            leaf = entry.parts[-1] + ("/" if entry.is_dir else "")
            node.setdefault(leaf, {})
            if entry.description:
                descriptions[entry.path.rstrip("/")] = entry.description

        lines = [self.root.rstrip("/") + "/"]

        def walk(node: dict, prefix: str, path_prefix: str) -> None:
            names = sorted(node, key=lambda n: (not n.endswith("/"), n))
            for i, name in enumerate(names):
                last = i == len(names) - 1
                connector = "└── " if last else "├── "
                full = path_prefix + name.rstrip("/")
                line = prefix + connector + name
                if full in descriptions:
                    line += f"  # {descriptions[full]}"
                lines.append(line)
                walk(node[name], prefix + ("    " if last else "│   "), full + "/")

        walk(nested, "", "")
        return "\n".join(lines)


class CodeSnippet(BaseModel):
    """An illustrative fragment shown in a section."""

    kind: SnippetKind
    code: str
    caption: Optional[str] = None
    filename: Optional[str] = None

    @property
    def language(self) -> str:
        return FENCE_LANGUAGES[self.kind]


class CommandStep(BaseModel):
    """A command line the reader types, with its narrated outcome."""

    tool: ToolKind
    argv: List[str] = Field(..., min_length=1)
    description: str = ""
    expected: Optional[str] = None

    def shell_line(self) -> str:
        # Globs such as dist/* stay unquoted so the shell expands them.
        return " ".join(
            arg if SAFE_ARG_PATTERN.match(arg) else shlex.quote(arg)
            for arg in self.argv
        )


class GlossaryTerm(BaseModel):
    term: str = Field(..., min_length=1)
    definition: str = Field(..., min_length=1)


class GuideSection(BaseModel):
    """One section of the guide."""

    stage: GuideStage
    title: str = Field(..., min_length=1)
    body: str = ""
    snippets: List[CodeSnippet] = Field(default_factory=list)
    commands: List[CommandStep] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.body.strip() or self.snippets or self.commands)


class Guide(BaseModel):
    """A complete packaging guide."""

    title: str = Field(..., min_length=1)
    summary: str = ""
    package: PackageConfig
    layout: ProjectLayout
    sections: List[GuideSection] = Field(default_factory=list)
    glossary: List[GlossaryTerm] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_names(self) -> "Guide":
        titles = [s.title.strip().lower() for s in self.sections]
        duplicates = sorted({t for t in titles if titles.count(t) > 1})
        if duplicates:
            raise ValueError(f"Duplicate section titles: {', '.join(duplicates)}")

        terms = [g.term.strip().lower() for g in self.glossary]
        duplicates = sorted({t for t in terms if terms.count(t) > 1})
        if duplicates:
            raise ValueError(f"Duplicate glossary terms: {', '.join(duplicates)}")
        return self

    def sections_for(self, stage: GuideStage) -> List[GuideSection]:
        return [s for s in self.sections if s.stage == stage]

    def stages(self) -> List[GuideStage]:
        return [s.stage for s in self.sections]
