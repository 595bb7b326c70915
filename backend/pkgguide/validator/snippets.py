"""
Snippet Validator.

Makes sure the code shown to the reader is code that would actually work:
Python parses and defines every name it uses, tests assert something,
and config snippets are TOML that matches the guide's package.
"""

from __future__ import annotations

import ast
import builtins
import tomllib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..models import CodeSnippet, Guide, PackageConfig, SnippetKind


@dataclass
class SnippetIssue:
    """A problem found in one snippet."""

    section: str
    index: int
    kind: str
    message: str
    severity: str = "error"
    line: Optional[int] = None

    def __str__(self) -> str:
        where = f"{self.section}#{self.index}"
        if self.line:
            where += f":{self.line}"
        return f"{where} ({self.kind}): {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "section": self.section,
            "index": self.index,
            "kind": self.kind,
            "message": self.message,
            "severity": self.severity,
            "line": self.line,
        }


@dataclass
class SnippetValidationResult:
    """Result of snippet validation."""

    valid: bool
    checked: int = 0
    issues: List[SnippetIssue] = field(default_factory=list)

    @property
    def total_errors(self) -> int:
        return sum(1 for i in self.issues if i.severity == "error")

    @property
    def total_warnings(self) -> int:
        return sum(1 for i in self.issues if i.severity == "warning")


def _undefined_names(tree: ast.AST) -> List[Tuple[str, int]]:
    """
    Names loaded somewhere in the snippet that nothing binds.

    Scopes are not tracked, so a name bound anywhere counts as defined.
    A star import disables the check.
    """
    bound = set(dir(builtins))
    loads: Dict[str, int] = {}
    for node in ast.walk(tree):
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            for alias in node.names:
                if alias.name == "*":
                    return []
                bound.add(alias.asname or alias.name.split(".")[0])
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            bound.add(node.name)
        elif isinstance(node, ast.arg):
            bound.add(node.arg)
        elif isinstance(node, ast.ExceptHandler) and node.name:
            bound.add(node.name)
        elif isinstance(node, (ast.Global, ast.Nonlocal)):
            bound.update(node.names)
        elif isinstance(node, ast.Name):
            if isinstance(node.ctx, ast.Load):
                loads.setdefault(node.id, node.lineno)
            else:
                bound.add(node.id)
    return sorted(
        ((name, line) for name, line in loads.items() if name not in bound),
        key=lambda item: item[1],
    )


class SnippetValidator:
    """Validates every snippet in a guide according to its kind."""

    def validate(self, guide: Guide) -> SnippetValidationResult:
        issues: List[SnippetIssue] = []
        checked = 0

        for section in guide.sections:
            for index, snippet in enumerate(section.snippets):
                checked += 1
                for message, severity, line in self.check_snippet(snippet, guide.package):
                    issues.append(SnippetIssue(
                        section=section.title,
                        index=index,
                        kind=snippet.kind.value,
                        message=message,
                        severity=severity,
                        line=line,
                    ))

        return SnippetValidationResult(
            valid=not any(i.severity == "error" for i in issues),
            checked=checked,
            issues=issues,
        )

    def check_snippet(self, snippet: CodeSnippet, package: PackageConfig):
        """
        Check one snippet.

        Returns:
            List of (message, severity, line) tuples.
        """
        if not snippet.code.strip():
            return [("Snippet is empty", "error", None)]

        if snippet.kind in (SnippetKind.PYTHON, SnippetKind.TEST):
            return self._check_python(snippet)
        if snippet.kind == SnippetKind.CONFIG:
            return self._check_config(snippet, package)
        return []

    @staticmethod
    def _check_python(snippet: CodeSnippet):
        try:
            tree = ast.parse(snippet.code)
        except SyntaxError as e:
            return [(f"Invalid Python: {e.msg}", "error", e.lineno)]

        results = [
            (f"Name '{name}' is used but never defined or imported", "error", line)
            for name, line in _undefined_names(tree)
        ]

        if snippet.kind != SnippetKind.TEST:
            return results

        has_test = any(
            isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef))
            and node.name.startswith("test_")
            for node in ast.walk(tree)
        )
        has_assert = any(isinstance(node, ast.Assert) for node in ast.walk(tree))

        if not (has_test or has_assert):
            results.append(("Test snippet has no test_ function or assert", "error", None))
        elif not has_assert:
            results.append(("Test snippet has no assert statement", "warning", None))
        return results

    @staticmethod
    def _check_config(snippet: CodeSnippet, package: PackageConfig):
        try:
            data = tomllib.loads(snippet.code)
        except tomllib.TOMLDecodeError as e:
            return [(f"Invalid TOML: {e}", "error", None)]

        project = data.get("project")
        if not isinstance(project, dict):
            return [("Config snippet has no [project] table", "error", None)]

        results = []
        for key in ("name", "version"):
            value = project.get(key)
            expected = getattr(package, key)
            if value is None:
                results.append((f"Config snippet is missing project.{key}", "error", None))
            elif value != expected:
                results.append((
                    f"project.{key} is '{value}' but the guide's package says '{expected}'",
                    "error",
                    None,
                ))
        return results
