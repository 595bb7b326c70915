"""
Markdown rendering for guides.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List

import yaml

from .models import CodeSnippet, CommandStep, Guide, GuideSection, GuideStage, SnippetKind


GLOSSARY_HEADING = "Glossary"
CONTENTS_HEADING = "Contents"


def _anchor(heading: str) -> str:
    slug = re.sub(r"[^\w\s-]", "", heading.lower())
    return re.sub(r"\s+", "-", slug.strip())


class GuideRenderer:
    """
    Renders a Guide as a README-style Markdown document.

    Output layout:
    - YAML frontmatter with name, version and description
    - Title, summary and a table of contents
    - One numbered section per guide section
    - Glossary
    """

    def render(self, guide: Guide) -> str:
        lines: List[str] = []

        lines.append("---")
        lines.append(self._frontmatter(guide).rstrip("\n"))
        lines.append("---")
        lines.append("")

        lines.append(f"# {guide.title}")
        lines.append("")
        if guide.summary:
            lines.append(guide.summary)
            lines.append("")

        headings = [self._heading(i, s) for i, s in enumerate(guide.sections, 1)]
        if guide.glossary:
            headings.append(GLOSSARY_HEADING)

        lines.append(f"## {CONTENTS_HEADING}")
        lines.append("")
        for heading in headings:
            lines.append(f"- [{heading}](#{_anchor(heading)})")
        lines.append("")

        for i, section in enumerate(guide.sections, 1):
            lines.extend(self._render_section(guide, section, self._heading(i, section)))

        if guide.glossary:
            lines.append(f"## {GLOSSARY_HEADING}")
            lines.append("")
            for term in guide.glossary:
                lines.append(f"- **{term.term}**: {term.definition}")
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"

    @staticmethod
    def _frontmatter(guide: Guide) -> str:
        data: Dict[str, Any] = {
            "name": guide.package.name,
            "version": guide.package.version,
        }
        if guide.summary:
            data["description"] = guide.summary
        return yaml.safe_dump(
            data,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=1000,
        )

    @staticmethod
    def _heading(index: int, section: GuideSection) -> str:
        return f"{index}. {section.title}"

    def _render_section(self, guide: Guide, section: GuideSection, heading: str) -> List[str]:
        lines = [f"## {heading}", ""]

        if section.body.strip():
            lines.append(section.body.strip())
            lines.append("")

        snippets = list(section.snippets)
        # Packaging sections show the tree even when none was written out.
        if section.stage == GuideStage.PACKAGING_CONFIG and not any(
            s.kind == SnippetKind.TREE for s in snippets
        ):
            snippets.insert(0, CodeSnippet(kind=SnippetKind.TREE, code=guide.layout.tree()))

        for snippet in snippets:
            lines.extend(self._render_snippet(snippet))

        for command in section.commands:
            lines.extend(self._render_command(command))

        return lines

    @staticmethod
    def _render_snippet(snippet: CodeSnippet) -> List[str]:
        lines = []
        label = snippet.caption or snippet.filename
        if snippet.caption and snippet.filename:
            label = f"{snippet.caption} (`{snippet.filename}`)"
        elif snippet.filename:
            label = f"`{snippet.filename}`"
        if label:
            lines.append(f"{label}:")
            lines.append("")
        lines.append(f"```{snippet.language}")
        lines.append(snippet.code.rstrip("\n"))
        lines.append("```")
        lines.append("")
        return lines

    @staticmethod
    def _render_command(command: CommandStep) -> List[str]:
        lines = []
        if command.description:
            lines.append(command.description)
            lines.append("")
        lines.append("```bash")
        lines.append(command.shell_line())
        lines.append("```")
        lines.append("")
        if command.expected:
            lines.append(f"> {command.expected}")
            lines.append("")
        return lines


def render_guide(guide: Guide) -> str:
    """Convenience function to render a guide to Markdown."""
    return GuideRenderer().render(guide)
