"""
pkgguide: a structured guide to Python packaging.

Models, renders and validates a tutorial that walks from modules and
packages through test-first development to building, installing and
publishing a package, and scaffolds the example project it describes.
"""

from .models import (
    Guide,
    GuideSection,
    GuideStage,
    PackageConfig,
    ProjectLayout,
    LayoutEntry,
    CodeSnippet,
    SnippetKind,
    CommandStep,
    ToolKind,
    GlossaryTerm,
    STAGE_ORDER,
)
from .content import build_default_guide
from .render import render_guide

__version__ = "1.0.0"
__all__ = [
    "Guide",
    "GuideSection",
    "GuideStage",
    "PackageConfig",
    "ProjectLayout",
    "LayoutEntry",
    "CodeSnippet",
    "SnippetKind",
    "CommandStep",
    "ToolKind",
    "GlossaryTerm",
    "STAGE_ORDER",
    "build_default_guide",
    "render_guide",
]
