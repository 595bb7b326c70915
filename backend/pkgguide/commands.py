"""
Command lines narrated by the guide.

These helpers only build argv lists for the reader to type. Nothing here
runs the tools.
"""

from __future__ import annotations

from typing import List, Optional

from .models import CommandStep, ToolKind
from .settings import GuideSettings


class CommandBuilder:
    """Builds the test, build, install and upload command lines."""

    def __init__(self, settings: Optional[GuideSettings] = None):
        self.settings = settings or GuideSettings()

    def test_command(self) -> List[str]:
        return [self.settings.test_runner]

    def build_command(self) -> List[str]:
        return [self.settings.python, "-m", "build"]

    def install_command(self, target: str = ".", editable: bool = False) -> List[str]:
        """Install from a local path or built archive, optionally editable."""
        if not target or not target.strip():
            raise ValueError("Install target must not be empty")
        argv = [self.settings.installer, "install"]
        if editable:
            argv.append("-e")
        argv.append(target)
        return argv

    def install_from_url(self, url: str) -> List[str]:
        """
        Install straight from a remote repository.

        Args:
            url: http(s) repository URL, or a URL already prefixed with 'git+'.

        Raises:
            ValueError: If the URL has no supported scheme.
        """
        url = (url or "").strip()
        if url.startswith("git+"):
            spec = url
        elif url.startswith(("https://", "http://")):
            spec = "git+" + url
        else:
            raise ValueError(f"Unsupported repository URL: '{url}'")
        return [self.settings.installer, "install", spec]

    def upload_command(self, repository: Optional[str] = None) -> List[str]:
        argv = [self.settings.uploader, "upload"]
        if repository:
            argv.extend(["--repository", repository])
        argv.append("dist/*")
        return argv

    def step(
        self,
        tool: ToolKind,
        argv: List[str],
        description: str = "",
        expected: Optional[str] = None,
    ) -> CommandStep:
        """Wrap an argv list as a narrated CommandStep."""
        return CommandStep(tool=tool, argv=argv, description=description, expected=expected)
