"""
Settings for guide generation.

Settings live in a YAML file (pkgguide.yaml by default, or the path in
$PKGGUIDE_CONFIG). Missing files and unknown keys are ignored, known keys
are type-checked.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PKGGUIDE_CONFIG"
DEFAULT_CONFIG_FILE = "pkgguide.yaml"


class GuideSettings(BaseModel):
    """
    Tool names and validation policy used when building guides.

    Attributes:
        python: Interpreter command used for `-m build`.
        installer: Package installer command.
        test_runner: Test runner command (invoked with no arguments).
        uploader: Command that publishes distributions.
        config_file: Name of the packaging configuration file.
        required_stages: Stage values that must appear in a guide.
        recommended_stages: Stage values that should appear in a guide.
        log_level: Logging level name for the CLI.
    """

    model_config = {"extra": "forbid"}

    python: str = "python"
    installer: str = "pip"
    test_runner: str = "pytest"
    uploader: str = "twine"
    config_file: str = "pyproject.toml"
    required_stages: List[str] = Field(default_factory=lambda: [
        "terminology",
        "test_first",
        "example_module",
        "packaging_config",
        "build",
        "install",
    ])
    recommended_stages: List[str] = Field(default_factory=lambda: ["publish"])
    log_level: str = "INFO"

    @field_validator("python", "installer", "test_runner", "uploader", "config_file")
    @classmethod
    def validate_command(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"'{v}' is not a logging level name")
        return level

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GuideSettings":
        """
        Create from dictionary, ignoring unknown keys.

        Raises:
            pydantic.ValidationError: If a known key has the wrong type or value.
        """
        known = set(cls.model_fields)
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(unknown)}")
        return cls.model_validate({k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return self.model_dump()


def resolve_settings_path(path: Optional[Path] = None) -> Optional[Path]:
    """Pick the settings file: explicit path, then env var, then cwd default."""
    if path is not None:
        return path
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    default = Path.cwd() / DEFAULT_CONFIG_FILE
    return default if default.exists() else None


def load_settings(path: Optional[Path] = None) -> GuideSettings:
    """
    Load settings from YAML.

    Args:
        path: Optional explicit settings file.

    Returns:
        GuideSettings, with defaults for anything not configured.

    Raises:
        ValueError: If the file exists but is not a YAML mapping, or a setting
            has the wrong type (pydantic.ValidationError is a ValueError).
    """
    settings_path = resolve_settings_path(path)
    if settings_path is None or not settings_path.exists():
        return GuideSettings()

    with open(settings_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {settings_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Settings file {settings_path} must contain a mapping")

    logger.debug(f"Loaded settings from {settings_path}")
    return GuideSettings.from_dict(data)
