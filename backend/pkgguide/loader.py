"""
YAML persistence for guides.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from .models import Guide


logger = logging.getLogger(__name__)


def guide_from_dict(data: Dict[str, Any]) -> Guide:
    """Build a Guide from parsed data. Raises pydantic.ValidationError."""
    return Guide.model_validate(data)


def load_guide(path: Path) -> Guide:
    """
    Load a guide from a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not valid YAML or not a mapping.
        pydantic.ValidationError: If the data does not describe a guide.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Guide file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Guide file {path} must contain a mapping")

    guide = guide_from_dict(data)
    logger.debug(f"Loaded guide '{guide.title}' with {len(guide.sections)} sections")
    return guide


def dump_guide(guide: Guide, path: Path) -> Path:
    """Write a guide to YAML."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = guide.model_dump(mode="json", exclude_none=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    return path
