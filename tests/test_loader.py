"""
Tests for guide persistence and settings.
"""

import pytest
import yaml
from pydantic import ValidationError

from backend.pkgguide.content import build_default_guide
from backend.pkgguide.loader import dump_guide, guide_from_dict, load_guide
from backend.pkgguide.settings import (
    CONFIG_ENV_VAR,
    GuideSettings,
    load_settings,
    resolve_settings_path,
)


class TestLoader:
    """Tests for load_guide and dump_guide."""

    def test_dump_and_load(self, tmp_path):
        """Test a dumped guide loads back unchanged."""
        guide = build_default_guide()
        path = dump_guide(guide, tmp_path / "nested" / "guide.yaml")
        assert path.exists()
        assert load_guide(path) == guide

    def test_dump_uses_plain_values(self, tmp_path):
        """Test enums are stored as their string values."""
        path = dump_guide(build_default_guide(), tmp_path / "guide.yaml")
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        assert data["sections"][0]["stage"] == "terminology"
        assert data["package"] == {"name": "mypackage", "version": "0.1.0"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_guide(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "guide.yaml"
        path.write_text("title: [unclosed\n", encoding="utf-8")
        with pytest.raises(ValueError) as exc_info:
            load_guide(path)
        assert "Invalid YAML" in str(exc_info.value)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "guide.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError) as exc_info:
            load_guide(path)
        assert "must contain a mapping" in str(exc_info.value)

    def test_schema_error(self):
        with pytest.raises(ValidationError):
            guide_from_dict({"title": "x", "package": {"name": "x"}})


class TestSettings:
    """Tests for GuideSettings loading."""

    @pytest.fixture(autouse=True)
    def isolate(self, tmp_path, monkeypatch):
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        monkeypatch.chdir(tmp_path)

    def test_defaults_without_file(self):
        settings = load_settings()
        assert settings == GuideSettings()
        assert settings.test_runner == "pytest"
        assert "publish" in settings.recommended_stages

    def test_load_from_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("installer: uv\npython: python3\n", encoding="utf-8")
        settings = load_settings(path)
        assert settings.installer == "uv"
        assert settings.python == "python3"
        assert settings.uploader == "twine"

    def test_env_var(self, tmp_path, monkeypatch):
        path = tmp_path / "env.yaml"
        path.write_text("test_runner: tox\n", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
        assert resolve_settings_path() == path
        assert load_settings().test_runner == "tox"

    def test_cwd_default_file(self, tmp_path):
        (tmp_path / "pkgguide.yaml").write_text("log_level: DEBUG\n", encoding="utf-8")
        assert load_settings().log_level == "DEBUG"

    def test_unknown_keys_ignored(self, tmp_path):
        path = tmp_path / "s.yaml"
        path.write_text("installer: pip\ncolour: blue\n", encoding="utf-8")
        assert load_settings(path).installer == "pip"

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "s.yaml"
        path.write_text("- pip\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(path)

    def test_wrong_types_rejected(self, tmp_path):
        """Test a scalar where a list belongs fails at load time."""
        path = tmp_path / "s.yaml"
        path.write_text("recommended_stages: publish\n", encoding="utf-8")
        with pytest.raises(ValueError, match="recommended_stages"):
            load_settings(path)

        with pytest.raises(ValidationError):
            GuideSettings.from_dict({"log_level": 10})
        with pytest.raises(ValidationError):
            GuideSettings.from_dict({"installer": ["pip"]})

    def test_log_level_names(self):
        assert GuideSettings.from_dict({"log_level": "debug"}).log_level == "DEBUG"
        with pytest.raises(ValidationError, match="not a logging level name"):
            GuideSettings.from_dict({"log_level": "chatty"})

    def test_empty_command_rejected(self):
        with pytest.raises(ValidationError):
            GuideSettings(installer="  ")

    def test_to_dict(self):
        data = GuideSettings().to_dict()
        assert data["config_file"] == "pyproject.toml"
        assert GuideSettings.from_dict(data) == GuideSettings()
