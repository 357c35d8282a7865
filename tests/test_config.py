"""Tests for secbuddy.config: the settings snapshot and settings file loading."""

import pytest
from pydantic import ValidationError

from secbuddy.config import (
    DEFAULT_PROBLEM_CAP,
    DEFAULT_PYTHON_VERSION,
    Config,
    config_from_settings,
    find_config_file,
    get_default_config,
    load_config,
)
from secbuddy.errors import ConfigError, UnknownToggleError


def test_defaults():
    config = get_default_config()
    assert config.problem_cap == DEFAULT_PROBLEM_CAP == 1000
    assert config.declared_version == DEFAULT_PYTHON_VERSION
    assert config.is_enabled("c.strcpy")
    assert config.is_enabled("python.input_validation")


def test_partial_toggles_keep_other_defaults():
    config = Config(toggles={"c.gets": False})
    assert not config.is_enabled("c.gets")
    assert config.is_enabled("c.strcpy")


def test_unknown_toggle_raises():
    with pytest.raises(UnknownToggleError):
        Config().is_enabled("c.memcpy")


def test_negative_cap_rejected():
    with pytest.raises(ValidationError):
        Config(problem_cap=-1)


def test_config_is_frozen():
    config = Config()
    with pytest.raises(ValidationError):
        config.problem_cap = 5


def test_toggles_cannot_be_mutated_in_place():
    config = Config()
    with pytest.raises(TypeError):
        config.toggles["c.strcpy"] = False
    assert config.is_enabled("c.strcpy")


def test_source_mapping_changes_do_not_leak_into_snapshot():
    toggles = {"c.gets": False}
    config = Config(toggles=toggles)
    toggles["c.gets"] = True
    assert not config.is_enabled("c.gets")


def test_with_overrides_returns_new_snapshot():
    config = Config()
    changed = config.with_overrides(problem_cap=5, declared_version="3.9.1", toggles={"c.strcmp": False})
    assert (changed.problem_cap, changed.declared_version) == (5, "3.9.1")
    assert not changed.is_enabled("c.strcmp")
    assert config.is_enabled("c.strcmp")
    assert config.problem_cap == 1000


def test_with_overrides_keeps_unspecified_fields():
    config = Config(problem_cap=7, declared_version="3.8.0")
    assert config.with_overrides() == config


class TestSettings:
    def test_full_settings(self):
        config = config_from_settings(
            {
                "max_problems": 10,
                "c": {"strcpy": False},
                "python": {"error_messages": False, "version": "3.9.5"},
            }
        )
        assert config.problem_cap == 10
        assert not config.is_enabled("c.strcpy")
        assert not config.is_enabled("python.error_messages")
        assert config.is_enabled("python.input_validation")
        assert config.declared_version == "3.9.5"

    def test_extension_style_keys(self):
        config = config_from_settings(
            {"maxNumberOfProblems": 3, "python": {"inputValidation": False}}
        )
        assert config.problem_cap == 3
        assert not config.is_enabled("python.input_validation")

    def test_family_must_be_table(self):
        with pytest.raises(ConfigError):
            config_from_settings({"c": True})

    def test_invalid_value(self):
        with pytest.raises(ConfigError):
            config_from_settings({"max_problems": -5})

    def test_unknown_keys_are_ignored(self, caplog):
        config = config_from_settings({"theme": "dark"})
        assert config == Config()
        assert "theme" in caplog.text


class TestLoadConfig:
    def test_dedicated_file(self, tmp_path):
        path = tmp_path / ".secbuddy.toml"
        path.write_text('max_problems = 2\n[python]\nversion = "3.8.1"\n')
        config = load_config(path)
        assert config.problem_cap == 2
        assert config.declared_version == "3.8.1"

    def test_pyproject_section(self, tmp_path):
        path = tmp_path / "pyproject.toml"
        path.write_text('[project]\nname = "x"\n\n[tool.secbuddy.c]\ngets = false\n')
        config = load_config(path)
        assert not config.is_enabled("c.gets")

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / ".secbuddy.toml"
        path.write_text("max_problems = = 1\n")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(tmp_path / "missing.toml")


class TestFindConfigFile:
    def test_found_in_parent(self, tmp_path):
        settings = tmp_path / ".secbuddy.toml"
        settings.write_text("max_problems = 1\n")
        nested = tmp_path / "src" / "pkg"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == settings.resolve()

    def test_pyproject_without_section_is_skipped(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "x"\n')
        target = tmp_path / "main.c"
        target.write_text("")
        found = find_config_file(target)
        assert found is None or found.parent != tmp_path.resolve()

    def test_dedicated_file_wins(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[tool.secbuddy]\nmax_problems = 1\n")
        dedicated = tmp_path / ".secbuddy.toml"
        dedicated.write_text("max_problems = 2\n")
        assert find_config_file(tmp_path) == dedicated.resolve()
