from __future__ import annotations

"""
Scanner configuration: the per-scan settings snapshot and the settings file loader.

The engine only ever sees a Config value. It is frozen, so a scan always
runs against one consistent view of the settings; changing a setting means
building a new Config (see Config.with_overrides) for the next scan.

Settings files mirror the editor extension's "secbuddy" settings section,
written as TOML:

    max_problems = 1000

    [c]
    strcpy = true
    gets = false

    [python]
    error_messages = true
    input_validation = true
    version = "3.9.5"

The same keys can live under [tool.secbuddy] in a pyproject.toml.
"""

import logging
import tomllib
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from secbuddy.errors import ConfigError, UnknownToggleError
from secbuddy.rules.catalog import default_toggles

logger = logging.getLogger(__name__)

DEFAULT_PROBLEM_CAP = 1000
DEFAULT_PYTHON_VERSION = "3.12.0"

CONFIG_FILENAME = ".secbuddy.toml"
PYPROJECT_FILENAME = "pyproject.toml"

# camelCase keys used by the editor extension's settings, mapped to ours
_SETTING_ALIASES = {
    "maxNumberOfProblems": "max_problems",
    "errorMessages": "error_messages",
    "inputValidation": "input_validation",
}

_FAMILY_TABLES = ("c", "python")


class Config(BaseModel):
    """
    Resolved settings for one scan.

    - problem_cap: maximum diagnostics per scan, across all rules.
    - toggles: toggle name (e.g. "c.strcpy") -> enabled. Every toggle the
      rule catalogs declare defaults to True; supplied values override them.
      Stored as a read-only mapping, so the snapshot cannot change mid-scan.
    - declared_version: the user's target Python version, consulted only by
      version-gated rules.
    """

    model_config = ConfigDict(frozen=True)

    problem_cap: int = Field(default=DEFAULT_PROBLEM_CAP, ge=0)
    toggles: Mapping[str, bool] = Field(default_factory=default_toggles, validate_default=True)
    declared_version: str = DEFAULT_PYTHON_VERSION

    @field_validator("toggles")
    @classmethod
    def _fill_default_toggles(cls, value: Mapping[str, bool]) -> Mapping[str, bool]:
        merged = default_toggles()
        merged.update(value)
        return MappingProxyType(merged)

    def is_enabled(self, name: str) -> bool:
        """
        Return the value of a toggle.

        Raises:
            UnknownToggleError: if no catalog declares the toggle and the
                snapshot was not given a value for it.
        """
        try:
            return self.toggles[name]
        except KeyError:
            raise UnknownToggleError(name) from None

    def with_overrides(
        self,
        *,
        problem_cap: Optional[int] = None,
        declared_version: Optional[str] = None,
        toggles: Optional[Mapping[str, bool]] = None,
    ) -> "Config":
        """Return a new Config with the given fields replaced (toggles are merged)."""
        merged = dict(self.toggles)
        if toggles:
            merged.update(toggles)
        return Config(
            problem_cap=self.problem_cap if problem_cap is None else problem_cap,
            declared_version=self.declared_version if declared_version is None else declared_version,
            toggles=merged,
        )


def get_default_config() -> Config:
    """Return the default configuration: every toggle on, cap 1000, Python 3.12.0."""
    return Config()


def _normalize_key(key: str) -> str:
    return _SETTING_ALIASES.get(key, key)


def config_from_settings(settings: Mapping[str, Any]) -> Config:
    """
    Build a Config from a parsed settings mapping (see the module docstring).

    Raises:
        ConfigError: if a value has the wrong type or a family table is not a table.
    """
    values: dict[str, Any] = {}
    toggles: dict[str, Any] = {}
    known = default_toggles()

    for raw_key, value in settings.items():
        key = _normalize_key(raw_key)
        if key == "max_problems":
            values["problem_cap"] = value
        elif key in _FAMILY_TABLES:
            if not isinstance(value, Mapping):
                raise ConfigError(f"Settings key '{raw_key}' must be a table, got {type(value).__name__}")
            for raw_name, enabled in value.items():
                name = _normalize_key(raw_name)
                if key == "python" and name == "version":
                    values["declared_version"] = enabled
                    continue
                toggle = f"{key}.{name}"
                if toggle not in known:
                    logger.warning("Unknown toggle in settings: %s", toggle)
                toggles[toggle] = enabled
        else:
            logger.warning("Ignoring unknown settings key: %s", raw_key)

    values["toggles"] = toggles
    try:
        return Config(**values)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc


def load_config(path: Path) -> Config:
    """
    Load a Config from a .secbuddy.toml file or a pyproject.toml [tool.secbuddy] table.

    Raises:
        ConfigError: if the file cannot be read or parsed, or holds invalid values.
    """
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except OSError as exc:
        raise ConfigError(f"Cannot read settings file {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if path.name == PYPROJECT_FILENAME:
        data = data.get("tool", {}).get("secbuddy", {})

    config = config_from_settings(data)
    logger.info("Loaded settings from %s", path)
    return config


def _pyproject_has_section(path: Path) -> bool:
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return isinstance(data.get("tool", {}).get("secbuddy"), dict)


def find_config_file(start: Path) -> Optional[Path]:
    """
    Look for a settings file in start (or its directory) and each parent.

    A .secbuddy.toml wins over a pyproject.toml in the same directory; a
    pyproject.toml only counts if it has a [tool.secbuddy] table.
    """
    start = start.resolve()
    directory = start if start.is_dir() else start.parent
    for candidate_dir in (directory, *directory.parents):
        dedicated = candidate_dir / CONFIG_FILENAME
        if dedicated.is_file():
            return dedicated
        pyproject = candidate_dir / PYPROJECT_FILENAME
        if pyproject.is_file() and _pyproject_has_section(pyproject):
            return pyproject
    return None
