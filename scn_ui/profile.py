"""YAML run profiles for ``scn analyze``."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from scn_common.errors import ConfigurationError
from scn_options.catalog import ALL_OPTION_KEYS
from scn_options.models import OptionState, PresetName
from scn_options.state import apply_preset, set_one

_BOOL_WORDS = {"1": True, "true": True, "yes": True, "on": True, "0": False, "false": False, "no": False, "off": False}


class RunProfile(BaseModel):
    """Include/exclude globs, a base preset and per-option overrides."""

    model_config = ConfigDict(extra="forbid")

    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    preset: Optional[PresetName] = None
    options: dict[str, bool] = Field(default_factory=dict)

    @field_validator("include", "exclude", mode="before")
    @classmethod
    def _split_text(cls, value: object) -> object:
        if isinstance(value, str):
            return [line.strip() for line in value.splitlines() if line.strip()]
        return value

    @field_validator("options")
    @classmethod
    def _known_keys(cls, value: dict[str, bool]) -> dict[str, bool]:
        unknown = sorted(set(value) - set(ALL_OPTION_KEYS))
        if unknown:
            raise ValueError(f"unknown option keys: {', '.join(unknown)}")
        return value

    def build_state(self, preset: Optional[PresetName | str] = None) -> OptionState:
        """Preset (argument, then profile, then default) with overrides applied."""
        state = apply_preset(preset or self.preset or PresetName.DEFAULT)
        for key, value in self.options.items():
            state = set_one(state, key, value)
        return state


def load_profile(path: Path) -> RunProfile:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read profile {path}: {exc}", context={"path": path}, cause=exc) from exc
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Profile {path} must be a mapping", context={"path": path})
    try:
        return RunProfile.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid profile {path}: {exc}", context={"path": path}, cause=exc) from exc


def parse_overrides(assignments: Iterable[str]) -> dict[str, bool]:
    """Parse ``key=bool`` pairs given on the command line."""
    overrides: dict[str, bool] = {}
    for item in assignments:
        key, sep, raw_value = item.partition("=")
        key = key.strip()
        value = _BOOL_WORDS.get(raw_value.strip().lower()) if sep else None
        if not key or value is None:
            raise ConfigurationError(f"Expected key=true|false, got {item!r}", context={"value": item})
        if key not in ALL_OPTION_KEYS:
            raise ConfigurationError(f"Unknown option {key!r}", context={"key": key})
        overrides[key] = value
    return overrides
