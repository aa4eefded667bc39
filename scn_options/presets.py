"""Preset expansions loaded from the bundled YAML data file."""

from __future__ import annotations

import logging
from functools import lru_cache
from importlib import resources
from typing import Any, Mapping

import yaml

from scn_common.errors import ConfigurationError
from scn_options.catalog import FILTER_KEYS, FLAG_KEYS
from scn_options.models import OptionState, PresetName
from scn_options.tree import filter_kind

logger = logging.getLogger(__name__)

PRESET_NAMES: tuple[PresetName, ...] = tuple(PresetName)
_KINDS = tuple(filter_kind(key) for key in FILTER_KEYS)


def _expand_filters(name: str, spec: Mapping[str, Any]) -> dict[str, bool]:
    default = bool(spec.get("default", True))
    show = list(spec.get("show", []))
    hide = list(spec.get("hide", []))
    unknown = sorted(set(show + hide) - set(_KINDS))
    if unknown:
        raise ConfigurationError(
            f"Preset {name!r} references unknown symbol kinds: {', '.join(unknown)}",
            context={"preset": name, "kinds": unknown},
        )
    filters = {kind: default for kind in _KINDS}
    filters.update({kind: True for kind in show})
    filters.update({kind: False for kind in hide})
    return filters


def _expand_flags(name: str, spec: Mapping[str, Any]) -> dict[str, bool]:
    missing = sorted(set(FLAG_KEYS) - set(spec))
    unknown = sorted(set(spec) - set(FLAG_KEYS))
    if missing or unknown:
        raise ConfigurationError(
            f"Preset {name!r} must assign every option exactly once",
            context={"preset": name, "missing": missing, "unknown": unknown},
        )
    return {key: bool(spec[key]) for key in FLAG_KEYS}


def parse_presets(raw: Mapping[str, Any]) -> dict[PresetName, OptionState]:
    """Validate raw preset data and expand it into complete states."""
    presets: dict[PresetName, OptionState] = {}
    for preset in PRESET_NAMES:
        spec = raw.get(preset.value)
        if not isinstance(spec, Mapping):
            raise ConfigurationError(
                f"Preset {preset.value!r} is missing", context={"preset": preset.value}
            )
        presets[preset] = OptionState(
            flags=_expand_flags(preset.value, spec.get("flags") or {}),
            display_filters=_expand_filters(preset.value, spec.get("display_filters") or {}),
            preset=preset,
        )
    extra = sorted(set(raw) - {p.value for p in PRESET_NAMES})
    if extra:
        logger.warning("Ignoring unknown presets: %s", ", ".join(extra))
    return presets


@lru_cache(maxsize=1)
def load_presets() -> dict[PresetName, OptionState]:
    text = resources.files("scn_options").joinpath("presets.yaml").read_text(encoding="utf-8")
    return parse_presets(yaml.safe_load(text) or {})


def get_preset(name: PresetName | str) -> OptionState:
    try:
        preset = PresetName(name)
    except ValueError as exc:
        raise ConfigurationError(
            f"Unknown preset {name!r}", context={"preset": str(name)}, cause=exc
        ) from exc
    return load_presets()[preset]
