"""Option state value objects."""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field

WILDCARD_KIND = "*"


class PresetName(str, Enum):
    """Named presets, from least to most verbose output."""

    MINIMAL = "minimal"
    COMPACT = "compact"
    DEFAULT = "default"
    DETAILED = "detailed"
    VERBOSE = "verbose"


class OptionState(BaseModel):
    """The current display configuration.

    ``flags`` holds regular options and ``display_filters`` holds symbol-kind
    visibility; a missing entry means "enabled". ``preset`` only records the
    last preset applied and is cleared by any edit, so it is a hint for
    highlighting and never a source of truth.
    """

    model_config = ConfigDict(frozen=True)

    flags: Mapping[str, bool] = Field(default_factory=dict)
    display_filters: Mapping[str, bool] = Field(default_factory=dict)
    preset: PresetName | None = None

    def flag(self, key: str) -> bool:
        return self.flags.get(key, True)

    def filter_visible(self, kind: str) -> bool:
        """Resolve a kind: explicit entry, then the ``*`` wildcard, then True."""
        if kind in self.display_filters:
            return self.display_filters[kind]
        if WILDCARD_KIND in self.display_filters:
            return self.display_filters[WILDCARD_KIND]
        return True
