"""Hierarchical display options for rendered analysis output."""

from scn_options.models import OptionState, PresetName

__all__ = ["OptionState", "PresetName"]
