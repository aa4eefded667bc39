"""Shared helpers for scn-workbench."""

from scn_common.api import SCNError, configure_logging

__all__ = ["configure_logging", "SCNError"]
