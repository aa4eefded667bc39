"""Public API surface for scn_ui."""

from scn_ui.cli import app, main
from scn_ui.log_view import filter_logs, format_log_line, format_logs, render_logs
from scn_ui.options_view import build_options_tree
from scn_ui.profile import RunProfile, load_profile, parse_overrides

__all__ = [
    "RunProfile",
    "app",
    "build_options_tree",
    "filter_logs",
    "format_log_line",
    "format_logs",
    "load_profile",
    "main",
    "parse_overrides",
    "render_logs",
]
