"""Analyzer backends loadable inside the isolated context."""

from __future__ import annotations

import importlib
from typing import Callable, Protocol, Sequence

from scn_analyzer.api import (
    ProjectAnalysis,
    SourceFile,
    analyze_project,
    cost_impact,
    initialize_parser,
    parse_files_input,
)
from scn_analyzer.project import StopSignal
from scn_common.errors import ConfigurationError
from scn_common.log_schema import ProgressEvent
from scn_options.models import OptionState

DEFAULT_BACKEND = "scn_controller.backend:ReferenceAnalyzer"


class AnalyzerBackend(Protocol):
    """What the isolated context needs from an analyzer."""

    def initialize(self, asset_base_location: str | None) -> None: ...

    def analyze(
        self,
        files_input: str,
        *,
        include: Sequence[str],
        exclude: Sequence[str],
        on_progress: Callable[[ProgressEvent], None],
        signal: StopSignal,
    ) -> ProjectAnalysis: ...

    def cost_impact(self, source_files: Sequence[SourceFile], options: OptionState) -> dict[str, int]: ...


class ReferenceAnalyzer:
    """Backend built on the bundled scn_analyzer package."""

    def initialize(self, asset_base_location: str | None) -> None:
        initialize_parser(asset_base_location)

    def analyze(
        self,
        files_input: str,
        *,
        include: Sequence[str],
        exclude: Sequence[str],
        on_progress: Callable[[ProgressEvent], None],
        signal: StopSignal,
    ) -> ProjectAnalysis:
        files = parse_files_input(files_input)
        return analyze_project(
            files, include=include, exclude=exclude, on_progress=on_progress, signal=signal
        )

    def cost_impact(self, source_files: Sequence[SourceFile], options: OptionState) -> dict[str, int]:
        return cost_impact(source_files, options)


def load_backend(reference: str) -> AnalyzerBackend:
    """Resolve ``"package.module:attribute"`` and instantiate it if it is a class."""
    module_name, _, attribute = reference.partition(":")
    if not module_name or not attribute:
        raise ConfigurationError(
            f"Backend reference must look like 'module:attribute', got {reference!r}",
            context={"backend": reference},
        )
    try:
        target = getattr(importlib.import_module(module_name), attribute)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(
            f"Cannot load analyzer backend {reference!r}: {exc}",
            context={"backend": reference},
            cause=exc,
        ) from exc
    return target() if isinstance(target, type) else target
