"""Language registry: tree-sitter grammars and parsers shared across analysis runs."""

from __future__ import annotations

import logging
import posixpath
import threading
from pathlib import Path
from typing import Any

from tree_sitter_language_pack import get_language as load_ts_language
from tree_sitter_language_pack import get_parser as load_ts_parser

from scn_analyzer.models import LanguageHandle
from scn_common.errors import InitializationError

logger = logging.getLogger(__name__)

LANGUAGE_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "typescript": (".ts", ".mts", ".cts"),
    "tsx": (".tsx",),
    "javascript": (".js", ".mjs", ".cjs", ".jsx"),
    "css": (".css",),
    "go": (".go",),
    "rust": (".rs",),
}

_registry: dict[str, LanguageHandle] = {}
_registry_lock = threading.Lock()


def initialize_parser(asset_base_location: str | None = None) -> None:
    """Load every grammar once; later calls are no-ops.

    ``asset_base_location`` must name an existing directory when given.
    """
    with _registry_lock:
        if _registry:
            return
        if asset_base_location is not None and not Path(asset_base_location).is_dir():
            raise InitializationError(
                f"Analyzer asset directory not found: {asset_base_location}",
                context={"asset_base_location": asset_base_location},
            )
        loaded: dict[str, LanguageHandle] = {}
        for name, extensions in LANGUAGE_EXTENSIONS.items():
            try:
                language = load_ts_language(name)
                parser = load_ts_parser(name)
            except Exception as exc:
                raise InitializationError(
                    f"Failed to load tree-sitter grammar {name!r}: {exc}",
                    context={"language": name},
                    cause=exc,
                ) from exc
            loaded[name] = LanguageHandle(
                name=name,
                extensions=extensions,
                parser=parser,
                loaded_language=language,
            )
        _registry.update(loaded)
        logger.debug("Loaded %d grammars", len(_registry))


def is_initialized() -> bool:
    with _registry_lock:
        return bool(_registry)


def reset_registry() -> None:
    """Drop every loaded grammar (tests only)."""
    with _registry_lock:
        _registry.clear()


def get_language(name: str) -> LanguageHandle | None:
    return _registry.get(name)


def language_for_path(path: str) -> LanguageHandle | None:
    extension = posixpath.splitext(path)[1].lower()
    for handle in _registry.values():
        if extension in handle.extensions:
            return handle
    return None


def parse_source(handle: LanguageHandle, content: str) -> Any:
    """Parse ``content`` with the handle's shared parser; returns a tree-sitter Tree."""
    return handle.parser.parse(content.encode("utf-8"))
