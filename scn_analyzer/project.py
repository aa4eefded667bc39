"""Project-level analysis: input parsing, filtering, extraction, linking."""

from __future__ import annotations

import json
import logging
import posixpath
import time
from typing import Callable, Optional, Protocol, Sequence

from pydantic import TypeAdapter, ValidationError

from scn_analyzer.extract import extract_imports, extract_symbols
from scn_analyzer.globs import is_included, normalize_path
from scn_analyzer.languages import is_initialized, language_for_path, parse_source
from scn_analyzer.models import FileContent, ProjectAnalysis, SourceFile
from scn_analyzer.tokens import count_tokens
from scn_common.errors import AnalysisCancelled, InvalidInputError, NotReadyError
from scn_common.log_schema import ProgressEvent

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]

_RESOLVE_EXTENSIONS = ("", ".ts", ".tsx", ".d.ts", ".js", ".jsx", ".mjs", ".cjs", ".css")
_FILES_ADAPTER = TypeAdapter(list[FileContent])

PARSE_SHARE = 90.0


class StopSignal(Protocol):
    def should_stop(self) -> bool: ...


def parse_files_input(files_input: str) -> list[FileContent]:
    """Parse the raw JSON file list; raises InvalidInputError when malformed."""
    try:
        payload = json.loads(files_input)
        if not isinstance(payload, list):
            raise ValueError("Input is not an array.")
        return _FILES_ADAPTER.validate_python(payload)
    except (ValueError, ValidationError) as exc:
        raise InvalidInputError(f"Invalid JSON input: {exc}", cause=exc) from exc


def _resolve_import(
    importer: str, spec: str, by_path: dict[str, SourceFile]
) -> Optional[SourceFile]:
    if not spec.startswith((".", "/")):
        return None
    base = spec.lstrip("/") if spec.startswith("/") else posixpath.join(posixpath.dirname(importer), spec)
    base = posixpath.normpath(base)
    if base.endswith((".js", ".jsx")):
        # TS projects import compiled names; try the source file first.
        stem = posixpath.splitext(base)[0]
        for extension in (".ts", ".tsx"):
            if stem + extension in by_path:
                return by_path[stem + extension]
    for extension in _RESOLVE_EXTENSIONS:
        candidate = by_path.get(base + extension)
        if candidate is not None:
            return candidate
    for extension in _RESOLVE_EXTENSIONS[1:]:
        candidate = by_path.get(posixpath.join(base, "index" + extension))
        if candidate is not None:
            return candidate
    return None


def _link(source_files: list[SourceFile]) -> None:
    by_path = {source.path: source for source in source_files}
    for source in source_files:
        for spec in source.imports:
            target = _resolve_import(source.path, spec, by_path)
            if target is None:
                logger.debug("Unresolved import %r in %s", spec, source.path)
                continue
            if target.id == source.id or target.id in source.outgoing:
                continue
            source.outgoing.append(target.id)
            target.incoming.append(source.id)


def _check(signal: StopSignal | None) -> None:
    if signal is not None and signal.should_stop():
        raise AnalysisCancelled("Analysis cancelled")


def analyze_project(
    files: Sequence[FileContent],
    *,
    include: Sequence[str] | None = None,
    exclude: Sequence[str] | None = None,
    on_progress: ProgressCallback | None = None,
    signal: StopSignal | None = None,
) -> ProjectAnalysis:
    """Parse every included file and link relative imports between them.

    ``signal`` is checked before each file; when it fires the analysis raises
    AnalysisCancelled. Progress is reported in non-decreasing percentages.
    """
    if not is_initialized():
        raise NotReadyError("Parser not initialized; call initialize_parser() first")
    started = time.perf_counter()

    def _progress(percentage: float, message: str) -> None:
        if on_progress is not None:
            on_progress(ProgressEvent(percentage=min(100.0, percentage), message=message))

    _progress(0, "Filtering files...")
    selected = [f for f in files if is_included(f.path, include, exclude)]
    logger.info("Analyzing %d of %d files", len(selected), len(files))

    source_files: list[SourceFile] = []
    total = max(len(selected), 1)
    for position, file in enumerate(selected):
        _check(signal)
        path = normalize_path(file.path)
        handle = language_for_path(path)
        source = SourceFile(id=position + 1, path=path, language=handle, token_count=count_tokens(file.content))
        if handle is None:
            logger.warning("No grammar for %s; keeping it without symbols", path)
        else:
            tree = parse_source(handle, file.content)
            source.ast = tree
            source.symbols = extract_symbols(source.id, handle.name, tree)
            source.imports = extract_imports(handle.name, tree)
            logger.debug("Parsed %s: %d symbols", path, len(source.symbols))
        source_files.append(source)
        _progress(PARSE_SHARE * (position + 1) / total, f"Parsed {path}")

    _check(signal)
    _progress(PARSE_SHARE, "Resolving dependencies...")
    _link(source_files)
    elapsed_ms = (time.perf_counter() - started) * 1000
    _progress(100, "Analysis complete.")
    logger.info("Analysis finished in %.1f ms", elapsed_ms)
    return ProjectAnalysis(source_files=source_files, elapsed_time_ms=elapsed_ms)

