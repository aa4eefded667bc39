"""Data model produced by the analyzer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class FileContent(BaseModel):
    """One input file: a project-relative path and its source text."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    path: str
    content: str


@dataclass
class LanguageHandle:
    """Per-language state shared by every file of that language.

    ``parser`` and ``loaded_language`` are process-local runtime objects and
    cannot be pickled; the handle itself is a singleton owned by the registry.
    """

    name: str
    extensions: tuple[str, ...]
    parser: Any = None
    loaded_language: Any = None


@dataclass(frozen=True)
class CodeSymbol:
    id: str
    name: str
    kind: str
    line: int
    is_exported: bool = False
    modifiers: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    parent: Optional[str] = None

    @property
    def is_private(self) -> bool:
        return "private" in self.modifiers or self.name.startswith(("#", "_"))


@dataclass
class SourceFile:
    id: int
    path: str
    language: Optional[LanguageHandle]
    symbols: list[CodeSymbol] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)
    outgoing: list[int] = field(default_factory=list)
    incoming: list[int] = field(default_factory=list)
    token_count: int = 0
    ast: Any = None


@dataclass
class ProjectAnalysis:
    source_files: list[SourceFile]
    elapsed_time_ms: float
