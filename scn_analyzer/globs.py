"""Include/exclude glob matching for project paths."""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Sequence


def normalize_path(path: str) -> str:
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a glob into a regex.

    ``**/`` matches zero or more directories, ``**`` anything, ``*`` and ``?``
    stay within one path segment.
    """
    pattern = normalize_path(pattern.strip())
    out: list[str] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
            continue
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
            continue
        if char == "*":
            out.append("[^/]*")
        elif char == "?":
            out.append("[^/]")
        elif char == "[":
            end = pattern.find("]", i + 1)
            if end == -1:
                out.append(re.escape(char))
            else:
                body = pattern[i + 1:end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append(f"[{body}]")
                i = end
        else:
            out.append(re.escape(char))
        i += 1
    return re.compile("".join(out) + r"\Z")


def matches_any(path: str, patterns: Iterable[str]) -> bool:
    candidate = normalize_path(path)
    return any(compile_glob(p).match(candidate) for p in patterns if p.strip())


def is_included(
    path: str,
    include: Sequence[str] | None,
    exclude: Sequence[str] | None,
) -> bool:
    """Exclude wins over include; an empty include list includes everything."""
    if exclude and matches_any(path, exclude):
        return False
    if include and any(p.strip() for p in include):
        return matches_any(path, include)
    return True
