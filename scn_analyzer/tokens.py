"""Deterministic token estimate used for output size accounting."""

from __future__ import annotations

import re

_TOKEN_RE = re.compile(r"\w+|[^\w\s]", re.UNICODE)


def count_tokens(text: str) -> int:
    """Count word runs and individual punctuation marks."""
    if not text:
        return 0
    return len(_TOKEN_RE.findall(text))
