from __future__ import annotations

import re

_OPENING_FENCE = re.compile(r"^```(?:(?!(?:graph|flowchart)\b)[\w+-]+)?\s*")
_CLOSING_FENCE = re.compile(r"(?:\r?\n)?```\s*$")


def extract_mermaid_syntax(response_text: str) -> str:
    """Return the diagram source inside at most one enclosing code fence."""
    cleaned = response_text.strip()
    cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
    cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()
