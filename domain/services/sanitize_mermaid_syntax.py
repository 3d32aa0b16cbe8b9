from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import List, Optional

SPECIAL_CHARACTERS = frozenset("()/\\:,;!?@#$%^&*")

_STRUCTURAL_LINE = re.compile(r"^\s*(?:graph|flowchart)\b")
# A quoted label may contain the closing delimiter, so it is tried first.
_QUOTED = r'"(?:[^"\\]|\\.)*"'
_QUOTED_SPAN = re.compile(_QUOTED)
_BACKSLASHES_BEFORE_QUOTE = re.compile(r'\\+(?="|$)')


@dataclass(frozen=True)
class LabelRule:
    """Quotes the ``label`` group of a match unless ``keep`` says otherwise."""

    name: str
    pattern: re.Pattern[str]
    keep: Callable[[str], bool] = lambda label: False

    def match_at(self, line: str, pos: int) -> Optional[re.Match[str]]:
        return self.pattern.match(line, pos)

    def rewrite(self, match: re.Match[str]) -> str:
        label = match.group("label")
        if is_quoted(label) or not has_special_characters(label) or self.keep(label):
            return match.group(0)
        return f'{match.group("open")}"{escape_quotes(label)}"{match.group("close")}'


def is_quoted(label: str) -> bool:
    return len(label) >= 2 and label.startswith('"') and label.endswith('"')


def has_special_characters(label: str) -> bool:
    return any(char in SPECIAL_CHARACTERS for char in label)


def escape_quotes(label: str) -> str:
    """Backslash-escape double quotes.

    Backslash runs that would otherwise swallow a quote are doubled, so the
    result always reads back as a single quoted span.
    """
    doubled = _BACKSLASHES_BEFORE_QUOTE.sub(lambda run: run.group(0) * 2, label)
    return doubled.replace('"', '\\"')


def _is_shaped_label(label: str) -> bool:
    # [(cylinder)] belongs to the cylinder rule, [[subroutine]] is left alone.
    return (label.startswith("(") and label.endswith(")")) or label.startswith("[")


LABEL_RULES: Sequence[LabelRule] = (
    LabelRule(
        name="cylinder_node",
        pattern=re.compile(
            rf"(?P<open>\b\w+\[\()(?P<label>{_QUOTED}(?=\)\])|[^\]]*?)(?P<close>\)\])"
        ),
    ),
    LabelRule(
        name="bracket_node",
        pattern=re.compile(rf"(?P<open>\b\w+\[)(?P<label>{_QUOTED}(?=\])|[^\]]*?)(?P<close>\])"),
        keep=_is_shaped_label,
    ),
    LabelRule(
        name="edge_label",
        pattern=re.compile(
            rf"(?P<open>(?:-->|---|==>|-\.->)\|)(?P<label>{_QUOTED}(?=\|)|[^|]*?)(?P<close>\|)"
        ),
    ),
)


def sanitize_line(line: str, rules: Sequence[LabelRule] = LABEL_RULES) -> str:
    """Scan one line left to right, rewriting each label at most once.

    Quoted spans are copied as they are, so nothing inside an already quoted
    label is matched again. An unterminated quote leaves the rest of the line
    untouched.
    """
    if not line.strip() or _STRUCTURAL_LINE.match(line):
        return line
    pieces: List[str] = []
    pos = 0
    while pos < len(line):
        if line[pos] == '"':
            quoted = _QUOTED_SPAN.match(line, pos)
            if quoted is None:
                pieces.append(line[pos:])
                break
            pieces.append(quoted.group(0))
            pos = quoted.end()
            continue
        for rule in rules:
            match = rule.match_at(line, pos)
            if match is not None:
                pieces.append(rule.rewrite(match))
                pos = match.end()
                break
        else:
            pieces.append(line[pos])
            pos += 1
    return "".join(pieces)


def sanitize_mermaid_syntax(source: str) -> str:
    """Quote node and edge labels containing characters Mermaid treats as syntax.

    Works line by line and never touches ``graph``/``flowchart`` declarations,
    blank lines or labels that are already quoted, so applying it twice gives
    the same result as applying it once.
    """
    return "\n".join(sanitize_line(line) for line in source.split("\n"))
