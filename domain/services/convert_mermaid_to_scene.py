from __future__ import annotations

import logging
from collections import Counter

from domain.errors import ExtractionError, ParseError, SanitizationError
from domain.models import ConversionResult
from domain.ports.collaborators import MermaidParser
from domain.services.extract_mermaid_syntax import extract_mermaid_syntax
from domain.services.sanitize_mermaid_syntax import sanitize_mermaid_syntax

logger = logging.getLogger(__name__)

DEFAULT_FONT_SIZE = 20


class MermaidToSceneConverter:
    """Runs a generator response through extraction, sanitization and the parser.

    The parser already emits complete elements, so they are returned
    untouched; callers that need a normalized scene run the normalizer.
    """

    def __init__(self, parser: MermaidParser, font_size: int = DEFAULT_FONT_SIZE) -> None:
        self.parser = parser
        self.font_size = font_size

    async def convert(self, raw_response: str) -> ConversionResult:
        try:
            extracted = extract_mermaid_syntax(raw_response)
        except Exception as exc:  # noqa: BLE001
            raise ExtractionError(_failure_message(exc)) from exc
        try:
            syntax = sanitize_mermaid_syntax(extracted)
        except Exception as exc:  # noqa: BLE001
            raise SanitizationError(_failure_message(exc)) from exc

        logger.debug("Converting Mermaid syntax:\n%s", syntax)
        try:
            result = await self.parser.parse(syntax, {"fontSize": self.font_size})
        except Exception as exc:  # noqa: BLE001
            logger.error("Mermaid parser rejected diagram: %s", exc)
            raise ParseError(_failure_message(exc)) from exc

        breakdown = Counter(str(element.get("type")) for element in result.elements)
        logger.info(
            "Converted Mermaid diagram into %d elements (%s)",
            len(result.elements),
            ", ".join(f"{kind}={count}" for kind, count in sorted(breakdown.items())),
        )
        return ConversionResult(elements=result.elements, files=result.files or None)


def _failure_message(exc: BaseException) -> str:
    return f"Failed to convert Mermaid diagram: {exc}"
