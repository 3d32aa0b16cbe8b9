from __future__ import annotations


class DiagramError(Exception):
    """Base class for failures surfaced to callers of the conversion pipeline."""


class ConversionError(DiagramError):
    """Mermaid text could not be turned into scene elements."""


class ExtractionError(ConversionError):
    pass


class SanitizationError(ConversionError):
    pass


class ParseError(ConversionError):
    """The external Mermaid parser rejected the sanitized syntax."""


class NetworkError(DiagramError):
    """The generation service could not be reached or answered with garbage."""
