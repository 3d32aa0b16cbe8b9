from __future__ import annotations

import asyncio

import pytest

from domain.errors import ConversionError, ExtractionError, ParseError
from domain.services.convert_mermaid_to_scene import MermaidToSceneConverter
from tests.helpers.fakes import FakeMermaidParser

RESPONSE = "```mermaid\ngraph TD\nA[Hello (world)]-->|cost: $5|B\n```"


def test_convert_passes_sanitized_syntax_to_parser() -> None:
    parser = FakeMermaidParser(elements=[{"type": "rectangle", "id": "A"}])
    converter = MermaidToSceneConverter(parser)

    result = asyncio.run(converter.convert(RESPONSE))

    assert parser.calls == [
        ('graph TD\nA["Hello (world)"]-->|"cost: $5"|B', {"fontSize": 20}),
    ]
    assert result.elements == [{"type": "rectangle", "id": "A"}]
    assert result.files is None


def test_convert_returns_parser_elements_untouched() -> None:
    elements = [{"type": "text", "id": "t"}, {"type": "arrow", "id": "e"}]
    files = {"file-1": {"mimeType": "image/svg+xml"}}
    parser = FakeMermaidParser(elements=elements, files=files)

    result = asyncio.run(MermaidToSceneConverter(parser, font_size=16).convert("graph TD\nA-->B"))

    assert result.elements is elements
    assert result.files == files
    assert parser.calls[0][1] == {"fontSize": 16}


def test_parser_failure_becomes_parse_error() -> None:
    original = RuntimeError("Parse error on line 2")
    converter = MermaidToSceneConverter(FakeMermaidParser(error=original))

    with pytest.raises(ParseError) as exc_info:
        asyncio.run(converter.convert("graph TD\nA-->"))

    assert isinstance(exc_info.value, ConversionError)
    assert "Failed to convert Mermaid diagram" in str(exc_info.value)
    assert "Parse error on line 2" in str(exc_info.value)
    assert exc_info.value.__cause__ is original


def test_non_text_input_becomes_extraction_error() -> None:
    parser = FakeMermaidParser()
    converter = MermaidToSceneConverter(parser)

    with pytest.raises(ExtractionError) as exc_info:
        asyncio.run(converter.convert(None))  # type: ignore[arg-type]

    assert isinstance(exc_info.value, ConversionError)
    assert not isinstance(exc_info.value, ParseError)
    assert parser.calls == []
