from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from domain.models import ConversionResult, DiagramRequest, DiagramResponse


class MermaidParser(Protocol):
    async def parse(self, syntax: str, options: Mapping[str, Any]) -> ConversionResult: ...


class GenerationClient(Protocol):
    async def generate(self, request: DiagramRequest) -> DiagramResponse: ...
