from __future__ import annotations

import random
from collections.abc import Mapping
from typing import Any, List

from domain.models import ConversionResult, DiagramRequest, DiagramResponse
from domain.services.normalize_scene import SceneNormalizer

FIXED_NOW = 1_700_000_000_000


def fixed_normalizer(seed: int = 7) -> SceneNormalizer:
    return SceneNormalizer(random.Random(seed), clock=lambda: FIXED_NOW)


class FakeMermaidParser:
    def __init__(
        self,
        elements: List[dict] | None = None,
        files: dict | None = None,
        error: Exception | None = None,
    ) -> None:
        self.elements = elements if elements is not None else []
        self.files = files
        self.error = error
        self.calls: List[tuple[str, dict[str, Any]]] = []

    async def parse(self, syntax: str, options: Mapping[str, Any]) -> ConversionResult:
        self.calls.append((syntax, dict(options)))
        if self.error is not None:
            raise self.error
        return ConversionResult(elements=self.elements, files=self.files)


class FakeGenerationClient:
    def __init__(
        self,
        response: DiagramResponse | None = None,
        error: Exception | None = None,
    ) -> None:
        self.response = response
        self.error = error
        self.requests: List[DiagramRequest] = []

    async def generate(self, request: DiagramRequest) -> DiagramResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response
