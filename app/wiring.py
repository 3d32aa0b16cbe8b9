from __future__ import annotations

import random

from adapters.generation.http_client import HttpGenerationClient
from adapters.mermaid.http_parser import HttpMermaidParser
from app.config import AppSettings
from domain.ports.collaborators import GenerationClient, MermaidParser
from domain.services.convert_mermaid_to_scene import MermaidToSceneConverter
from domain.services.generate_diagram import GenerateDiagram
from domain.services.normalize_scene import SceneNormalizer


def build_mermaid_parser(settings: AppSettings) -> MermaidParser:
    return HttpMermaidParser(
        settings.parser.endpoint_url,
        timeout_seconds=settings.parser.timeout_seconds,
    )


def build_generation_client(settings: AppSettings) -> GenerationClient:
    return HttpGenerationClient(
        settings.generation.base_url,
        endpoint=settings.generation.endpoint,
        timeout_seconds=settings.generation.timeout_seconds,
    )


def build_converter(
    settings: AppSettings,
    parser: MermaidParser | None = None,
) -> MermaidToSceneConverter:
    return MermaidToSceneConverter(
        parser or build_mermaid_parser(settings),
        font_size=settings.parser.font_size,
    )


def build_normalizer(seed: int | None = None) -> SceneNormalizer:
    return SceneNormalizer(random.Random(seed) if seed is not None else None)


def build_generate_diagram(
    settings: AppSettings,
    client: GenerationClient | None = None,
    parser: MermaidParser | None = None,
) -> GenerateDiagram:
    return GenerateDiagram(
        client or build_generation_client(settings),
        build_converter(settings, parser),
        build_normalizer(),
    )
