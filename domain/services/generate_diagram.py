from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from domain.models import DiagramRequest, OutputFormat, SceneDocument
from domain.ports.collaborators import GenerationClient
from domain.services.convert_mermaid_to_scene import MermaidToSceneConverter
from domain.services.normalize_scene import SceneNormalizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    scene: SceneDocument
    format: OutputFormat
    update: Any = None


class GenerateDiagram:
    def __init__(
        self,
        client: GenerationClient,
        converter: MermaidToSceneConverter,
        normalizer: SceneNormalizer,
    ) -> None:
        self.client = client
        self.converter = converter
        self.normalizer = normalizer

    async def run(
        self,
        prompt: str,
        current_scene: Any = None,
        output_format: OutputFormat = "mermaid",
    ) -> GenerationResult:
        request = DiagramRequest(
            prompt=prompt,
            current_scene=current_scene,
            output_format=output_format,
        )
        response = await self.client.generate(request)
        logger.info("Generation service answered with %s output", response.format)

        if response.format == "mermaid":
            converted = await self.converter.convert(str(response.data or ""))
            scene = self.normalizer.normalize_scene(converted.to_scene_payload())
        else:
            scene = self.normalizer.normalize_scene(_as_scene_payload(response.data))
        return GenerationResult(scene=scene, format=response.format, update=response.update)


def _as_scene_payload(data: Any) -> Any:
    # Generators sometimes answer with a bare element list instead of a scene.
    if isinstance(data, list):
        return {"elements": data}
    return data
