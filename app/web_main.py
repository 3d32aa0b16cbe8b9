from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast

import orjson
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from adapters.excalidraw.url_encoder import build_share_url
from app.config import AppSettings, load_settings
from app.wiring import build_converter, build_generate_diagram, build_normalizer
from domain.errors import ConversionError, NetworkError
from domain.models import OutputFormat
from domain.ports.collaborators import GenerationClient, MermaidParser
from domain.services.convert_mermaid_to_scene import MermaidToSceneConverter
from domain.services.extract_mermaid_syntax import extract_mermaid_syntax
from domain.services.generate_diagram import GenerateDiagram
from domain.services.normalize_scene import SceneNormalizer
from domain.services.sanitize_mermaid_syntax import sanitize_mermaid_syntax

logger = logging.getLogger(__name__)


class MermaidPayload(BaseModel):
    text: str


class GeneratePayload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    prompt: str = Field(..., min_length=1)
    current_scene: Any = None
    output_format: OutputFormat = "mermaid"


@dataclass(frozen=True)
class ServiceContext:
    settings: AppSettings
    normalizer: SceneNormalizer
    converter: MermaidToSceneConverter
    generator: GenerateDiagram


def create_app(
    settings: AppSettings,
    generation_client: GenerationClient | None = None,
    parser: MermaidParser | None = None,
) -> FastAPI:
    app = FastAPI(title=settings.title)
    app.state.context = ServiceContext(
        settings=settings,
        normalizer=build_normalizer(),
        converter=build_converter(settings, parser),
        generator=build_generate_diagram(settings, generation_client, parser),
    )

    @app.get("/health")
    def health() -> ORJSONResponse:
        return ORJSONResponse({"status": "ok"})

    @app.post("/api/sanitize")
    def api_sanitize(payload: MermaidPayload) -> ORJSONResponse:
        syntax = sanitize_mermaid_syntax(extract_mermaid_syntax(payload.text))
        return ORJSONResponse({"syntax": syntax})

    @app.post("/api/normalize")
    async def api_normalize(
        request: Request,
        context: ServiceContext = Depends(get_context),
    ) -> ORJSONResponse:
        scene = await read_json_body(request)
        document = context.normalizer.normalize_scene(scene)
        return ORJSONResponse(document.to_dict())

    @app.post("/api/convert")
    async def api_convert(
        payload: MermaidPayload,
        context: ServiceContext = Depends(get_context),
    ) -> ORJSONResponse:
        try:
            converted = await context.converter.convert(payload.text)
        except ConversionError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        document = context.normalizer.normalize_scene(converted.to_scene_payload())
        return ORJSONResponse(document.to_dict())

    @app.post("/api/generate")
    async def api_generate(
        payload: GeneratePayload,
        context: ServiceContext = Depends(get_context),
    ) -> ORJSONResponse:
        try:
            result = await context.generator.run(
                payload.prompt,
                current_scene=payload.current_scene,
                output_format=payload.output_format,
            )
        except NetworkError as exc:
            logger.warning("Diagram generation failed: %s", exc)
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        except ConversionError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return ORJSONResponse(
            {
                "format": result.format,
                "update": result.update,
                "scene": result.scene.to_dict(),
            }
        )

    @app.post("/api/share-url")
    async def api_share_url(
        request: Request,
        context: ServiceContext = Depends(get_context),
    ) -> ORJSONResponse:
        scene = await read_json_body(request)
        document = context.normalizer.normalize_scene(scene)
        url = build_share_url(context.settings.excalidraw_base_url, document)
        return ORJSONResponse({"url": url})

    return app


def get_context(request: Request) -> ServiceContext:
    return cast(ServiceContext, request.app.state.context)


async def read_json_body(request: Request) -> Any:
    raw_bytes = await request.body()
    if not raw_bytes.strip():
        return None
    try:
        return orjson.loads(raw_bytes)
    except orjson.JSONDecodeError as exc:
        raise HTTPException(status_code=400, detail="Request body is not valid JSON") from exc


app = create_app(load_settings())
