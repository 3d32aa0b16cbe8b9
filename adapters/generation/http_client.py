from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from domain.errors import NetworkError
from domain.models import DiagramRequest, DiagramResponse
from domain.ports.collaborators import GenerationClient

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "/webhook/generate-diagram"

ClientFactory = Callable[..., httpx.AsyncClient]


class HttpGenerationClient(GenerationClient):
    def __init__(
        self,
        base_url: str,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout_seconds: float = 60.0,
        client_factory: ClientFactory = httpx.AsyncClient,
    ) -> None:
        self.url = f"{base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        self.timeout_seconds = timeout_seconds
        self.client_factory = client_factory

    async def generate(self, request: DiagramRequest) -> DiagramResponse:
        try:
            async with self.client_factory(timeout=self.timeout_seconds) as client:
                resp = await client.post(
                    self.url,
                    json=request.to_payload(),
                    headers={"Content-Type": "application/json"},
                )
                resp.raise_for_status()
                payload = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Error sending diagram request to %s: %s", self.url, exc)
            raise NetworkError(f"Diagram generation request failed: {exc}") from exc
        return parse_generation_payload(payload)


def parse_generation_payload(payload: Any) -> DiagramResponse:
    """Pick the response object, which the service may wrap in a one-item list."""
    if isinstance(payload, list):
        if not payload:
            raise NetworkError("Diagram generation service returned an empty response")
        payload = payload[0]
    try:
        return DiagramResponse.model_validate(payload)
    except ValidationError as exc:
        raise NetworkError(f"Unexpected diagram generation response: {exc}") from exc
