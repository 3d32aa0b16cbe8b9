from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from domain.errors import ParseError
from domain.models import ConversionResult
from domain.ports.collaborators import MermaidParser

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., httpx.AsyncClient]


class HttpMermaidParser(MermaidParser):
    """Delegates parsing to a sidecar that wraps the Mermaid-to-Excalidraw library.

    The sidecar accepts ``{"syntax": ..., "options": {...}}`` and answers with
    ``{"elements": [...], "files": {...}}``; any other answer is a parse failure.
    """

    def __init__(
        self,
        endpoint_url: str,
        timeout_seconds: float = 30.0,
        client_factory: ClientFactory = httpx.AsyncClient,
    ) -> None:
        self.endpoint_url = endpoint_url
        self.timeout_seconds = timeout_seconds
        self.client_factory = client_factory

    async def parse(self, syntax: str, options: Mapping[str, Any]) -> ConversionResult:
        try:
            async with self.client_factory(timeout=self.timeout_seconds) as client:
                resp = await client.post(
                    self.endpoint_url,
                    json={"syntax": syntax, "options": dict(options)},
                )
        except httpx.HTTPError as exc:
            raise ParseError(f"Mermaid parser unavailable: {exc}") from exc

        if resp.is_error:
            raise ParseError(_error_detail(resp))
        try:
            payload = resp.json()
        except ValueError as exc:
            raise ParseError("Mermaid parser returned invalid JSON") from exc

        elements = payload.get("elements") if isinstance(payload, dict) else None
        if not isinstance(elements, list):
            raise ParseError("Mermaid parser response has no element list")
        files = payload.get("files")
        logger.debug("Mermaid parser produced %d elements", len(elements))
        return ConversionResult(
            elements=[element for element in elements if isinstance(element, dict)],
            files=files if isinstance(files, dict) and files else None,
        )


def _error_detail(resp: httpx.Response) -> str:
    try:
        payload = resp.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in ("error", "message", "detail"):
            if payload.get(key):
                return str(payload[key])
    return resp.text.strip() or f"HTTP {resp.status_code}"
