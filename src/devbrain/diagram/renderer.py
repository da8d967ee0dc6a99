"""Diagram drawing backends."""

import base64
import logging
import re
from typing import Protocol

import httpx

logger = logging.getLogger(__name__)

SVG_ID_RE = re.compile(r'(<svg\b[^>]*?\bid=")[^"]*(")')


class DiagramRenderError(Exception):
    """The drawing backend could not be reached or answered unexpectedly."""


class DiagramSyntaxError(DiagramRenderError):
    """The drawing backend rejected the diagram source."""


class DiagramRenderer(Protocol):
    """Draws Mermaid source into SVG markup."""

    async def render(self, diagram_id: str, source: str) -> str: ...


class MermaidInkRenderer:
    """Renders diagrams through a mermaid.ink compatible HTTP service.

    The service takes the base64url-encoded source in the path and answers
    with SVG; a 4xx status means Mermaid could not parse the source.
    """

    def __init__(self, base_url: str = "https://mermaid.ink", timeout: float = 20.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def svg_url(self, source: str) -> str:
        encoded = base64.urlsafe_b64encode(source.encode("utf-8")).decode("ascii")
        return f"{self.base_url}/svg/{encoded}"

    async def render(self, diagram_id: str, source: str) -> str:
        url = self.svg_url(source)
        logger.debug(f"[DIAGRAM] Requesting {diagram_id} ({len(source)} chars)")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url)
        except httpx.RequestError as e:
            raise DiagramRenderError(f"Diagram service unreachable: {e}") from e

        if 400 <= response.status_code < 500:
            raise DiagramSyntaxError(f"Diagram rejected (HTTP {response.status_code})")
        if response.status_code != 200:
            raise DiagramRenderError(f"Diagram service error (HTTP {response.status_code})")

        svg = response.text
        if "<svg" not in svg:
            raise DiagramRenderError("Diagram service did not return SVG")

        # Give the drawing the id it was requested under
        return SVG_ID_RE.sub(lambda m: f"{m.group(1)}{diagram_id}{m.group(2)}", svg, count=1)
