"""Drives diagram rendering: two attempts, display state, click wiring."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from .interaction import NodeBindings, NodeClickHandler, attach, fit_to_width
from .normalizer import RenderAttempt, plan_attempts
from .renderer import DiagramRenderError, DiagramRenderer

logger = logging.getLogger(__name__)

RENDER_FAILED_MESSAGE = "Could not render the diagram. The syntax may be invalid."

MIN_ZOOM = 0.2
MAX_ZOOM = 4.0
ZOOM_STEP = 0.2
INLINE_MAX_HEIGHT = "500px"


@dataclass
class RenderOutcome:
    """Result of rendering one chart."""

    ok: bool
    markup: str = ""
    message: str = ""
    attempt: int = 0
    bindings: Optional[NodeBindings] = None

    @classmethod
    def succeeded(cls, markup: str, attempt: int, bindings: NodeBindings) -> "RenderOutcome":
        return cls(ok=True, markup=markup, attempt=attempt, bindings=bindings)

    @classmethod
    def failed(cls, message: str = RENDER_FAILED_MESSAGE) -> "RenderOutcome":
        return cls(ok=False, message=message, attempt=2)


@dataclass
class DiagramDisplay:
    """Inline vs fullscreen presentation and the fullscreen zoom factor."""

    fullscreen: bool = False
    zoom: float = 1.0

    def toggle_fullscreen(self) -> bool:
        self.fullscreen = not self.fullscreen
        return self.fullscreen

    def set_zoom(self, value: float) -> float:
        self.zoom = round(min(MAX_ZOOM, max(MIN_ZOOM, value)), 1)
        return self.zoom

    def zoom_in(self) -> float:
        return self.set_zoom(self.zoom + ZOOM_STEP)

    def zoom_out(self) -> float:
        return self.set_zoom(self.zoom - ZOOM_STEP)

    def reset_zoom(self) -> float:
        return self.set_zoom(1.0)

    @property
    def width_percent(self) -> int:
        """Displayed width in percent; zoom only applies in fullscreen."""
        return round(self.zoom * 100) if self.fullscreen else 100

    @property
    def container_style(self) -> str:
        if self.fullscreen:
            return f"width: {self.width_percent}%; overflow: auto;"
        return f"max-height: {INLINE_MAX_HEIGHT}; overflow: auto;"


class DiagramController:
    """Renders an entry's chart and keeps its node click layer current."""

    def __init__(self, renderer: DiagramRenderer, id_prefix: str = "mermaid"):
        self.renderer = renderer
        self.id_prefix = id_prefix
        self.display = DiagramDisplay()
        self.outcome: Optional[RenderOutcome] = None
        self._lock = asyncio.Lock()

    async def _try(self, attempt: RenderAttempt) -> Optional[str]:
        try:
            return await self.renderer.render(attempt.diagram_id, attempt.source)
        except DiagramRenderError as e:
            logger.warning(f"[DIAGRAM] Attempt {attempt.number} failed for {attempt.diagram_id}: {e}")
            return None

    def _detach(self) -> None:
        if self.outcome is not None and self.outcome.bindings is not None:
            self.outcome.bindings.dispose()

    async def render(
        self,
        chart: Optional[str],
        on_node_click: Optional[NodeClickHandler] = None,
    ) -> Optional[RenderOutcome]:
        """Render ``chart``, retrying once with the repaired source.

        Returns None when there is no chart to draw.
        """
        if not chart or not chart.strip():
            self._detach()
            self.outcome = None
            return None

        async with self._lock:
            self._detach()
            outcome = RenderOutcome.failed()
            for attempt in plan_attempts(chart, self.id_prefix):
                svg = await self._try(attempt)
                if svg is None:
                    continue
                bindings = attach(fit_to_width(svg), on_node_click)
                outcome = RenderOutcome.succeeded(bindings.markup, attempt.number, bindings)
                logger.info(f"[DIAGRAM] Rendered {attempt.diagram_id} on attempt {attempt.number}")
                break
            else:
                logger.error("[DIAGRAM] Both render attempts failed")

            self.outcome = outcome
            return outcome

    def click(self, node_id: str) -> Optional[str]:
        """Dispatch a click on a node of the current rendering."""
        if self.outcome is None or self.outcome.bindings is None:
            return None
        return self.outcome.bindings.click(node_id)
