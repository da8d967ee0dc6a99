"""Tests for devbrain.diagram.controller module."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from devbrain.diagram.controller import (
    RENDER_FAILED_MESSAGE,
    DiagramController,
    DiagramDisplay,
)
from devbrain.diagram.renderer import DiagramRenderError, DiagramSyntaxError


def parens_rejecting_renderer(svg: str):
    """Renderer that, like a strict Mermaid build, refuses round node shapes."""
    renderer = MagicMock()

    async def render(diagram_id, source):
        if "(" in source:
            raise DiagramSyntaxError("Parse error on line 2")
        return svg

    renderer.render = AsyncMock(side_effect=render)
    return renderer


class TestDiagramController:
    """Tests for DiagramController class."""

    async def test_empty_chart_renders_nothing(self, mock_renderer):
        controller = DiagramController(mock_renderer)

        assert await controller.render(None) is None
        assert await controller.render("   ") is None
        mock_renderer.render.assert_not_called()

    async def test_first_attempt_success(self, mock_renderer):
        controller = DiagramController(mock_renderer)

        outcome = await controller.render("graph TD\nA[Start] --> B[End]")

        assert outcome.ok
        assert outcome.attempt == 1
        assert 'width="100%"' in outcome.markup
        assert "max-width" not in outcome.markup
        mock_renderer.render.assert_awaited_once()
        diagram_id, source = mock_renderer.render.await_args.args
        assert source == "graph TD\nA[Start] --> B[End]"

    async def test_fallback_repairs_round_nodes(self, sample_svg):
        renderer = parens_rejecting_renderer(sample_svg)
        controller = DiagramController(renderer)

        outcome = await controller.render("```mermaid\\ngraph TD\\nA(Start) --> B(End)\\n```")

        assert outcome.ok
        assert outcome.attempt == 2
        assert renderer.render.await_count == 2
        (first_id, first_src), (second_id, second_src) = [c.args for c in renderer.render.await_args_list]
        assert first_src == "graph TD\nA(Start) --> B(End)"
        assert second_src == "graph TD\nA[Start] --> B[End]"
        assert first_id != second_id

    async def test_both_attempts_fail(self):
        renderer = MagicMock()
        renderer.render = AsyncMock(side_effect=DiagramSyntaxError("bad"))
        controller = DiagramController(renderer)

        outcome = await controller.render("graph TD\nA --> ")

        assert not outcome.ok
        assert outcome.message == RENDER_FAILED_MESSAGE
        assert outcome.markup == ""
        assert renderer.render.await_count == 2

    async def test_transport_errors_count_as_failed_attempts(self, sample_svg):
        renderer = MagicMock()
        renderer.render = AsyncMock(side_effect=[DiagramRenderError("timeout"), sample_svg])
        controller = DiagramController(renderer)

        outcome = await controller.render("graph TD\nA[x] --> B[y]")

        assert outcome.ok
        assert outcome.attempt == 2

    async def test_node_click_forwards_label(self, mock_renderer):
        clicked = []
        controller = DiagramController(mock_renderer)
        await controller.render("graph TD\nA[x]", clicked.append)

        assert controller.click("flowchart-B-1") == "Run git reset"
        assert clicked == ["Run git reset"]

    async def test_rerender_disposes_previous_bindings(self, mock_renderer):
        first_clicks, second_clicks = [], []
        controller = DiagramController(mock_renderer)

        first = await controller.render("graph TD\nA[x]", first_clicks.append)
        second = await controller.render("graph TD\nA[x]", second_clicks.append)

        assert not first.bindings.attached
        assert first.bindings.click("flowchart-A-0") is None
        controller.click("flowchart-A-0")
        assert first_clicks == []
        assert second_clicks == ["Commit made"]
        assert second.bindings.attached

    async def test_clearing_chart_detaches_bindings(self, mock_renderer):
        controller = DiagramController(mock_renderer)
        outcome = await controller.render("graph TD\nA[x]", lambda label: None)

        await controller.render(None)

        assert not outcome.bindings.attached
        assert controller.click("flowchart-A-0") is None

    async def test_renders_do_not_interleave(self, sample_svg):
        events = []
        renderer = MagicMock()

        async def render(diagram_id, source):
            events.append(("start", source))
            await asyncio.sleep(0)
            events.append(("end", source))
            return sample_svg

        renderer.render = AsyncMock(side_effect=render)
        controller = DiagramController(renderer)

        await asyncio.gather(
            controller.render("graph TD\nA[one]"),
            controller.render("graph TD\nA[two]"),
        )

        assert [kind for kind, _ in events] == ["start", "end", "start", "end"]


class TestDiagramDisplay:
    """Tests for DiagramDisplay class."""

    def test_defaults_inline(self):
        display = DiagramDisplay()

        assert not display.fullscreen
        assert display.zoom == 1.0
        assert display.width_percent == 100
        assert "max-height" in display.container_style

    def test_toggle_fullscreen(self):
        display = DiagramDisplay()

        assert display.toggle_fullscreen() is True
        assert display.toggle_fullscreen() is False

    def test_zoom_steps(self):
        display = DiagramDisplay(fullscreen=True)

        assert display.zoom_in() == 1.2
        assert display.zoom_in() == 1.4
        assert display.zoom_out() == 1.2
        assert display.width_percent == 120
        assert "width: 120%" in display.container_style

    @pytest.mark.parametrize(
        "steps, method, expected",
        [(30, "zoom_in", 4.0), (30, "zoom_out", 0.2)],
    )
    def test_zoom_is_clamped(self, steps, method, expected):
        display = DiagramDisplay()
        for _ in range(steps):
            getattr(display, method)()

        assert display.zoom == expected

    def test_zoom_only_affects_fullscreen_width(self):
        display = DiagramDisplay()
        display.zoom_in()

        assert display.width_percent == 100

    def test_reset_zoom(self):
        display = DiagramDisplay(zoom=3.0)
        assert display.reset_zoom() == 1.0
