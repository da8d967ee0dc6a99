"""Mermaid diagram repair, rendering, and interaction."""

from .controller import DiagramController, DiagramDisplay, RenderOutcome
from .interaction import NodeBindings, attach, clean_label, fit_to_width
from .normalizer import RenderAttempt, normalize, plan_attempts, repair_round_nodes
from .renderer import DiagramRenderError, DiagramRenderer, DiagramSyntaxError, MermaidInkRenderer

__all__ = [
    "DiagramController",
    "DiagramDisplay",
    "DiagramRenderError",
    "DiagramRenderer",
    "DiagramSyntaxError",
    "MermaidInkRenderer",
    "NodeBindings",
    "RenderAttempt",
    "RenderOutcome",
    "attach",
    "clean_label",
    "fit_to_width",
    "normalize",
    "plan_attempts",
    "repair_round_nodes",
]
