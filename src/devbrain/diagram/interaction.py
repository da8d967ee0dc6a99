"""Post-processing of rendered SVG and the node click layer on top of it."""

import logging
import re
from typing import Callable, Optional

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

LABEL_ARTIFACTS_RE = re.compile(r"[\[\]\(\)\{\}\"'`]")
MAX_WIDTH_RE = re.compile(r"max-width\s*:\s*[^;]*;?\s*", re.IGNORECASE)

NodeClickHandler = Callable[[str], None]


def _parse_svg(markup: str) -> tuple[BeautifulSoup, Optional[Tag]]:
    soup = BeautifulSoup(markup, "xml")
    return soup, soup.find("svg")


def _classes(tag: Tag) -> list[str]:
    value = tag.get("class") or ""
    return value.split() if isinstance(value, str) else list(value)


def clean_label(text: str) -> str:
    """Strip bracket, quote and paren artifacts from a node's visible text."""
    return " ".join(LABEL_ARTIFACTS_RE.sub(" ", text or "").split())


def fit_to_width(markup: str) -> str:
    """Make the SVG scale with its container width.

    Mermaid pins a pixel ``max-width``; dropping it (and the fixed height)
    lets the surrounding zoom control size the drawing.
    """
    soup, svg = _parse_svg(markup)
    if svg is None:
        return markup
    svg["width"] = "100%"
    if svg.has_attr("height"):
        del svg["height"]
    style = MAX_WIDTH_RE.sub("", svg.get("style", "")).strip()
    if style:
        svg["style"] = style
    elif svg.has_attr("style"):
        del svg["style"]
    return str(svg)


class NodeBindings:
    """Click handlers bound to the nodes of one rendered diagram.

    ``dispose`` must be called before the markup is replaced; clicks on a
    disposed binding are ignored.
    """

    def __init__(self, markup: str, labels: dict[str, str], on_node_click: Optional[NodeClickHandler]):
        self.markup = markup
        self.labels = labels
        self._on_node_click = on_node_click

    @property
    def attached(self) -> bool:
        return self._on_node_click is not None

    def click(self, node_id: str) -> Optional[str]:
        """Forward the cleaned label of ``node_id`` to the click handler."""
        if self._on_node_click is None:
            return None
        label = self.labels.get(node_id)
        if not label:
            logger.debug(f"[DIAGRAM] Click on unknown node {node_id}")
            return None
        self._on_node_click(label)
        return label

    def dispose(self) -> None:
        self._on_node_click = None


def attach(markup: str, on_node_click: Optional[NodeClickHandler] = None) -> NodeBindings:
    """Tag every rendered node with its label and bind the click handler."""
    soup, svg = _parse_svg(markup)
    if svg is None:
        return NodeBindings(markup, {}, on_node_click)

    labels: dict[str, str] = {}
    nodes = [g for g in svg.find_all("g") if "node" in _classes(g)]
    for index, node in enumerate(nodes):
        node_id = node.get("id") or f"node-{index}"
        node["id"] = node_id
        label = clean_label(node.get_text(" ", strip=True))
        if not label:
            continue
        labels[node_id] = label
        node["data-node-label"] = label
        if on_node_click is not None:
            existing = node.get("style", "").strip().rstrip(";")
            node["style"] = f"{existing}; cursor: pointer" if existing else "cursor: pointer"

    logger.debug(f"[DIAGRAM] Bound {len(labels)} clickable node(s)")
    return NodeBindings(str(svg), labels, on_node_click)
