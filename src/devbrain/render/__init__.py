"""Text rendering: markup cleanup, highlighting, and segmentation."""

from .highlight import Segment, clean_markup, highlight
from .segmenter import Blank, Paragraph, RenderBlock, Table, segment

__all__ = [
    "Blank",
    "Paragraph",
    "RenderBlock",
    "Segment",
    "Table",
    "clean_markup",
    "highlight",
    "segment",
]
