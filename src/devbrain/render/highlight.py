"""Markup cleanup and active-term highlighting for entry text."""

import re
from dataclasses import dataclass
from typing import Optional

EMPHASIS_RE = re.compile(r"\*{2,}")
HEADING_RE = re.compile(r"^[ \t]*(?:#{1,6}[ \t]+)+", re.MULTILINE)
LINK_RE = re.compile(r"\[([^\]\n]+)\]\(([^)\n]*)\)")


@dataclass(frozen=True)
class Segment:
    """A run of text, emphasized when it matches the active term."""

    text: str
    emphasized: bool = False


def _clean_once(text: str) -> str:
    text = LINK_RE.sub(r"\1", text)
    text = EMPHASIS_RE.sub("", text)
    text = HEADING_RE.sub("", text)
    return text.replace("`", "")


def clean_markup(text: str) -> str:
    """Strip bold markers, heading markers, backticks and link syntax.

    Each pass only ever shortens the text, so repeating until nothing
    changes terminates and makes the result stable under re-cleaning.
    """
    text = text or ""
    while True:
        cleaned = _clean_once(text)
        if cleaned == text:
            return cleaned
        text = cleaned


def highlight(text: str, active_term: Optional[str]) -> list[Segment]:
    """Split cleaned text into plain and emphasized segments.

    Matching is case-insensitive on the literal term; matched segments keep
    the casing found in the text.
    """
    cleaned = clean_markup(text)
    term = (active_term or "").strip()
    if not term:
        return [Segment(cleaned)] if cleaned else []

    pattern = re.compile(f"({re.escape(term)})", re.IGNORECASE)
    segments = []
    # re.split with one capture group alternates plain / matched pieces
    for index, piece in enumerate(pattern.split(cleaned)):
        if piece:
            segments.append(Segment(piece, emphasized=index % 2 == 1))
    return segments
