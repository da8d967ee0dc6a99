"""Repair passes for Mermaid source emitted by the analysis model.

Each pass is a pure ``str -> str`` function. ``normalize`` runs the primary
pipeline; ``repair_round_nodes`` is kept separate because it is only applied
when the normalized source has already failed to render once.
"""

import re
import uuid
from dataclasses import dataclass

FENCE_RE = re.compile(r"```[ \t]*(?:mermaid)?", re.IGNORECASE)
LANGUAGE_TAG_RE = re.compile(r"^\s*mermaid\b", re.IGNORECASE)
HEADER_RE = re.compile(
    r"^([ \t]*(?:graph|flowchart)[ \t]+(?:TD|TB|BT|RL|LR))[ \t]*(?=[^\s;])",
    re.IGNORECASE | re.MULTILINE,
)
# A closing bracket, paren, brace or quote glued to the next node declaration,
# e.g. ``A[Start]B[End]`` or ``A[Start] B(End)``.
ADJACENT_NODE_RE = re.compile(r"([\]\)\}\"])[ \t]*(?=[A-Z][A-Za-z0-9_]*[\[\(\{])")
# ``Id(label)`` used as a node shape: at line start, after an arrow or link
# (``-->``, ``---``, ``==>``, ``-.->``, ``~~~``, ``--o``, ``--x``), after an
# edge label, or after a ``&`` / ``;`` statement separator.
ROUND_NODE_RE = re.compile(
    r"(^[ \t]*|(?:-->|---|==>|-\.->|~~~|[&;|])[ \t]*|--[ox][ \t]+)"
    r"([A-Za-z][A-Za-z0-9_]*)\(([^()\n]*)\)",
    re.MULTILINE,
)
OPENERS = "[({"
CLOSERS = "])}"


def _label_depth(text: str) -> int:
    """Bracket nesting at the end of ``text``, ignoring quoted strings."""
    depth = 0
    quoted = False
    for char in text:
        if char == '"':
            quoted = not quoted
        elif quoted:
            continue
        elif char in OPENERS:
            depth += 1
        elif char in CLOSERS:
            depth = max(depth - 1, 0)
    return depth


def _inside_label(source: str, position: int) -> bool:
    line_start = source.rfind("\n", 0, position) + 1
    return _label_depth(source[line_start:position]) > 0


def strip_fences(source: str) -> str:
    """Remove markdown code fences and a stray leading ``mermaid`` tag."""
    source = FENCE_RE.sub("", source)
    return LANGUAGE_TAG_RE.sub("", source).strip()


def unescape_newlines(source: str) -> str:
    """Turn literal backslash-n sequences into line breaks."""
    return source.replace("\\n", "\n").strip()


def break_after_header(source: str) -> str:
    """Put the first statement on its own line after ``graph TD`` and friends."""
    return HEADER_RE.sub(lambda m: m.group(1) + "\n", source)


def split_adjacent_nodes(source: str) -> str:
    """Separate node declarations that were emitted back to back.

    A closer that sits inside a still-open label, as in ``A[Call fn() Then(x)]``,
    is part of the label text and is left alone.
    """

    def split(match: re.Match) -> str:
        if _inside_label(source, match.end(1)):
            return match.group(0)
        return match.group(1) + "\n"

    return ADJACENT_NODE_RE.sub(split, source)


def repair_round_nodes(source: str) -> str:
    """Replace round node shapes with square ones.

    Circle shapes such as ``A((x))`` are not matched, since their inner
    parentheses are not preceded by an identifier. Parentheses inside another
    node's label are kept.
    """

    def square(match: re.Match) -> str:
        if _inside_label(source, match.start(2)):
            return match.group(0)
        return f"{match.group(1)}{match.group(2)}[{match.group(3)}]"

    return ROUND_NODE_RE.sub(square, source)


PASSES = (strip_fences, unescape_newlines, break_after_header, split_adjacent_nodes)


def normalize(raw_chart: str) -> str:
    """Best-effort cleanup of model-produced Mermaid source. Never raises."""
    if not isinstance(raw_chart, str):
        return ""
    source = raw_chart
    for repair in PASSES:
        source = repair(source)
    return source


@dataclass(frozen=True)
class RenderAttempt:
    """One try at drawing a diagram: the id to render under and the source."""

    number: int
    diagram_id: str
    source: str


def plan_attempts(raw_chart: str, prefix: str = "mermaid") -> tuple[RenderAttempt, RenderAttempt]:
    """Build the primary attempt and the repaired fallback attempt."""
    token = uuid.uuid4().hex[:9]
    primary = normalize(raw_chart)
    return (
        RenderAttempt(1, f"{prefix}-{token}", primary),
        RenderAttempt(2, f"{prefix}-{token}-retry", repair_round_nodes(primary)),
    )
