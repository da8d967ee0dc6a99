"""Split raw entry text into paragraphs, spacers, and pipe tables."""

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from .highlight import Segment, clean_markup, highlight


@dataclass(frozen=True)
class Paragraph:
    kind: ClassVar[str] = "paragraph"

    text: str
    segments: tuple[Segment, ...] = field(default=(), compare=False)


@dataclass(frozen=True)
class Blank:
    kind: ClassVar[str] = "blank"


@dataclass(frozen=True)
class Table:
    kind: ClassVar[str] = "table"

    headers: list[str]
    rows: list[list[str]]
    header_segments: tuple[tuple[Segment, ...], ...] = field(default=(), compare=False)
    row_segments: tuple[tuple[tuple[Segment, ...], ...], ...] = field(default=(), compare=False)

    @property
    def column_count(self) -> int:
        return len(self.headers)


RenderBlock = Union[Paragraph, Blank, Table]


def split_cells(line: str) -> list[str]:
    """Split a pipe-delimited line, dropping the empty boundary cells."""
    cells = [cell.strip() for cell in line.strip().split("|")]
    if cells and cells[0] == "":
        cells = cells[1:]
    if cells and cells[-1] == "":
        cells = cells[:-1]
    return cells


def _cell_segments(cells: list[str], active_term: Optional[str]) -> tuple[tuple[Segment, ...], ...]:
    return tuple(tuple(highlight(cell, active_term)) for cell in cells)


def build_table(lines: list[str], active_term: Optional[str] = None) -> Optional[Table]:
    """Turn buffered table lines into a Table.

    The second line is taken to be the separator row and is discarded
    whatever it contains. Fewer than two lines gives no table. Cells are
    cleaned of markup and carry highlight segments for ``active_term``.
    """
    if len(lines) < 2:
        return None

    headers = [clean_markup(cell) for cell in split_cells(lines[0])]
    rows = []
    for line in lines[2:]:
        cells = [clean_markup(cell) for cell in split_cells(line)]
        if len(cells) < len(headers):
            cells += [""] * (len(headers) - len(cells))
        rows.append(cells)
    return Table(
        headers=headers,
        rows=rows,
        header_segments=_cell_segments(headers, active_term),
        row_segments=tuple(_cell_segments(row, active_term) for row in rows),
    )


def is_table_line(line: str) -> bool:
    return line.strip().startswith("|")


def segment(raw_text: str, active_term: Optional[str] = None) -> list[RenderBlock]:
    """Segment raw text into render blocks in a single pass."""
    blocks: list[RenderBlock] = []
    buffer: list[str] = []

    def flush() -> None:
        table = build_table(buffer, active_term)
        if table is not None:
            blocks.append(table)
        buffer.clear()

    for line in (raw_text or "").splitlines():
        if is_table_line(line):
            buffer.append(line)
            continue

        if buffer:
            flush()

        if not line.strip():
            blocks.append(Blank())
        else:
            blocks.append(Paragraph(clean_markup(line), tuple(highlight(line, active_term))))

    if buffer:
        flush()

    return blocks
