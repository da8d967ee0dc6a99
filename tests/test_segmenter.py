"""Tests for devbrain.render.segmenter module."""

from devbrain.render.highlight import Segment
from devbrain.render.segmenter import Blank, Paragraph, Table, build_table, segment, split_cells


class TestSplitCells:
    """Tests for split_cells function."""

    def test_drops_boundary_cells(self):
        assert split_cells("| a | b |") == ["a", "b"]

    def test_keeps_inner_empty_cells(self):
        assert split_cells("|a||c|") == ["a", "", "c"]

    def test_without_trailing_pipe(self):
        assert split_cells("| a | b") == ["a", "b"]


class TestBuildTable:
    """Tests for build_table function."""

    def test_single_line_gives_no_table(self):
        assert build_table(["| H1 | H2 |"]) is None

    def test_header_and_separator_only(self):
        table = build_table(["| H1 | H2 |", "|---|---|"])
        assert table == Table(headers=["H1", "H2"], rows=[])

    def test_second_line_is_always_discarded(self):
        table = build_table(["| H1 | H2 |", "| not | a separator |", "| v1 | v2 |"])
        assert table.rows == [["v1", "v2"]]

    def test_short_rows_are_padded(self):
        table = build_table(["| A | B | C |", "|---|---|---|", "| 1 |"])
        assert table.rows == [["1", "", ""]]

    def test_cells_are_cleaned(self):
        table = build_table(["| **Flag** | `Effect` |", "|---|---|", "| `--soft` | **keeps** [docs](http://x) |"])

        assert table.headers == ["Flag", "Effect"]
        assert table.rows == [["--soft", "keeps docs"]]

    def test_cells_carry_highlight_segments(self):
        table = build_table(["| Flag | Effect |", "|---|---|", "| **--soft** | keeps changes |"], "KEEPS")

        assert table.header_segments == ((Segment("Flag"),), (Segment("Effect"),))
        assert table.row_segments == (
            ((Segment("--soft"),), (Segment("keeps", emphasized=True), Segment(" changes"))),
        )


class TestSegment:
    """Tests for segment function."""

    def test_paragraph_table_paragraph(self):
        blocks = segment("A\n|H1|H2|\n|---|---|\n|v1|v2|\nB")

        assert blocks == [
            Paragraph("A"),
            Table(headers=["H1", "H2"], rows=[["v1", "v2"]]),
            Paragraph("B"),
        ]

    def test_blank_lines_become_blank_blocks(self):
        blocks = segment("first\n\n   \nsecond")
        assert blocks == [Paragraph("first"), Blank(), Blank(), Paragraph("second")]

    def test_one_line_table_is_dropped(self):
        blocks = segment("before\n| lonely | header |\nafter")
        assert blocks == [Paragraph("before"), Paragraph("after")]

    def test_table_at_end_is_flushed(self):
        blocks = segment("intro\n| k | v |\n|---|---|\n| a | 1 |")

        assert blocks[-1] == Table(headers=["k", "v"], rows=[["a", "1"]])
        assert len(blocks) == 2

    def test_blank_line_closes_table(self):
        blocks = segment("| k | v |\n|---|---|\n| a | 1 |\n\n| x | y |\n|---|---|")

        assert blocks == [
            Table(headers=["k", "v"], rows=[["a", "1"]]),
            Blank(),
            Table(headers=["x", "y"], rows=[]),
        ]

    def test_indented_pipe_line_is_a_table_line(self):
        blocks = segment("   | a | b |\n   |---|---|")
        assert blocks == [Table(headers=["a", "b"], rows=[])]

    def test_paragraph_text_is_cleaned(self):
        blocks = segment("## Use **git reset**")
        assert blocks == [Paragraph("Use git reset")]

    def test_paragraph_segments_use_active_term(self):
        [paragraph] = segment("Run git reset --soft", active_term="RESET")

        assert paragraph.segments == (
            Segment("Run git "),
            Segment("reset", emphasized=True),
            Segment(" --soft"),
        )

    def test_table_cells_use_active_term(self):
        [table] = segment("| Cmd | Note |\n|---|---|\n| `git reset` | undo a **reset** |", active_term="reset")

        assert table.rows == [["git reset", "undo a reset"]]
        assert table.row_segments[0][0] == (Segment("git "), Segment("reset", emphasized=True))
        assert table.row_segments[0][1] == (Segment("undo a "), Segment("reset", emphasized=True))

    def test_empty_input(self):
        assert segment("") == []
        assert segment(None) == []

    def test_malformed_tables_never_raise(self):
        blocks = segment("|\n||\n|||\n| a\n|")
        assert all(isinstance(b, Table) for b in blocks)
