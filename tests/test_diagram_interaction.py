"""Tests for devbrain.diagram.interaction module."""

from bs4 import BeautifulSoup

from devbrain.diagram.interaction import attach, clean_label, fit_to_width


class TestCleanLabel:
    """Tests for clean_label function."""

    def test_strips_brackets_quotes_and_parens(self):
        assert clean_label('["Commit (made)"]') == "Commit made"

    def test_collapses_whitespace(self):
        assert clean_label("  Run   git\nreset ") == "Run git reset"


class TestFitToWidth:
    """Tests for fit_to_width function."""

    def test_sets_full_width_and_drops_max_width(self, sample_svg):
        svg = BeautifulSoup(fit_to_width(sample_svg), "xml").find("svg")

        assert svg["width"] == "100%"
        assert "max-width" not in svg.get("style", "")
        assert "background-color: white" in svg["style"]

    def test_keeps_view_box_case(self, sample_svg):
        assert 'viewBox="0 0 312 80"' in fit_to_width(sample_svg)

    def test_non_svg_markup_is_returned_as_is(self):
        assert fit_to_width("<div>nope</div>") == "<div>nope</div>"


class TestAttach:
    """Tests for attach function and NodeBindings."""

    def test_collects_node_labels(self, sample_svg):
        bindings = attach(sample_svg)

        assert bindings.labels == {
            "flowchart-A-0": "Commit made",
            "flowchart-B-1": "Run git reset",
        }

    def test_tags_nodes_in_markup(self, sample_svg):
        bindings = attach(sample_svg, lambda label: None)
        soup = BeautifulSoup(bindings.markup, "xml")

        node = soup.find(attrs={"id": "flowchart-B-1"})
        assert node["data-node-label"] == "Run git reset"
        assert "cursor: pointer" in node["style"]

    def test_click_forwards_cleaned_label(self, sample_svg):
        clicked = []
        bindings = attach(sample_svg, clicked.append)

        assert bindings.click("flowchart-A-0") == "Commit made"
        assert clicked == ["Commit made"]

    def test_click_unknown_node_is_ignored(self, sample_svg):
        clicked = []
        bindings = attach(sample_svg, clicked.append)

        assert bindings.click("flowchart-Z-9") is None
        assert clicked == []

    def test_disposed_bindings_ignore_clicks(self, sample_svg):
        clicked = []
        bindings = attach(sample_svg, clicked.append)

        bindings.dispose()

        assert not bindings.attached
        assert bindings.click("flowchart-A-0") is None
        assert clicked == []

    def test_without_handler_nothing_is_forwarded(self, sample_svg):
        bindings = attach(sample_svg)

        assert not bindings.attached
        assert bindings.click("flowchart-A-0") is None
