"""
Unit Tests for Page Rendering

Tests for render(), RenderedNode and the attribute cleanup helpers.
"""

import pytest

from cv_toolkit.core.models import DEFAULT_TEMPLATE_ID, BlockKind, BlockNode
from cv_toolkit.layout import compose
from cv_toolkit.output import clean_attributes, is_decoration, render


@pytest.fixture
def doc(doc_builder):
    builder = doc_builder(usable=1000, width=800)
    builder.block("intro", 100, attributes={
        "data-node-id": "n1",
        "data-pagination-block": "",
        "contenteditable": "true",
        "class": "intro",
    })
    builder.plain("grid", parent="intro", attributes={"data-editor-grid": ""})
    builder.plain("label", height=20, parent="intro", y=10)
    builder.plain("script", parent="intro", tag="script")
    builder.plain("wrap")
    builder.group("skills", [500, 500], parent="wrap")
    return builder.build()


@pytest.fixture
def rendered(doc):
    return render(compose(doc), doc)


class TestCleanup:
    """Tests for decoration and attribute removal."""

    def test_clean_attributes_when_editor_markers_then_removed(self):
        """Authoring attributes and data-pagination-* markers are stripped."""
        cleaned = clean_attributes({
            "data-node-id": "1",
            "draggable": "true",
            "data-pagination-keep-with-next": "",
            "class": "x",
            "data-theme": "dark",
        })

        assert cleaned == {"class": "x", "data-theme": "dark"}

    def test_is_decoration_when_grid_or_script_then_true(self):
        """Editor grids, guides and scripts are decoration."""
        assert is_decoration(BlockNode("g", BlockKind.PLAIN, 0, attributes={"data-editor-guide": ""}))
        assert is_decoration(BlockNode("s", BlockKind.PLAIN, 0, tag="style"))
        assert not is_decoration(BlockNode("p", BlockKind.PLAIN, 0, tag="p"))


class TestRender:
    """Tests for render function."""

    def test_render_when_composed_then_one_page_per_result_page(self, doc, rendered):
        """Pages mirror the composition result."""
        assert rendered.page_count == compose(doc).page_count == 2

    def test_render_when_page_root_then_usable_box(self, rendered):
        """Page roots span the usable content box."""
        root = rendered.pages[0].root

        assert root.id == "page-0"
        assert root.kind == "page"
        assert (root.width, root.height) == (800, 1000)
        assert root.attributes == {"data-page-index": "0"}

    def test_render_when_placed_block_then_positioned_at_offset(self, rendered):
        """Placed blocks take their offset; unplaced children follow."""
        intro = rendered.pages[0].root.find("intro")
        label = intro.find("label")

        assert intro.top == 0
        assert intro.height == 100
        assert label.top == 10

    def test_render_when_decoration_then_dropped(self, rendered):
        """Grids and scripts do not reach the export."""
        intro = rendered.pages[0].root.find("intro")

        assert intro.find("grid") is None
        assert intro.find("script") is None

    def test_render_when_attributes_then_cleaned(self, rendered):
        """Clones carry cleaned attributes only."""
        assert rendered.pages[0].root.find("intro").attributes == {"class": "intro"}

    def test_render_when_group_split_then_ancestors_cloned_per_page(self, rendered):
        """Each page gets its own wrapper clones around the items it holds."""
        first, second = rendered.pages

        assert [n.id for n in first.root.find("skills").children] == ["skills-item-0"]
        assert [n.id for n in second.root.find("skills").children] == ["skills-item-1"]
        assert second.root.find("wrap").children[0].id == "skills"

    def test_render_when_split_container_then_spans_its_children(self, rendered):
        """A split wrapper starts at its first child and ends at its last."""
        wrap = rendered.pages[0].root.find("wrap")

        assert wrap.top == 100
        assert wrap.height == 500
        assert rendered.pages[1].root.find("wrap").top == 0

    def test_node_positions_when_called_then_page_roots_excluded(self, rendered):
        """node_positions lists content nodes with their page."""
        positions = rendered.node_positions()

        assert (0, "intro", 0) in positions
        assert (1, "skills-item-1", 0) in positions
        assert all(not node_id.startswith("page-") for _, node_id, _ in positions)

    def test_render_when_section_split_then_header_and_children_nest(self, doc_builder):
        """Children placed on the header's page nest inside the section clone."""
        builder = doc_builder(usable=1000)
        builder.block("section", 700)
        builder.block("a", 500, parent="section", y=100)
        builder.block("b", 600, parent="section", y=600)
        doc = builder.build()

        rendered = render(compose(doc), doc)

        first, second = rendered.pages
        section = first.root.find("section")
        assert [c.id for c in section.children] == ["a"]
        assert section.find("a").top == 0
        assert section.height == 500
        assert second.root.find("section").find("b").top == 0

    def test_render_when_pages_on_different_templates_then_each_sized_by_its_own(self, doc_builder):
        """Page geometry comes from the template each page was composed on."""
        builder = doc_builder(usable=1000, width=800)
        builder.template("body", 1200, width=600)
        builder.block("cover", 500)
        builder.block("experience", 900, template_id="body")
        doc = builder.build()

        rendered = render(compose(doc), doc)

        cover, body = rendered.pages
        assert (cover.template_id, cover.height, cover.root.width) == (DEFAULT_TEMPLATE_ID, 1000, 800)
        assert (body.template_id, body.height, body.root.width) == ("body", 1200, 600)
        assert body.root.height == 1200
        assert body.to_dict()["template_id"] == "body"


class TestExport:
    """Tests for dict and HTML export."""

    def test_to_dict_when_called_then_nested_pages(self, rendered):
        """to_dict nests page roots and children."""
        data = rendered.to_dict()

        assert data["page_count"] == 2
        assert data["pages"][0]["root"]["children"][0]["id"] == "intro"

    def test_to_html_when_called_then_escaped_positioned_markup(self, rendered):
        """HTML export positions children and omits editor attributes."""
        markup = rendered.to_html()

        assert markup.count('<section class="page"') == 2
        assert 'data-page-index="1"' in markup
        assert "data-node-id" not in markup
        assert "contenteditable" not in markup
        assert 'class="intro"' in markup

    def test_export_when_block_styled_then_style_survives(self, doc_builder):
        """Computed colour and font size reach both export forms."""
        builder = doc_builder(usable=1000)
        builder.block("title", 40, style={"color": "rgb(255, 0, 0)", "font-size": "14px"})
        doc = builder.build()

        title = render(compose(doc), doc).pages[0].root.find("title")
        markup = title.to_html()

        assert title.to_dict()["style"] == {"color": "rgb(255, 0, 0)", "font-size": "14px"}
        assert "color:rgb(255, 0, 0)" in markup
        assert "font-size:14px" in markup

    def test_to_html_when_style_has_position_then_box_geometry_wins(self, doc_builder):
        """Positional properties of the computed style are replaced by the box."""
        builder = doc_builder(usable=1000)
        builder.block("title", 40, style={"top": "300px", "position": "static", "color": "#00f"})
        doc = builder.build()

        markup = render(compose(doc), doc).pages[0].root.find("title").to_html()

        assert "top:0px" in markup
        assert "position:absolute" in markup
        assert "300px" not in markup
        assert "static" not in markup
        assert "color:#00f" in markup

    def test_to_dict_when_no_style_then_key_omitted(self, rendered):
        """Unstyled nodes export without a style entry."""
        assert "style" not in rendered.pages[0].root.find("intro").to_dict()
