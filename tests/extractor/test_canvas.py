"""
Unit Tests for Canvas Dumps

Tests for canvas_from_dict, load_canvas and CanvasElement navigation.
"""

import json

import pytest

from cv_toolkit.extractor import CanvasElement, ExtractionError, canvas_from_dict, load_canvas


class TestCanvasFromDict:
    """Tests for canvas_from_dict function."""

    def test_from_dict_when_minimal_then_defaults(self):
        """Every key is optional."""
        element = canvas_from_dict({})

        assert element.tag == "div"
        assert element.rect.height == 0
        assert element.children == ()

    def test_from_dict_when_nested_then_tree(self):
        """Children become CanvasElements; tags are lower-cased."""
        element = canvas_from_dict({
            "tag": "SECTION",
            "attributes": {"data-pagination-block": "", "data-node-id": 7},
            "rect": {"x": 10, "y": 20, "width": 300, "height": 150},
            "children": [{"tag": "p", "text": "Hello"}],
        })

        assert element.tag == "section"
        assert element.get("data-node-id") == "7"
        assert element.rect.bottom == 170
        assert element.children[0].text == "Hello"

    def test_from_dict_when_not_object_then_raises(self):
        """Non-object dumps are rejected."""
        with pytest.raises(ExtractionError, match="expected an object"):
            canvas_from_dict(["div"])  # type: ignore[arg-type]

    def test_from_dict_when_rect_not_numeric_then_raises_with_path(self):
        """Bad rect values report the element path."""
        with pytest.raises(ExtractionError) as exc_info:
            canvas_from_dict({"children": [{"rect": {"height": "tall"}}]})

        assert exc_info.value.path == "canvas.children[0].rect"

    def test_from_dict_when_children_not_list_then_raises(self):
        """children must be a list."""
        with pytest.raises(ExtractionError, match="children"):
            canvas_from_dict({"children": {"tag": "p"}})


class TestCanvasElement:
    """Tests for CanvasElement navigation."""

    @pytest.fixture
    def tree(self) -> CanvasElement:
        return canvas_from_dict({
            "children": [
                {"attributes": {"data-pagination-block": ""}, "children": [
                    {"attributes": {"data-pagination-block": ""}},
                ]},
                {"children": [{"attributes": {"data-pagination-block": ""}}]},
            ],
        })

    def test_find_all_when_nested_matches_then_outermost_only(self, tree):
        """Matches are not searched for nested matches."""
        found = tree.find_all("data-pagination-block")

        assert len(found) == 2
        assert found[0] is tree.children[0]

    def test_iter_when_called_then_document_order(self, tree):
        """iter() yields the element and its descendants."""
        assert len(list(tree.iter())) == 5


class TestLoadCanvas:
    """Tests for load_canvas function."""

    def test_load_when_valid_file_then_element(self, tmp_path):
        """Dumps are read from JSON files."""
        path = tmp_path / "canvas.json"
        path.write_text(json.dumps({"tag": "div", "children": [{"tag": "p"}]}), encoding="utf-8")

        element = load_canvas(path)

        assert element.children[0].tag == "p"

    def test_load_when_invalid_json_then_raises(self, tmp_path):
        """Malformed JSON becomes an ExtractionError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ExtractionError, match="invalid JSON"):
            load_canvas(path)
