"""
Unit Tests for Layout Result Models

Tests for Placement, Page, warnings, PaginationResult and LayoutConfig.
"""

import pytest

from cv_toolkit.layout import (
    BlockOversized,
    GroupOversized,
    LayoutConfig,
    OrphansAdjusted,
    Page,
    PaginationResult,
    Placement,
    WarningKind,
    WidowsAdjusted,
    warning_from_dict,
)
from cv_toolkit.layout.models import (
    MSG_BLOCK_OVERSIZED,
    MSG_GROUP_OVERSIZED,
    MSG_ORPHANS_ADJUSTED,
    MSG_WIDOWS_ADJUSTED,
)


@pytest.fixture
def result() -> PaginationResult:
    return PaginationResult(
        pages=(
            Page(0, (Placement("a", 0, 300), Placement("b", 300, 200)), 500),
            Page(1, (Placement("g-item-0", 0, 100, group_id="g"),), 100),
        ),
        warnings=(OrphansAdjusted("g"), BlockOversized("x")),
        usable_height=1000,
    )


class TestPlacementAndPage:
    """Tests for Placement and Page."""

    def test_bottom_when_called_then_offset_plus_height(self):
        """bottom is offset + height."""
        assert Placement("intro", offset_in_page=100, height=50).bottom == 150

    def test_to_dict_when_no_group_then_key_omitted(self):
        """group_id is only written for group items."""
        assert "group_id" not in Placement("a", 0, 10).to_dict()
        assert Placement("i", 0, 10, group_id="g").to_dict()["group_id"] == "g"

    def test_block_ids_when_called_then_paint_order(self, result):
        """block_ids lists placements in order."""
        assert result.pages[0].block_ids == ("a", "b")
        assert result.pages[0].placement_count == 2


class TestWarnings:
    """Tests for the layout warning variants."""

    def test_messages_when_defaults_then_editor_strings(self):
        """Each variant carries its default message."""
        assert BlockOversized("a").message == MSG_BLOCK_OVERSIZED
        assert GroupOversized("g").message == MSG_GROUP_OVERSIZED
        assert OrphansAdjusted("g").message == MSG_ORPHANS_ADJUSTED
        assert WidowsAdjusted("g").message == MSG_WIDOWS_ADJUSTED

    def test_to_dict_when_block_warning_then_node_id_key(self):
        """Block warnings name a nodeId, group warnings a groupId."""
        assert BlockOversized("a").to_dict() == {
            "type": "block-oversized",
            "nodeId": "a",
            "message": MSG_BLOCK_OVERSIZED,
        }
        assert WidowsAdjusted("g").to_dict()["groupId"] == "g"

    def test_target_id_when_any_variant_then_subject_id(self):
        """target_id unifies nodeId and groupId."""
        assert BlockOversized("a").target_id == "a"
        assert GroupOversized("g").target_id == "g"

    @pytest.mark.parametrize("warning", [
        BlockOversized("a", "custom"),
        GroupOversized("g"),
        OrphansAdjusted("g"),
        WidowsAdjusted("g"),
    ])
    def test_warning_from_dict_when_to_dict_then_equal(self, warning):
        """Warnings rebuild from their wire form."""
        assert warning_from_dict(warning.to_dict()) == warning

    def test_warning_from_dict_when_unknown_type_then_raises(self):
        """Unknown tags are rejected."""
        with pytest.raises(ValueError):
            warning_from_dict({"type": "page-overflow", "nodeId": "a"})


class TestPaginationResult:
    """Tests for PaginationResult queries."""

    def test_locate_when_placed_then_page_and_placement(self, result):
        """locate() returns the page index and placement."""
        page_index, placement = result.locate("g-item-0")

        assert page_index == 1
        assert placement.group_id == "g"
        assert result.locate("missing") is None

    def test_page_map_when_called_then_id_to_page(self, result):
        """page_map() covers every placement."""
        assert result.page_map() == {"a": 0, "b": 0, "g-item-0": 1}

    def test_warnings_of_when_kind_then_filtered(self, result):
        """warnings_of() filters by tag."""
        assert result.warnings_of(WarningKind.BLOCK_OVERSIZED) == [BlockOversized("x")]
        assert result.warnings_of(WarningKind.GROUP_OVERSIZED) == []

    def test_counts_when_called_then_totals(self, result):
        """page_count and total_placements."""
        assert result.page_count == 2
        assert result.total_placements == 3


class TestLayoutConfig:
    """Tests for LayoutConfig."""

    def test_create_when_defaults_then_small_tolerance(self):
        """The default tolerance absorbs sub-pixel rounding."""
        assert LayoutConfig().fit_tolerance == pytest.approx(0.01)

    def test_create_when_negative_tolerance_then_raises(self):
        """Negative tolerance is rejected."""
        with pytest.raises(ValueError, match="fit_tolerance"):
            LayoutConfig(fit_tolerance=-1)
