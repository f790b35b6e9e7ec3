"""
Module: layout.models

Purpose:
    Data models for composition output.
    Immutable dataclasses representing placements, pages, layout warnings
    and the complete pagination result.

Key Classes:
    - Placement: A block positioned on a page
    - Page: Complete page layout
    - WarningKind: Closed set of layout warning tags
    - BlockOversized / GroupOversized / OrphansAdjusted / WidowsAdjusted:
      Layout warning variants (tagged union LayoutWarning)
    - PaginationResult: Final composition output

Dependencies:
    - dataclasses (std)
    - cv_toolkit.core.models: default template id

Used By:
    - layout.paginator: Creates Pages and warnings
    - output.renderer: Consumes PaginationResult
    - planning.planner: Consumes warnings
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from cv_toolkit.core.models import DEFAULT_TEMPLATE_ID

# User-facing messages (product UI language)
MSG_BLOCK_OVERSIZED = "Bloc plus grand que la hauteur de page disponible."
MSG_ITEM_OVERSIZED = "Élément de collection plus grand qu'une page."
MSG_GROUP_OVERSIZED = "Groupe trop grand pour une seule page."
MSG_ORPHANS_ADJUSTED = "Réajustement des éléments pour éviter les orphelines."
MSG_WIDOWS_ADJUSTED = "Réajustement des éléments pour éviter les veuves."


@dataclass(frozen=True)
class Placement:
    """
    A block positioned on a page.

    Attributes:
        block_id: Id of the placed node
        offset_in_page: Distance from the top of the page content box
        height: Height consumed on the page
        group_id: Owning group id for group items

    Example:
        >>> placement = Placement("intro", offset_in_page=100, height=50)
        >>> placement.bottom
        150
    """

    block_id: str
    offset_in_page: float
    height: float = 0.0
    group_id: Optional[str] = None

    @property
    def bottom(self) -> float:
        """Bottom coordinate (offset + height)."""
        return self.offset_in_page + self.height

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "block_id": self.block_id,
            "offset_in_page": self.offset_in_page,
            "height": self.height,
        }
        if self.group_id is not None:
            data["group_id"] = self.group_id
        return data


@dataclass(frozen=True)
class Page:
    """
    Complete layout of a single page.

    Attributes:
        index: Page number (0-indexed)
        placements: Tuple of Placements in paint order
        height_used: Total vertical space used (may exceed the usable
            height when an oversized block sits on the page)
        template_id: Page template the page is laid out on

    Example:
        >>> page = Page(index=0, placements=(p1, p2), height_used=500)
        >>> page.placement_count
        2
    """

    index: int
    placements: Tuple[Placement, ...]
    height_used: float
    template_id: str = DEFAULT_TEMPLATE_ID

    @property
    def placement_count(self) -> int:
        """Number of blocks on this page."""
        return len(self.placements)

    @property
    def block_ids(self) -> Tuple[str, ...]:
        return tuple(p.block_id for p in self.placements)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "template_id": self.template_id,
            "height_used": self.height_used,
            "placements": [p.to_dict() for p in self.placements],
        }


class WarningKind(str, Enum):
    """Layout warning tag."""
    BLOCK_OVERSIZED = "block-oversized"
    GROUP_OVERSIZED = "group-oversized"
    ORPHANS_ADJUSTED = "orphans-adjusted"
    WIDOWS_ADJUSTED = "widows-adjusted"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class BlockOversized:
    """A single atomic block is taller than a full page."""
    kind: ClassVar[WarningKind] = WarningKind.BLOCK_OVERSIZED

    node_id: str
    message: str = MSG_BLOCK_OVERSIZED

    @property
    def target_id(self) -> str:
        return self.node_id

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "nodeId": self.node_id, "message": self.message}


@dataclass(frozen=True)
class GroupOversized:
    """A group placed as one unit is taller than a full page."""
    kind: ClassVar[WarningKind] = WarningKind.GROUP_OVERSIZED

    group_id: str
    message: str = MSG_GROUP_OVERSIZED

    @property
    def target_id(self) -> str:
        return self.group_id

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "groupId": self.group_id, "message": self.message}


@dataclass(frozen=True)
class OrphansAdjusted:
    """Trailing group items were pushed to the next page (orphan minimum)."""
    kind: ClassVar[WarningKind] = WarningKind.ORPHANS_ADJUSTED

    group_id: str
    message: str = MSG_ORPHANS_ADJUSTED

    @property
    def target_id(self) -> str:
        return self.group_id

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "groupId": self.group_id, "message": self.message}


@dataclass(frozen=True)
class WidowsAdjusted:
    """A page boundary was moved back so the group's tail keeps its widow minimum."""
    kind: ClassVar[WarningKind] = WarningKind.WIDOWS_ADJUSTED

    group_id: str
    message: str = MSG_WIDOWS_ADJUSTED

    @property
    def target_id(self) -> str:
        return self.group_id

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "groupId": self.group_id, "message": self.message}


LayoutWarning = Union[BlockOversized, GroupOversized, OrphansAdjusted, WidowsAdjusted]


def warning_from_dict(data: Dict[str, Any]) -> LayoutWarning:
    """
    Rebuild a warning from its ``to_dict`` form (camelCase, as sent to the editor).

    Raises:
        ValueError: If the warning type is unknown
    """
    kind = WarningKind(data["type"])
    message = data.get("message")
    if kind is WarningKind.BLOCK_OVERSIZED:
        return BlockOversized(data["nodeId"], message or MSG_BLOCK_OVERSIZED)
    if kind is WarningKind.GROUP_OVERSIZED:
        return GroupOversized(data["groupId"], message or MSG_GROUP_OVERSIZED)
    if kind is WarningKind.ORPHANS_ADJUSTED:
        return OrphansAdjusted(data["groupId"], message or MSG_ORPHANS_ADJUSTED)
    return WidowsAdjusted(data["groupId"], message or MSG_WIDOWS_ADJUSTED)


@dataclass(frozen=True)
class PaginationResult:
    """
    Final composition output.

    Pure function output: immutable, and equal across runs for an equal
    input document.

    Attributes:
        pages: Tuple of Pages (indices 0..n-1, none empty)
        warnings: Layout warnings in detection order
        usable_height: Content budget of a page on the default template

    Example:
        >>> result = compose(doc)
        >>> result.page_count
        2
    """

    pages: Tuple[Page, ...]
    warnings: Tuple[LayoutWarning, ...] = ()
    usable_height: float = 0.0

    @property
    def page_count(self) -> int:
        """Number of pages in layout."""
        return len(self.pages)

    @property
    def total_placements(self) -> int:
        """Total number of placements across all pages."""
        return sum(p.placement_count for p in self.pages)

    def locate(self, block_id: str) -> Optional[Tuple[int, Placement]]:
        """Find the page index and placement of a block, None if not placed."""
        for page in self.pages:
            for placement in page.placements:
                if placement.block_id == block_id:
                    return page.index, placement
        return None

    def page_map(self) -> Dict[str, int]:
        """Mapping of placed block id to page index."""
        return {
            placement.block_id: page.index
            for page in self.pages
            for placement in page.placements
        }

    def warnings_of(self, kind: WarningKind) -> List[LayoutWarning]:
        return [w for w in self.warnings if w.kind is kind]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "usable_height": self.usable_height,
            "pages": [page.to_dict() for page in self.pages],
            "warnings": [w.to_dict() for w in self.warnings],
        }
