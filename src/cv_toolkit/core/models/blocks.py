"""
Module: blocks

Purpose:
    Provides the BlockNode dataclass - one immutable entry of the document
    arena - together with the closed set of node kinds and the per-node
    pagination policies read from the authoring canvas.

Key Classes:
    - BlockKind: root-block / group / group-item / plain
    - BreakBefore, BreakAfter: Forced or forbidden page boundaries
    - BreakPolicy: breakBefore / breakAfter / keepWithNext triple
    - GroupPolicy: allowSplit / orphans / widows for repeating groups
    - BlockNode: Measured node with id-based parent/child references

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.models.document.DocumentDefinition
    - extractor.extractor
    - layout.flatten
    - output.renderer
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple


class BlockKind(str, Enum):
    """Kind of a content node, as seen by the pagination engine."""
    ROOT_BLOCK = "root-block"  # Independently paginatable unit (section, text block)
    GROUP = "group"            # Repeating collection container
    GROUP_ITEM = "group-item"  # One element of a group
    PLAIN = "plain"            # Transparent wrapper

    def __str__(self) -> str:
        return self.value

    @property
    def is_paginatable(self) -> bool:
        """Whether nodes of this kind are break candidates."""
        return self is not BlockKind.PLAIN


class BreakBefore(str, Enum):
    """Page boundary directive before a node."""
    AUTO = "auto"
    BEFORE = "before"
    AVOID = "avoid"

    def __str__(self) -> str:
        return self.value


class BreakAfter(str, Enum):
    """Page boundary directive after a node."""
    AUTO = "auto"
    AFTER = "after"
    AVOID = "avoid"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class BreakPolicy:
    """
    Break directives of a node.

    Attributes:
        break_before: Force (``before``) or discourage (``avoid``) a break before
        break_after: Force (``after``) or discourage (``avoid``) a break after
        keep_with_next: Keep this node on the same page as the next unit
    """

    break_before: BreakBefore = BreakBefore.AUTO
    break_after: BreakAfter = BreakAfter.AUTO
    keep_with_next: bool = False

    @property
    def is_default(self) -> bool:
        return (
            self.break_before is BreakBefore.AUTO
            and self.break_after is BreakAfter.AUTO
            and not self.keep_with_next
        )


@dataclass(frozen=True, slots=True)
class GroupPolicy:
    """
    Split policy of a repeating group.

    Attributes:
        allow_split: Whether items may be spread over several pages
        orphans: Minimum items left at the bottom of a page (0 disables)
        widows: Minimum items carried to the top of the next page (0 disables)

    Invariants:
        - orphans >= 0
        - widows >= 0
    """

    allow_split: bool = True
    orphans: int = 1
    widows: int = 1

    def __post_init__(self) -> None:
        """Validate counts on construction."""
        if self.orphans < 0:
            raise ValueError(f"orphans must be >= 0: {self.orphans}")
        if self.widows < 0:
            raise ValueError(f"widows must be >= 0: {self.widows}")

    def is_atomic_for(self, item_count: int) -> bool:
        """
        Whether a group of ``item_count`` items must be placed as one unit.

        A group that may not split, or that is too small to honor both the
        orphan and the widow minimum, is always placed whole.
        """
        if not self.allow_split:
            return True
        return item_count < self.orphans + self.widows


@dataclass(frozen=True, slots=True)
class BlockNode:
    """
    One node of the content tree (immutable arena entry).

    Relations are expressed as ids, never as object references, so a
    DocumentDefinition can be shared freely between threads.

    Attributes:
        id: Identifier, unique within a document
        kind: Pagination kind
        height: Measured extent along the pagination axis (authoritative)
        width: Measured width (rendering only)
        x: Left offset relative to the parent box (rendering only)
        y: Top offset relative to the parent box (rendering only)
        policy: Break directives
        group_policy: Split policy, only set on GROUP nodes
        children: Ordered child ids (document order)
        parent_id: Id of the parent node, None for roots
        type_name: Authoring node type (e.g. "SectionNode"), if known
        tag: Source element tag
        text: Text content carried by the element itself
        attributes: Source attributes, including authoring markers
        style: Computed style of the source element (unzoomed CSS values)
        template_id: Page template the node was authored on (roots only;
            descendants follow their root)

    Example:
        >>> node = BlockNode("intro", BlockKind.ROOT_BLOCK, height=120.0)
        >>> node.is_leaf
        True
    """

    id: str
    kind: BlockKind
    height: float
    width: float = 0.0
    x: float = 0.0
    y: float = 0.0
    policy: BreakPolicy = field(default_factory=BreakPolicy)
    group_policy: Optional[GroupPolicy] = None
    children: Tuple[str, ...] = ()
    parent_id: Optional[str] = None
    type_name: Optional[str] = None
    tag: str = "div"
    text: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    style: Dict[str, str] = field(default_factory=dict)
    template_id: Optional[str] = None

    @property
    def is_leaf(self) -> bool:
        """True if the node has no children."""
        return not self.children

    @property
    def effective_group_policy(self) -> GroupPolicy:
        """Group policy with defaults applied (GROUP nodes only)."""
        return self.group_policy if self.group_policy is not None else GroupPolicy()
