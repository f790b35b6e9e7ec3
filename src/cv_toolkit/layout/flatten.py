"""
Module: layout.flatten

Purpose:
    Turn the document tree into the linear placement stream the paginator
    consumes. Every FlowUnit is one indivisible piece of content with its
    effective break directives already resolved.

Key Functions:
    - flatten(): DocumentDefinition -> list of FlowUnits

Key Classes:
    - FlowUnit: One placement candidate

Dependencies:
    - dataclasses (std)
    - cv_toolkit.core.models

Used By:
    - layout.paginator: compose()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional

from cv_toolkit.core.models import (
    BlockKind,
    BlockNode,
    BreakAfter,
    BreakBefore,
    BreakPolicy,
    DocumentDefinition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FlowUnit:
    """
    One indivisible placement candidate.

    Attributes:
        node_id: Node placed by this unit
        kind: Kind of that node
        height: Height consumed on the page
        break_before: Effective directive (own or inherited)
        break_after: Effective directive (own or inherited)
        keep_with_next: Effective keep flag (own or inherited)
        header: True for the chrome of a container root-block
        group_id: Owning group, for group items
        index_in_group: Position of the item within its group
        group_size: Number of items in the group
        group_atomic: Whether the whole group must stay on one page
        orphans: Orphan minimum of the group
        widows: Widow minimum of the group
        template_id: Page template of the root the unit comes from
    """

    node_id: str
    kind: BlockKind
    height: float
    break_before: BreakBefore = BreakBefore.AUTO
    break_after: BreakAfter = BreakAfter.AUTO
    keep_with_next: bool = False
    header: bool = False
    group_id: Optional[str] = None
    index_in_group: int = 0
    group_size: int = 0
    group_atomic: bool = False
    orphans: int = 0
    widows: int = 0
    template_id: Optional[str] = None

    @property
    def in_group(self) -> bool:
        return self.group_id is not None

    def same_group(self, other: "FlowUnit") -> bool:
        return self.group_id is not None and self.group_id == other.group_id


def flatten(doc: DocumentDefinition) -> List[FlowUnit]:
    """
    Build the placement stream of a document.

    Walks roots depth-first, visiting every node once. Plain wrappers are
    transparent, groups contribute their items, and container root-blocks
    contribute a header unit for their own chrome followed by their
    descendants. Units carry the page template of their root.

    Args:
        doc: Validated document

    Returns:
        FlowUnits in document order
    """
    units: List[FlowUnit] = []
    for root_id in doc.roots:
        root = doc.get(root_id)
        start = len(units)
        _emit(doc, root, units)
        template_id = doc.template_for(root.template_id).id
        for i in range(start, len(units)):
            units[i] = replace(units[i], template_id=template_id)
    logger.debug(f"Flattened {doc.node_count} nodes into {len(units)} units")
    return units


def _emit(doc: DocumentDefinition, node: BlockNode, out: List[FlowUnit]) -> float:
    """Append the units of ``node`` to ``out``; return their total height."""
    if node.kind is BlockKind.PLAIN:
        return sum(_emit(doc, child, out) for child in doc.children_of(node.id))

    if node.kind is BlockKind.GROUP:
        return _emit_group(doc, node, out)

    if node.kind is BlockKind.GROUP_ITEM:
        out.append(_leaf_unit(node))
        return node.height

    return _emit_container(doc, node, out)


def _leaf_unit(node: BlockNode) -> FlowUnit:
    return FlowUnit(
        node_id=node.id,
        kind=node.kind,
        height=node.height,
        break_before=node.policy.break_before,
        break_after=node.policy.break_after,
        keep_with_next=node.policy.keep_with_next,
    )


def _emit_container(doc: DocumentDefinition, node: BlockNode, out: List[FlowUnit]) -> float:
    """Header unit for the container chrome, then the descendant units."""
    header_at = len(out)
    out.append(_leaf_unit(node))
    inner = sum(_emit(doc, child, out) for child in doc.children_of(node.id))
    if len(out) == header_at + 1:
        # Only plain descendants: the block is a leaf
        return node.height

    chrome = max(0.0, node.height - inner)
    out[header_at] = FlowUnit(
        node_id=node.id,
        kind=node.kind,
        height=chrome,
        break_before=node.policy.break_before,
        keep_with_next=True,
        header=True,
    )
    # Only break_after and keep_with_next flow down; break_before sits on the header
    tail_policy = BreakPolicy(
        break_after=node.policy.break_after,
        keep_with_next=node.policy.keep_with_next,
    )
    _inherit(out, header_at + 1, tail_policy)
    return chrome + inner


def _emit_group(doc: DocumentDefinition, group: BlockNode, out: List[FlowUnit]) -> float:
    members: List[BlockNode] = []
    others: List[BlockNode] = []
    _collect_members(doc, group, members, others)

    if not members:
        # Nothing to split: the group's own box is placed whole
        out.append(_leaf_unit(group))
        return group.height

    policy = group.effective_group_policy
    atomic = policy.is_atomic_for(len(members))
    start = len(out)
    out.extend(
        FlowUnit(
            node_id=item.id,
            kind=BlockKind.GROUP_ITEM,
            height=item.height,
            break_before=item.policy.break_before,
            break_after=item.policy.break_after,
            keep_with_next=item.policy.keep_with_next,
            group_id=group.id,
            index_in_group=i,
            group_size=len(members),
            group_atomic=atomic,
            orphans=policy.orphans,
            widows=policy.widows,
        )
        for i, item in enumerate(members)
    )
    _inherit(out, start, group.policy)
    return sum(item.height for item in members) + sum(_emit(doc, other, out) for other in others)


def _collect_members(
    doc: DocumentDefinition,
    node: BlockNode,
    members: List[BlockNode],
    others: List[BlockNode],
) -> None:
    """Gather group items reachable through plain wrappers."""
    for child in doc.children_of(node.id):
        if child.kind is BlockKind.GROUP_ITEM:
            members.append(child)
        elif child.kind is BlockKind.PLAIN:
            _collect_members(doc, child, members, others)
        else:
            others.append(child)


def _inherit(units: List[FlowUnit], start: int, policy: BreakPolicy) -> None:
    """Apply an ancestor's directives to the first/last unit of ``units[start:]`` in place."""
    if start >= len(units) or policy.is_default:
        return
    first = units[start]
    if policy.break_before is not BreakBefore.AUTO and first.break_before is BreakBefore.AUTO:
        units[start] = replace(first, break_before=policy.break_before)
    last = units[-1]
    if policy.break_after is not BreakAfter.AUTO and last.break_after is BreakAfter.AUTO:
        last = replace(last, break_after=policy.break_after)
    if policy.keep_with_next and not last.keep_with_next:
        last = replace(last, keep_with_next=True)
    units[-1] = last
