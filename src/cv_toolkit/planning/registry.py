"""
Module: planning.registry

Purpose:
    Immutable in-memory PlanContext. Stands in for the editor's live node
    store: lookups by id, parent and group owner, plus copy-on-write
    updates so a caller can simulate applying a plan and diff again.

Key Classes:
    - NodeRegistry: PlanContext over a fixed set of PlanNodes

Dependencies:
    - planning.models
    - planning.capabilities
    - cv_toolkit.core.models (from_document)

Used By:
    - controller / scripts: planning against an extracted document
    - tests
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Sequence

from cv_toolkit.core.models import BlockNode, DocumentDefinition

from .capabilities import (
    ALLOW_ITEM_SPLIT,
    BREAK_AFTER,
    BREAK_BEFORE,
    DEFAULT_CAPABILITIES,
    KEEP_WITH_NEXT,
    ORPHANS,
    WIDOWS,
    Capabilities,
    recognizes,
)
from .models import Operation, PlanNode

logger = logging.getLogger(__name__)

_REPEAT_GROUP = re.compile(r"^repeat-(.+)$")


class NodeRegistry:
    """
    Read-only node store implementing PlanContext.

    Updates return new registries; an instance never changes after
    construction, so it can be shared between threads.

    Example:
        >>> registry = NodeRegistry([PlanNode("r1", "RepeatNode", props={"widows": 1})])
        >>> registry.resolve_group_owner("repeat-r1").id
        'r1'
    """

    def __init__(self, nodes: Iterable[PlanNode] = ()):
        by_id: Dict[str, PlanNode] = {}
        for node in nodes:
            if node.id in by_id:
                raise ValueError(f"duplicate node id {node.id!r}")
            by_id[node.id] = node
        self._nodes: Mapping[str, PlanNode] = MappingProxyType(by_id)

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[PlanNode]:
        return iter(self._nodes.values())

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    # ── PlanContext ─────────────────────────────────────────────────────────

    def get_node(self, node_id: str) -> Optional[PlanNode]:
        return self._nodes.get(node_id)

    def get_parent_of(self, node_id: str) -> Optional[PlanNode]:
        node = self._nodes.get(node_id)
        if node is None or node.parent_id is None:
            return None
        return self._nodes.get(node.parent_id)

    def resolve_group_owner(self, group_id: str) -> Optional[PlanNode]:
        """Owner of a group: ``repeat-<id>`` names the repeat node ``<id>``, else the id itself."""
        match = _REPEAT_GROUP.match(group_id)
        if match is not None and match.group(1) in self._nodes:
            return self._nodes[match.group(1)]
        return self._nodes.get(group_id)

    # ── Copy-on-write updates ───────────────────────────────────────────────

    def with_props(self, node_id: str, props: Mapping[str, Any]) -> "NodeRegistry":
        """
        New registry with ``props`` merged into one node.

        Raises:
            KeyError: If the node does not exist
        """
        node = self._nodes[node_id]
        updated = PlanNode(
            id=node.id,
            type=node.type,
            display_name=node.display_name,
            parent_id=node.parent_id,
            props={**node.props, **props},
        )
        return NodeRegistry(updated if n.id == node_id else n for n in self._nodes.values())

    def apply(
        self,
        operations: Sequence[Operation],
        capabilities: Capabilities = DEFAULT_CAPABILITIES,
    ) -> "NodeRegistry":
        """
        New registry with every applicable patch set.

        Operations on missing nodes are skipped, and so are props the
        target's type does not recognize, as an editing surface would.
        """
        registry = self
        for operation in operations:
            node = registry.get_node(operation.node_id)
            if node is None:
                logger.debug(f"Skipping {operation.id}: node {operation.node_id!r} not found")
                continue
            patch = {
                prop: value
                for prop, value in operation.props.items()
                if recognizes(capabilities, node.type, prop)
            }
            if patch:
                registry = registry.with_props(node.id, patch)
        return registry

    # ── Construction from a composed document ──────────────────────────────

    @classmethod
    def from_document(
        cls,
        doc: DocumentDefinition,
        capabilities: Capabilities = DEFAULT_CAPABILITIES,
    ) -> "NodeRegistry":
        """
        Registry view of an extracted document.

        Each node takes its type's capability defaults, overlaid with the
        pagination policy read from the canvas.
        """
        return cls(_plan_node(node, capabilities) for node in doc.nodes)


def _plan_node(node: BlockNode, capabilities: Capabilities) -> PlanNode:
    node_type = node.type_name or ""
    props: Dict[str, Any] = dict(capabilities.get(node_type, {}))
    policy_values: Dict[str, Any] = {
        BREAK_BEFORE: node.policy.break_before.value,
        BREAK_AFTER: node.policy.break_after.value,
        KEEP_WITH_NEXT: node.policy.keep_with_next,
    }
    if node.group_policy is not None:
        policy_values.update({
            ALLOW_ITEM_SPLIT: node.group_policy.allow_split,
            ORPHANS: node.group_policy.orphans,
            WIDOWS: node.group_policy.widows,
        })
    for prop, value in policy_values.items():
        if prop in props:
            props[prop] = value
    return PlanNode(
        id=node.id,
        type=node_type,
        display_name=node.attributes.get("data-display-name"),
        parent_id=node.parent_id,
        props=props,
    )
