"""
Module: planning.models

Purpose:
    Data models for the layout warning planner: the read-only node view the
    planner consults, the operations it proposes and the diff entries that
    compare a plan with the current node state.

Key Classes:
    - PlanNode: Snapshot of one authoring node (type, props, parent)
    - PlanContext: Read-only lookup protocol (node, parent, group owner)
    - OperationCategory: pagination / style / logic
    - Operation: One proposed property patch
    - Plan: Summary plus ordered operations
    - DiffStatus, Mismatch, DiffEntry: Plan vs. state comparison

Dependencies:
    - dataclasses (std)
    - typing.Protocol (std)
    - logging (std)

Used By:
    - planning.planner: build_plan()
    - planning.diff: diff_plan_operations()
    - planning.registry: NodeRegistry
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, NamedTuple, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlanNode:
    """
    Read-only snapshot of an authoring node.

    Attributes:
        id: Node id
        type: Authoring node type (e.g. "RepeatNode")
        display_name: Human label, if any
        parent_id: Parent node id, None for roots
        props: Current property values
    """
    id: str
    type: str
    display_name: Optional[str] = None
    parent_id: Optional[str] = None
    props: Dict[str, Any] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.display_name or self.type or self.id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "displayName": self.display_name,
            "parentId": self.parent_id,
            "props": dict(self.props),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PlanNode":
        return cls(
            id=data["id"],
            type=data.get("type", ""),
            display_name=data.get("displayName"),
            parent_id=data.get("parentId"),
            props=dict(data.get("props") or {}),
        )


class PlanContext(Protocol):
    """Read-only node lookup consulted by the planner and the diff."""

    def get_node(self, node_id: str) -> Optional[PlanNode]: ...

    def get_parent_of(self, node_id: str) -> Optional[PlanNode]: ...

    def resolve_group_owner(self, group_id: str) -> Optional[PlanNode]: ...


class OperationCategory(str, Enum):
    """Kind of change an operation makes."""
    PAGINATION = "pagination"
    STYLE = "style"
    LOGIC = "logic"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Operation:
    """
    One proposed property patch.

    Attributes:
        id: Unique within a plan
        node_id: Target node
        category: Change category
        label: Human-readable action
        reason: Message of the warning it remediates
        props: Property values to set
    """
    id: str
    node_id: str
    category: OperationCategory
    label: str
    reason: str
    props: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "nodeId": self.node_id,
            "category": self.category.value,
            "label": self.label,
            "reason": self.reason,
            "props": dict(self.props),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Operation":
        return cls(
            id=data["id"],
            node_id=data["nodeId"],
            category=OperationCategory(data.get("category", OperationCategory.PAGINATION.value)),
            label=data.get("label", ""),
            reason=data.get("reason", ""),
            props=dict(data.get("props") or {}),
        )


@dataclass(frozen=True)
class Plan:
    """Ordered operations with a one-line summary."""
    summary: str
    operations: Tuple[Operation, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.operations

    def to_dict(self) -> Dict[str, Any]:
        return {"summary": self.summary, "operations": [op.to_dict() for op in self.operations]}


class DiffStatus(str, Enum):
    """State of an operation against the current node values."""
    PENDING = "pending"
    APPLIED = "applied"
    BLOCKED = "blocked"

    def __str__(self) -> str:
        return self.value


class Mismatch(NamedTuple):
    current: Any
    expected: Any


@dataclass(frozen=True)
class DiffEntry:
    """
    Diff of one operation.

    Attributes:
        operation: The operation compared
        status: pending / applied / blocked
        blocking_props: Props the target cannot take (blocked only)
        mismatches: prop -> (current, expected) for pending operations
    """
    operation: Operation
    status: DiffStatus
    blocking_props: Tuple[str, ...] = ()
    mismatches: Dict[str, Mismatch] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"operation": self.operation.to_dict(), "status": self.status.value}
        if self.blocking_props:
            data["blockingProps"] = list(self.blocking_props)
        if self.mismatches:
            data["mismatches"] = {
                prop: {"current": m.current, "expected": m.expected}
                for prop, m in self.mismatches.items()
            }
        return data


def lookup(fetch: Callable[[str], Optional[PlanNode]], node_id: Optional[str]) -> Optional[PlanNode]:
    """Context lookup; an unreadable node counts as missing."""
    if not node_id:
        return None
    try:
        return fetch(node_id)
    except LookupError as e:
        logger.warning(f"Unable to read node {node_id!r}: {e}")
        return None
