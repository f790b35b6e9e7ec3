"""
Module: planning.diff

Purpose:
    Compare plan operations with current node state. Tells an editing
    surface which patches remain to apply, which are already in place and
    which the target node cannot take.

Key Functions:
    - diff_plan_operations(): operations + PlanContext -> DiffEntries

Used By:
    - controller / scripts
    - editing surfaces (apply / already applied / cannot apply)
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from .capabilities import DEFAULT_CAPABILITIES, Capabilities, default_for, recognizes
from .models import DiffEntry, DiffStatus, Mismatch, Operation, PlanContext, lookup


def _same(current: Any, expected: Any) -> bool:
    # True == 1 in Python; a boolean prop never matches a number
    if isinstance(current, bool) != isinstance(expected, bool):
        return False
    return current == expected


def diff_plan_operations(
    operations: Sequence[Operation],
    context: PlanContext,
    capabilities: Capabilities = DEFAULT_CAPABILITIES,
) -> List[DiffEntry]:
    """
    Classify each operation as pending, applied or blocked.

    - blocked: the node is missing (all props blocking) or its type does
      not recognize some props (those props, in patch order)
    - applied: every proposed value is already current
    - pending: otherwise, with prop -> (current, expected) mismatches

    A recognized prop missing from the node's values reads as the type's
    default.
    """
    entries: List[DiffEntry] = []
    for operation in operations:
        node = lookup(context.get_node, operation.node_id)
        if node is None:
            entries.append(DiffEntry(
                operation=operation,
                status=DiffStatus.BLOCKED,
                blocking_props=tuple(operation.props),
            ))
            continue

        blocking = tuple(prop for prop in operation.props if not recognizes(capabilities, node.type, prop))
        if blocking:
            entries.append(DiffEntry(operation=operation, status=DiffStatus.BLOCKED, blocking_props=blocking))
            continue

        mismatches: Dict[str, Mismatch] = {}
        for prop, expected in operation.props.items():
            current = node.props.get(prop, default_for(capabilities, node.type, prop))
            if not _same(current, expected):
                mismatches[prop] = Mismatch(current, expected)

        if mismatches:
            entries.append(DiffEntry(operation=operation, status=DiffStatus.PENDING, mismatches=mismatches))
        else:
            entries.append(DiffEntry(operation=operation, status=DiffStatus.APPLIED))
    return entries
