"""
Module: planning.planner

Purpose:
    Turn layout warnings into property patches an editing surface can
    apply: force a break before an oversized block, let an oversized group
    split, raise the orphan/widow minimum of a group that had to be
    adjusted.

Key Functions:
    - build_plan(): warnings + PlanContext -> Plan

Dependencies:
    - json (std): stable operation ids
    - planning.models, planning.capabilities
    - cv_toolkit.layout.models: warning variants

Used By:
    - controller / scripts: remediation plans after composition
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from cv_toolkit.layout.models import LayoutWarning, WarningKind

from .capabilities import (
    ALLOW_ITEM_SPLIT,
    BREAK_BEFORE,
    DEFAULT_CAPABILITIES,
    ORPHANS,
    WIDOWS,
    Capabilities,
    default_for,
    recognizes,
)
from .models import Operation, OperationCategory, Plan, PlanContext, PlanNode, lookup

logger = logging.getLogger(__name__)

EMPTY_PLAN_SUMMARY = "Analyse IA : aucune action critique détectée, la pagination est stable."

# Group policy defaults, used when the owner cannot be read
DEFAULT_GROUP_MINIMUM = 1


def plan_summary(count: int) -> str:
    """One-line description of a plan with ``count`` operations."""
    if count == 0:
        return EMPTY_PLAN_SUMMARY
    plural = "s" if count > 1 else ""
    return (
        f"Plan IA généré : {count} opération{plural} proposée{plural} "
        f"pour stabiliser la pagination."
    )


def operation_id(index: int, node_id: str, props: Dict[str, Any]) -> str:
    """``op-<n>:<node>:<props>`` with props sorted, unique within a plan."""
    parts = sorted(f"{key}:{json.dumps(value, ensure_ascii=False)}" for key, value in props.items())
    return f"op-{index}:{node_id}:{'|'.join(parts)}"


def _nearest_with(
    context: PlanContext,
    node: Optional[PlanNode],
    prop: str,
    capabilities: Capabilities,
) -> Optional[PlanNode]:
    """``node`` or its closest ancestor whose type recognizes ``prop``."""
    seen = set()
    current = node
    while current is not None and current.id not in seen:
        if recognizes(capabilities, current.type, prop):
            return current
        seen.add(current.id)
        current = lookup(context.get_parent_of, current.id)
    return None


def _current_count(node: Optional[PlanNode], prop: str, capabilities: Capabilities) -> int:
    if node is None:
        return DEFAULT_GROUP_MINIMUM
    value = node.props.get(prop, default_for(capabilities, node.type, prop, DEFAULT_GROUP_MINIMUM))
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return DEFAULT_GROUP_MINIMUM


def build_plan(
    warnings: Sequence[LayoutWarning],
    context: PlanContext,
    capabilities: Capabilities = DEFAULT_CAPABILITIES,
) -> Plan:
    """
    Propose one operation per warning, in warning order.

    When no target can be resolved the operation still targets the
    warning's own node or group id; diffing it then reports it blocked.

    Args:
        warnings: Layout warnings from compose()
        context: Read-only node lookup
        capabilities: Node type -> recognized props

    Returns:
        Plan with summary and operations

    Example:
        >>> plan = build_plan([GroupOversized("repeat-r1")], registry)
        >>> plan.operations[0].props
        {'allowItemSplit': True}
    """
    operations: List[Operation] = []
    for index, warning in enumerate(warnings, start=1):
        target: Optional[PlanNode]
        if warning.kind is WarningKind.BLOCK_OVERSIZED:
            node = lookup(context.get_node, warning.target_id)
            target = _nearest_with(context, node, BREAK_BEFORE, capabilities)
            props: Dict[str, Any] = {BREAK_BEFORE: "before"}
            action = "Forcer un saut de page avant"
        elif warning.kind is WarningKind.GROUP_OVERSIZED:
            target = lookup(context.resolve_group_owner, warning.target_id)
            props = {ALLOW_ITEM_SPLIT: True}
            action = "Autoriser la division des éléments pour"
        elif warning.kind is WarningKind.WIDOWS_ADJUSTED:
            target = lookup(context.resolve_group_owner, warning.target_id)
            props = {WIDOWS: _current_count(target, WIDOWS, capabilities) + 1}
            action = "Augmenter la protection contre les veuves pour"
        else:
            target = lookup(context.resolve_group_owner, warning.target_id)
            props = {ORPHANS: _current_count(target, ORPHANS, capabilities) + 1}
            action = "Renforcer la règle des orphelines pour"

        node_id = target.id if target is not None else warning.target_id
        name = target.label if target is not None else warning.target_id
        operations.append(Operation(
            id=operation_id(index, node_id, props),
            node_id=node_id,
            category=OperationCategory.PAGINATION,
            label=f"{action} {name}",
            reason=warning.message,
            props=props,
        ))
        if target is None:
            logger.debug(f"No target for {warning.kind} on {warning.target_id!r}")

    plan = Plan(summary=plan_summary(len(operations)), operations=tuple(operations))
    logger.info(f"Built plan with {len(operations)} operation(s) from {len(warnings)} warning(s)")
    return plan
