"""
Planning Package

Layout warning planner: turns warnings from compose() into property
patches for the editor, and diffs a plan against current node state.

**DESIGN:**

1. **Capability table, not duck typing**
   - DEFAULT_CAPABILITIES lists the props each node type takes.
   - Targets are chosen, and unknown props blocked, from that table.

2. **Pure functions over a read-only context**
   - build_plan() and diff_plan_operations() never mutate the context.
   - NodeRegistry models an editor applying a plan with copy-on-write.

3. **One warning, one operation**
   - Operations keep warning order; ids are unique within a plan.
"""

from .capabilities import DEFAULT_CAPABILITIES, Capabilities, default_for, recognizes
from .diff import diff_plan_operations
from .models import (
    DiffEntry,
    DiffStatus,
    Mismatch,
    Operation,
    OperationCategory,
    Plan,
    PlanContext,
    PlanNode,
)
from .planner import EMPTY_PLAN_SUMMARY, build_plan, plan_summary
from .registry import NodeRegistry

__all__ = [
    "DEFAULT_CAPABILITIES",
    "Capabilities",
    "default_for",
    "recognizes",
    "diff_plan_operations",
    "DiffEntry",
    "DiffStatus",
    "Mismatch",
    "Operation",
    "OperationCategory",
    "Plan",
    "PlanContext",
    "PlanNode",
    "EMPTY_PLAN_SUMMARY",
    "build_plan",
    "plan_summary",
    "NodeRegistry",
]
