"""
Core Models Package

Immutable, validated data models shared by the extractor, the pagination
engine and the renderer.

**DESIGN RATIONALE:**

All models in this package are frozen dataclasses. The authoring canvas is
a live, mutable tree edited by drag and drop; the engine never sees it.
The extractor translates it once into an arena of BlockNodes addressed by
id, which gives:
1. No accidental mutation during composition
2. Safe to share between threads
3. Parent/child relations that can be checked for cycles
4. Results that can be compared across runs
"""

from .blocks import BlockKind, BlockNode, BreakAfter, BreakBefore, BreakPolicy, GroupPolicy
from .document import DocumentDefinition
from .template import (
    DEFAULT_PAGE_HEIGHT,
    DEFAULT_PAGE_WIDTH,
    DEFAULT_TEMPLATE_ID,
    TEMPLATE_ID_PREFIX,
    PageTemplate,
)

__all__ = [
    "BlockKind",
    "BlockNode",
    "BreakAfter",
    "BreakBefore",
    "BreakPolicy",
    "GroupPolicy",
    "DocumentDefinition",
    "PageTemplate",
    "DEFAULT_PAGE_HEIGHT",
    "DEFAULT_PAGE_WIDTH",
    "DEFAULT_TEMPLATE_ID",
    "TEMPLATE_ID_PREFIX",
]
