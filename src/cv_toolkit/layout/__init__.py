"""
Layout Package

Pagination engine: distributes a DocumentDefinition over fixed-height
pages and reports layout warnings.

**DESIGN:**

1. **Pure composition**
   - compose() reads an immutable snapshot and returns an immutable result.
   - No I/O, no shared state; safe to call from any thread.

2. **Two passes**
   - flatten(): tree -> placement stream (FlowUnits with resolved policies)
   - compose(): stream -> segments -> pages, with boundary adjustment

3. **Bend, do not fail**
   - Oversized content overflows its page and is reported as a warning.
   - Only structurally malformed input raises (InvalidDocumentError).
"""

from .config import LayoutConfig
from .flatten import FlowUnit, flatten
from .models import (
    BlockOversized,
    GroupOversized,
    LayoutWarning,
    OrphansAdjusted,
    Page,
    PaginationResult,
    Placement,
    WarningKind,
    WidowsAdjusted,
    warning_from_dict,
)
from .paginator import Segment, build_segments, compose

__all__ = [
    "LayoutConfig",
    "FlowUnit",
    "flatten",
    "BlockOversized",
    "GroupOversized",
    "LayoutWarning",
    "OrphansAdjusted",
    "Page",
    "PaginationResult",
    "Placement",
    "WarningKind",
    "WidowsAdjusted",
    "warning_from_dict",
    "Segment",
    "build_segments",
    "compose",
]
