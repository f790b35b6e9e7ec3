"""
CV Toolkit Core Package

Shared data models, validation and serialization used by every stage of
the composition pipeline (extract -> compose -> render -> plan).

**KEY CONVENTIONS:**

1. **Snapshots, not live trees**
   - The editor's node registry is mutable; the core models are frozen.
   - A DocumentDefinition is rebuilt for every composition request.

2. **Measured geometry is authoritative**
   - Heights come from the canvas and are never recomputed.

3. **Errors vs. warnings**
   - Malformed input raises InvalidDocumentError (caller bug).
   - Imperfect fit is reported as data (layout warnings), never raised.
"""

from .models import (
    BlockKind,
    BlockNode,
    BreakAfter,
    BreakBefore,
    BreakPolicy,
    DocumentDefinition,
    GroupPolicy,
    PageTemplate,
)
from .schemas.validator import InvalidDocumentError, validate_document

__all__ = [
    "BlockKind",
    "BlockNode",
    "BreakAfter",
    "BreakBefore",
    "BreakPolicy",
    "DocumentDefinition",
    "GroupPolicy",
    "PageTemplate",
    "InvalidDocumentError",
    "validate_document",
]
