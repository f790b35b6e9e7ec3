"""
Output Package

Turns a PaginationResult back into content: export-ready page trees
(renderer) and visual page proofs (proof).

**DESIGN:**

1. **Clone, never move**
   - The DocumentDefinition is untouched; every page owns fresh clones.

2. **Export is clean**
   - Editor grids, guides, scripts and authoring attributes are removed.
"""

from .proof import draw_page_proofs, save_page_proofs
from .renderer import (
    REMOVABLE_ATTRIBUTES,
    RenderedNode,
    RenderedPage,
    RenderResult,
    clean_attributes,
    is_decoration,
    render,
)

__all__ = [
    "draw_page_proofs",
    "save_page_proofs",
    "REMOVABLE_ATTRIBUTES",
    "RenderedNode",
    "RenderedPage",
    "RenderResult",
    "clean_attributes",
    "is_decoration",
    "render",
]
