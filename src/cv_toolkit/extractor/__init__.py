"""
Extractor Package

Reads the authoring canvas (a read-only dump of the rendered editor) into
an immutable DocumentDefinition.

**DESIGN:**

1. **Markers drive classification**
   - data-pagination-collection / -item / -block select the node kind.
   - Everything else is a plain, transparent wrapper.

2. **Measured, never recomputed**
   - Rectangles are divided by the zoom; heights are taken as-is.

3. **Lenient policies, strict structure**
   - Unknown break values and malformed numbers fall back to defaults.
   - A dump that is not an element tree raises ExtractionError.
"""

from .canvas import CanvasElement, ExtractionError, Rect, canvas_from_dict, load_canvas
from .extractor import ExtractOptions, extract, parse_bool, parse_count, parse_number

__all__ = [
    "CanvasElement",
    "ExtractionError",
    "Rect",
    "canvas_from_dict",
    "load_canvas",
    "ExtractOptions",
    "extract",
    "parse_bool",
    "parse_count",
    "parse_number",
]
