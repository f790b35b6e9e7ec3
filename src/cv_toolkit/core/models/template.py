"""
Module: template

Purpose:
    Provides the PageTemplate dataclass - target page dimensions and
    padding of one kind of page (cover, body, ...) of a composed document.

Key Classes:
    - PageTemplate: Page size, padding and usable content box

Dependencies:
    - dataclasses (std)

Used By:
    - core.models.document.DocumentDefinition
    - layout.paginator: usable_height budget
    - output.renderer / output.proof: page sheets
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

# Page elements without an explicit template id are numbered in canvas order
TEMPLATE_ID_PREFIX = "page-template"
DEFAULT_TEMPLATE_ID = f"{TEMPLATE_ID_PREFIX}-0"

# A4 portrait at 96 CSS pixels per inch
DEFAULT_PAGE_WIDTH = 794.0
DEFAULT_PAGE_HEIGHT = 1123.0


@dataclass(frozen=True, slots=True)
class PageTemplate:
    """
    Page geometry in length units (CSS pixels, zoom-normalized).

    Attributes:
        width: Page width
        height: Page height
        content_padding: Padding applied on every side of the content box
        vertical_reduction: Extra vertical space unavailable to content
            (e.g. a bottom padding larger than the top one)
        id: Template identifier
        background: Page background as authored, if any

    Example:
        >>> template = PageTemplate(width=800, height=1100, content_padding=50)
        >>> template.usable_height
        1000
    """

    width: float = DEFAULT_PAGE_WIDTH
    height: float = DEFAULT_PAGE_HEIGHT
    content_padding: float = 0.0
    vertical_reduction: float = 0.0
    id: str = DEFAULT_TEMPLATE_ID
    background: Optional[str] = None

    @property
    def usable_height(self) -> float:
        """Height available for content on one page."""
        return self.height - 2 * self.content_padding - self.vertical_reduction

    @property
    def usable_width(self) -> float:
        """Width available for content on one page."""
        return self.width - 2 * self.content_padding
