"""
Module: extractor.extractor

Purpose:
    Read the authoring canvas into a DocumentDefinition. Elements are
    classified through the ``data-pagination-*`` markers the editor
    renders, measured geometry is normalized by the canvas zoom, and
    break/split policies are parsed leniently. Every page element
    contributes its own PageTemplate and tags its roots with it.

Key Functions:
    - extract(): CanvasElement -> DocumentDefinition

Key Classes:
    - ExtractOptions: Immutable extraction settings

Dependencies:
    - cv_toolkit.core.models
    - extractor.canvas

Used By:
    - controller.prepare_canvas()
    - scripts/paginate_canvas.py
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from cv_toolkit.core.models import (
    BlockKind,
    BlockNode,
    BreakAfter,
    BreakBefore,
    BreakPolicy,
    DocumentDefinition,
    GroupPolicy,
    TEMPLATE_ID_PREFIX,
    PageTemplate,
)

from .canvas import CanvasElement, ExtractionError

logger = logging.getLogger(__name__)

# Canvas marker vocabulary
ATTR_PAGE = "data-pagination-page"
ATTR_TEMPLATE_PAGE = "data-template-page"
ATTR_TEMPLATE_ID = "data-pagination-template-id"
ATTR_BLOCK = "data-pagination-block"
ATTR_COLLECTION = "data-pagination-collection"
ATTR_ITEM = "data-pagination-item"
ATTR_NODE_ID = "data-pagination-node-id"
ATTR_GROUP_ID = "data-pagination-group-id"
ATTR_EDITOR_NODE_ID = "data-node-id"
ATTR_TYPE = "data-type"
ATTR_BREAK_BEFORE = "data-pagination-break-before"
ATTR_BREAK_AFTER = "data-pagination-break-after"
ATTR_KEEP_WITH_NEXT = "data-pagination-keep-with-next"
ATTR_ALLOW_SPLIT = "data-pagination-allow-split"
ATTR_ORPHANS = "data-pagination-orphans"
ATTR_WIDOWS = "data-pagination-widows"

_NUMBER = re.compile(r"\s*(-?\d+(?:\.\d+)?)")


@dataclass(frozen=True)
class ExtractOptions:
    """
    Settings for canvas extraction.

    Attributes:
        zoom: Canvas zoom factor the rectangles were measured at
            (values <= 0 are treated as 1)
    """
    zoom: float = 1.0

    def __post_init__(self) -> None:
        if not math.isfinite(self.zoom):
            raise ValueError(f"zoom must be finite: {self.zoom}")

    @property
    def factor(self) -> float:
        return self.zoom if self.zoom > 0 else 1.0


# ─────────────────────────────────────────────────────────────────────────────
# Lenient attribute parsing
# ─────────────────────────────────────────────────────────────────────────────

def parse_number(value: Optional[str], fallback: float) -> float:
    """Leading number of a CSS-ish value ("48px" -> 48.0), else ``fallback``."""
    if not value:
        return fallback
    match = _NUMBER.match(value)
    if match is None:
        return fallback
    parsed = float(match.group(1))
    return parsed if math.isfinite(parsed) else fallback


def parse_bool(value: Optional[str], fallback: bool = False) -> bool:
    """Presence-style boolean: "" and "true" are true, "false" is false."""
    if value is None:
        return fallback
    if value in ("", "true"):
        return True
    if value == "false":
        return False
    return fallback


def parse_count(value: Optional[str], fallback: int) -> int:
    """Non-negative integer (truncated) for orphans/widows."""
    return int(max(0.0, parse_number(value, float(fallback))))


def _parse_break_before(value: Optional[str]) -> BreakBefore:
    try:
        return BreakBefore(value) if value else BreakBefore.AUTO
    except ValueError:
        return BreakBefore.AUTO


def _parse_break_after(value: Optional[str]) -> BreakAfter:
    try:
        return BreakAfter(value) if value else BreakAfter.AUTO
    except ValueError:
        return BreakAfter.AUTO


def _non_negative(value: float) -> float:
    return max(0.0, value) if math.isfinite(value) else 0.0


# ─────────────────────────────────────────────────────────────────────────────
# Extraction
# ─────────────────────────────────────────────────────────────────────────────

def _is_page(element: CanvasElement) -> bool:
    return element.has(ATTR_PAGE) or element.has(ATTR_TEMPLATE_PAGE)


def _find_pages(canvas: CanvasElement) -> List[CanvasElement]:
    if _is_page(canvas):
        return [canvas]
    pages: List[CanvasElement] = []
    for child in canvas.children:
        pages.extend(_find_pages(child))
    return pages


def _template_from_page(page: CanvasElement, factor: float, index: int) -> PageTemplate:
    top = _non_negative(parse_number(page.style.get("padding-top"), 0.0))
    bottom = _non_negative(parse_number(page.style.get("padding-bottom"), 0.0))
    return PageTemplate(
        width=_non_negative(page.rect.width / factor),
        height=_non_negative(page.rect.height / factor),
        content_padding=min(top, bottom),
        vertical_reduction=abs(bottom - top),
        id=page.get(ATTR_TEMPLATE_ID) or f"{TEMPLATE_ID_PREFIX}-{index}",
        background=page.style.get("background") or page.style.get("background-color") or None,
    )


def _kind_of(element: CanvasElement) -> BlockKind:
    if element.has(ATTR_COLLECTION):
        return BlockKind.GROUP
    if parse_bool(element.get(ATTR_ITEM), False):
        return BlockKind.GROUP_ITEM
    if element.has(ATTR_BLOCK):
        return BlockKind.ROOT_BLOCK
    return BlockKind.PLAIN


class _Builder:
    """Accumulates arena nodes for one extract() call."""

    def __init__(self, factor: float):
        self.factor = factor
        self.nodes: List[BlockNode] = []
        self._used_ids: Set[str] = set()
        self.renamed = 0

    def _unique(self, candidate: str) -> str:
        if candidate not in self._used_ids:
            self._used_ids.add(candidate)
            return candidate
        # Repeated templates render the same editor node once per item
        n = 2
        while f"{candidate}~{n}" in self._used_ids:
            n += 1
        unique = f"{candidate}~{n}"
        self._used_ids.add(unique)
        self.renamed += 1
        return unique

    def _id_for(self, element: CanvasElement, kind: BlockKind, path: str) -> str:
        candidate = element.get(ATTR_NODE_ID)
        if not candidate and kind is BlockKind.GROUP:
            candidate = element.get(ATTR_GROUP_ID)
        if not candidate:
            candidate = element.get(ATTR_EDITOR_NODE_ID)
        return self._unique(candidate or f"node-{path}")

    def add(self, element: CanvasElement, parent: Optional[CanvasElement],
            parent_id: Optional[str], path: str, template_id: Optional[str] = None) -> str:
        kind = _kind_of(element)
        node_id = self._id_for(element, kind, path)

        policy = BreakPolicy(
            break_before=_parse_break_before(element.get(ATTR_BREAK_BEFORE)),
            break_after=_parse_break_after(element.get(ATTR_BREAK_AFTER)),
            keep_with_next=parse_bool(element.get(ATTR_KEEP_WITH_NEXT), False),
        )
        group_policy = None
        if kind is BlockKind.GROUP:
            group_policy = GroupPolicy(
                allow_split=parse_bool(element.get(ATTR_ALLOW_SPLIT), True),
                orphans=parse_count(element.get(ATTR_ORPHANS), 1),
                widows=parse_count(element.get(ATTR_WIDOWS), 1),
            )

        origin_x = parent.rect.x if parent is not None else element.rect.x
        origin_y = parent.rect.y if parent is not None else element.rect.y

        position = len(self.nodes)
        self.nodes.append(None)  # type: ignore[arg-type]  # reserve pre-order slot
        children = tuple(
            self.add(child, element, node_id, f"{path}-{i}")
            for i, child in enumerate(element.children)
        )
        self.nodes[position] = BlockNode(
            id=node_id,
            kind=kind,
            height=_non_negative(element.rect.height / self.factor),
            width=_non_negative(element.rect.width / self.factor),
            x=(element.rect.x - origin_x) / self.factor,
            y=(element.rect.y - origin_y) / self.factor,
            policy=policy,
            group_policy=group_policy,
            children=children,
            parent_id=parent_id,
            type_name=element.get(ATTR_TYPE),
            tag=element.tag,
            text=element.text,
            attributes=dict(element.attributes),
            style=dict(element.style),
            template_id=template_id,
        )
        return node_id


def extract(canvas: CanvasElement, options: ExtractOptions = ExtractOptions()) -> DocumentDefinition:
    """
    Project the canvas onto a DocumentDefinition.

    Every page element defines a page template (pages sharing a template
    id share the first definition) and the roots it holds are tagged with
    it. The content of every page element is concatenated into one flow;
    the first template is the document default. A canvas without page
    elements is read as a single page.

    Args:
        canvas: Root of the canvas dump
        options: Extraction settings

    Returns:
        Document snapshot with zoom-normalized geometry

    Raises:
        ExtractionError: If a page element has no measurable height
    """
    if not isinstance(canvas, CanvasElement):
        raise ExtractionError(f"expected a CanvasElement, got {type(canvas).__name__}")

    factor = options.factor
    pages = _find_pages(canvas) or [canvas]

    templates: Dict[str, PageTemplate] = {}
    builder = _Builder(factor)
    roots: List[str] = []
    for page_index, page in enumerate(pages):
        template = _template_from_page(page, factor, page_index)
        if template.height <= 0:
            raise ExtractionError(
                f"page element {page_index} has no measurable height", path=f"page[{page_index}]"
            )
        template = templates.setdefault(template.id, template)
        for i, child in enumerate(page.children):
            roots.append(builder.add(child, page, None, f"{page_index}-{i}", template.id))

    page_templates = tuple(templates.values())
    doc = DocumentDefinition(
        template=page_templates[0],
        nodes=tuple(builder.nodes),
        roots=tuple(roots),
        templates=page_templates if len(page_templates) > 1 else (),
    )
    kinds: Dict[BlockKind, int] = {kind: doc.count(kind) for kind in BlockKind}
    logger.debug(
        f"Extracted {doc.node_count} nodes from {len(pages)} page element(s) "
        f"using {len(page_templates)} template(s): "
        + ", ".join(f"{kind.value}={count}" for kind, count in kinds.items())
        + (f" ({builder.renamed} duplicate id(s) renamed)" if builder.renamed else "")
    )
    return doc
