"""
Module: output.renderer

Purpose:
    Build export-ready page trees from a PaginationResult. Each page gets
    its own clones of the authored nodes, positioned in page content-box
    coordinates and carrying their computed style, with editor-only
    decoration removed. Pages are sized by their own template.

Key Functions:
    - render(): (PaginationResult, DocumentDefinition) -> RenderResult

Key Classes:
    - RenderedNode: Immutable positioned clone of a document node
    - RenderedPage: One output page
    - RenderResult: All pages, with dict/HTML export helpers

Dependencies:
    - html (std): markup escaping
    - cv_toolkit.core.models
    - cv_toolkit.layout.models

Used By:
    - controller.prepare_canvas()
    - output.proof (page proofs)
"""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from cv_toolkit.core.models import BlockNode, DocumentDefinition
from cv_toolkit.layout.models import PaginationResult

logger = logging.getLogger(__name__)

# Editor-only attributes removed from exported clones
REMOVABLE_ATTRIBUTES: FrozenSet[str] = frozenset({
    "contenteditable",
    "draggable",
    "data-node-id",
    "data-layer-id",
    "data-canvas",
    "data-type",
    "data-handle",
})
REMOVABLE_ATTRIBUTE_PREFIX = "data-pagination-"

# Elements dropped entirely (with their subtree)
REMOVABLE_MARKERS: FrozenSet[str] = frozenset({"data-editor-grid", "data-editor-guide"})
REMOVABLE_TAGS: FrozenSet[str] = frozenset({"script", "style"})

PAGE_KIND = "page"


def is_decoration(node: BlockNode) -> bool:
    """Whether a node only exists for the editing surface."""
    return node.tag in REMOVABLE_TAGS or any(marker in node.attributes for marker in REMOVABLE_MARKERS)


def clean_attributes(attributes: Dict[str, str]) -> Dict[str, str]:
    """Copy of ``attributes`` without editor-only entries."""
    return {
        name: value
        for name, value in attributes.items()
        if name not in REMOVABLE_ATTRIBUTES and not name.startswith(REMOVABLE_ATTRIBUTE_PREFIX)
    }


@dataclass(frozen=True)
class RenderedNode:
    """
    Positioned clone of a document node.

    Attributes:
        id: Source node id (page roots use ``page-<index>``)
        kind: Source node kind value, or ``page``
        type_name: Authoring node type, if known
        tag: Element tag
        text: Text carried by the element
        attributes: Cleaned attributes
        style: Computed style of the source element
        top: Distance from the top of the page content box
        left: Distance from the left of the page content box
        width: Box width
        height: Box height
        children: Child clones in paint order
    """

    id: str
    kind: str
    top: float
    left: float
    width: float
    height: float
    type_name: Optional[str] = None
    tag: str = "div"
    text: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    style: Dict[str, str] = field(default_factory=dict)
    children: Tuple["RenderedNode", ...] = ()

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def iter(self):
        """Pre-order iteration over this node and its descendants."""
        yield self
        for child in self.children:
            yield from child.iter()

    def find(self, node_id: str) -> Optional["RenderedNode"]:
        for node in self.iter():
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "kind": self.kind,
            "tag": self.tag,
            "top": self.top,
            "left": self.left,
            "width": self.width,
            "height": self.height,
        }
        if self.type_name is not None:
            data["type_name"] = self.type_name
        if self.text:
            data["text"] = self.text
        if self.attributes:
            data["attributes"] = dict(self.attributes)
        if self.style:
            data["style"] = dict(self.style)
        if self.children:
            data["children"] = [child.to_dict() for child in self.children]
        return data

    def to_html(self, parent_top: float = 0.0, parent_left: float = 0.0) -> str:
        """
        Absolutely positioned markup (positions relative to the parent clone).

        The computed style is inlined; the box geometry overrides any
        positional property it carries.
        """
        declarations = {
            **self.style,
            "position": "absolute",
            "top": f"{self.top - parent_top:g}px",
            "left": f"{self.left - parent_left:g}px",
            "width": f"{self.width:g}px",
            "height": f"{self.height:g}px",
        }
        style = html.escape(
            ";".join(f"{name}:{value}" for name, value in declarations.items()), quote=True
        )
        attributes = "".join(
            f' {name}="{html.escape(value, quote=True)}"'
            for name, value in sorted(self.attributes.items())
            if name != "style"
        )
        inner = html.escape(self.text) + "".join(
            child.to_html(self.top, self.left) for child in self.children
        )
        return f'<{self.tag}{attributes} style="{style}">{inner}</{self.tag}>'


@dataclass(frozen=True)
class RenderedPage:
    """One exported page: template geometry plus the positioned content tree."""
    index: int
    template_id: str
    width: float
    height: float
    content_padding: float
    background: Optional[str]
    root: RenderedNode

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "template_id": self.template_id,
            "width": self.width,
            "height": self.height,
            "content_padding": self.content_padding,
            "background": self.background,
            "root": self.root.to_dict(),
        }

    def to_html(self) -> str:
        background = f"background:{html.escape(self.background)};" if self.background else ""
        content = "".join(child.to_html() for child in self.root.children)
        return (
            f'<section class="page" data-page-index="{self.index}" '
            f'style="position:relative;width:{self.width:g}px;height:{self.height:g}px;{background}">'
            f'<div class="page-content" style="position:absolute;top:{self.content_padding:g}px;'
            f'left:{self.content_padding:g}px;width:{self.root.width:g}px;height:{self.root.height:g}px">'
            f"{content}</div></section>"
        )


@dataclass(frozen=True)
class RenderResult:
    """All rendered pages, in page order."""
    pages: Tuple[RenderedPage, ...]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def node_positions(self) -> List[Tuple[int, str, float]]:
        """(page index, node id, top) for every rendered node, page roots excluded."""
        return [
            (page.index, node.id, node.top)
            for page in self.pages
            for child in page.root.children
            for node in child.iter()
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {"page_count": self.page_count, "pages": [page.to_dict() for page in self.pages]}

    def to_html(self) -> str:
        return "\n".join(page.to_html() for page in self.pages)


# ─────────────────────────────────────────────────────────────────────────────
# Rendering
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class _Draft:
    """Mutable clone used while a page is assembled."""
    node: BlockNode
    top: Optional[float] = None
    left: float = 0.0
    height: Optional[float] = None
    children: List["_Draft"] = field(default_factory=list)

    def freeze(self) -> RenderedNode:
        children = tuple(child.freeze() for child in self.children)
        top = self.top
        if top is None:
            top = min((child.top for child in children), default=0.0)
        height = self.height
        if height is None:
            # Split container: spans what it holds on this page
            bottom = max((child.bottom for child in children), default=top)
            height = max(0.0, bottom - top)
        node = self.node
        return RenderedNode(
            id=node.id,
            kind=node.kind.value,
            top=top,
            left=self.left,
            width=node.width,
            height=height,
            type_name=node.type_name,
            tag=node.tag,
            text=node.text,
            attributes=clean_attributes(node.attributes),
            style=dict(node.style),
            children=children,
        )


class _PageAssembler:
    """Clones document nodes onto one page."""

    def __init__(self, doc: DocumentDefinition, placed: Set[str], holds_placed: Set[str]):
        self.doc = doc
        self.placed = placed
        self.holds_placed = holds_placed
        self.roots: List[_Draft] = []
        self.drafts: Dict[str, _Draft] = {}

    def _ancestors(self, node: BlockNode) -> List[BlockNode]:
        chain: List[BlockNode] = []
        parent = self.doc.parent_of(node.id)
        while parent is not None:
            chain.append(parent)
            parent = self.doc.parent_of(parent.id)
        chain.reverse()
        return chain

    def _container_for(self, node: BlockNode) -> List[_Draft]:
        """Children list the clone of ``node`` goes into, creating ancestor clones once."""
        siblings = self.roots
        left = 0.0
        for ancestor in self._ancestors(node):
            left += ancestor.x
            draft = self.drafts.get(ancestor.id)
            if draft is None:
                draft = _Draft(node=ancestor, left=left)
                self.drafts[ancestor.id] = draft
                siblings.append(draft)
            siblings = draft.children
        return siblings

    def place(self, block_id: str, offset: float) -> None:
        node = self.doc.get(block_id)
        if is_decoration(node):
            return
        siblings = self._container_for(node)
        parent_left = sum(a.x for a in self._ancestors(node))
        height = None if node.id in self.holds_placed else node.height
        draft = _Draft(node=node, top=offset, left=parent_left + node.x, height=height)
        self.drafts[node.id] = draft
        draft.children = self._clone_children(node, offset, draft.left)
        siblings.append(draft)

    def _clone_children(self, node: BlockNode, top: float, left: float) -> List[_Draft]:
        clones: List[_Draft] = []
        for child in self.doc.children_of(node.id):
            if child.id in self.placed or child.id in self.holds_placed or is_decoration(child):
                continue
            child_top = top + child.y
            child_left = left + child.x
            draft = _Draft(node=child, top=child_top, left=child_left, height=child.height)
            draft.children = self._clone_children(child, child_top, child_left)
            clones.append(draft)
        return clones


def render(result: PaginationResult, doc: DocumentDefinition) -> RenderResult:
    """
    Clone placed content onto export pages.

    Args:
        result: Composition output for ``doc``
        doc: The document that was composed

    Returns:
        RenderResult with one RenderedPage per result page

    Raises:
        KeyError: If a placement references a node missing from ``doc``
    """
    placed = {placement.block_id for page in result.pages for placement in page.placements}
    holds_placed: Set[str] = set()
    for block_id in placed:
        parent = doc.parent_of(block_id)
        while parent is not None and parent.id not in holds_placed:
            holds_placed.add(parent.id)
            parent = doc.parent_of(parent.id)

    pages: List[RenderedPage] = []
    for page in result.pages:
        template = doc.template_for(page.template_id)
        assembler = _PageAssembler(doc, placed, holds_placed)
        for placement in page.placements:
            assembler.place(placement.block_id, placement.offset_in_page)
        root = RenderedNode(
            id=f"page-{page.index}",
            kind=PAGE_KIND,
            top=0.0,
            left=0.0,
            width=template.usable_width,
            height=template.usable_height,
            attributes={"data-page-index": str(page.index)},
            children=tuple(draft.freeze() for draft in assembler.roots),
        )
        pages.append(RenderedPage(
            index=page.index,
            template_id=template.id,
            width=template.width,
            height=template.height,
            content_padding=template.content_padding,
            background=template.background,
            root=root,
        ))

    logger.info(f"Rendered {len(pages)} page(s) from {result.total_placements} placement(s)")
    return RenderResult(pages=tuple(pages))
