"""
Module: document

Purpose:
    Provides the DocumentDefinition dataclass - the immutable snapshot the
    pagination engine consumes. Nodes live in a flat arena (tuple in
    document order) and reference each other by id. Each root names the
    page template it was authored on; the first template is the default.

Key Classes:
    - DocumentDefinition: Template + node arena + root ids

Dependencies:
    - dataclasses (std)
    - functools (std): cached id index
    - .blocks.BlockNode
    - .template.PageTemplate

Used By:
    - extractor.extractor: Produces documents
    - layout.paginator: compose()
    - output.renderer: render()
    - core.schemas.validator: Structural validation
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Iterator, Optional, Tuple

from .blocks import BlockKind, BlockNode
from .template import PageTemplate


@dataclass(frozen=True)
class DocumentDefinition:
    """
    Snapshot of an authored canvas, ready for composition.

    Produced fresh for every composition request and never mutated.
    The node index is built lazily on first lookup.

    Attributes:
        template: Default page geometry (the first page of the canvas)
        nodes: All nodes in document (pre-)order
        roots: Ids of top-level nodes, in order
        templates: Every page template in canvas order; empty when the
            document only uses ``template``

    Example:
        >>> doc = DocumentDefinition(PageTemplate(), nodes=(node,), roots=(node.id,))
        >>> doc.get(node.id) is node
        True
    """

    template: PageTemplate
    nodes: Tuple[BlockNode, ...] = ()
    roots: Tuple[str, ...] = field(default=())
    templates: Tuple[PageTemplate, ...] = ()

    @cached_property
    def index(self) -> Dict[str, BlockNode]:
        """Mapping of node id to node (first occurrence wins)."""
        by_id: Dict[str, BlockNode] = {}
        for node in self.nodes:
            by_id.setdefault(node.id, node)
        return by_id

    @cached_property
    def page_templates(self) -> Tuple[PageTemplate, ...]:
        """All page templates, default first, without duplicate ids."""
        by_id: Dict[str, PageTemplate] = {self.template.id: self.template}
        for template in self.templates:
            by_id.setdefault(template.id, template)
        return tuple(by_id.values())

    def template_for(self, template_id: Optional[str]) -> PageTemplate:
        """Template with the given id, falling back to the default template."""
        for template in self.page_templates:
            if template.id == template_id:
                return template
        return self.template

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.index

    def get(self, node_id: str) -> BlockNode:
        """
        Look up a node by id.

        Raises:
            KeyError: If no node has this id
        """
        return self.index[node_id]

    def find(self, node_id: str) -> Optional[BlockNode]:
        """Look up a node by id, None if absent."""
        return self.index.get(node_id)

    def children_of(self, node_id: str) -> Tuple[BlockNode, ...]:
        """Child nodes of ``node_id`` in document order."""
        return tuple(self.index[child] for child in self.index[node_id].children)

    def parent_of(self, node_id: str) -> Optional[BlockNode]:
        """Parent node of ``node_id``, None for roots."""
        parent_id = self.index[node_id].parent_id
        return self.index.get(parent_id) if parent_id is not None else None

    def iter_subtree(self, node_id: str) -> Iterator[BlockNode]:
        """Iterate a subtree in pre-order (node first). Assumes an acyclic tree."""
        stack = [node_id]
        while stack:
            node = self.index[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def walk(self) -> Iterator[BlockNode]:
        """Iterate all reachable nodes in document order."""
        for root in self.roots:
            yield from self.iter_subtree(root)

    def count(self, kind: BlockKind) -> int:
        """Number of nodes of the given kind."""
        return sum(1 for node in self.nodes if node.kind is kind)

    @property
    def node_count(self) -> int:
        return len(self.nodes)
