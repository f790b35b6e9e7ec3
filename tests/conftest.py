import pytest
import sys
from pathlib import Path
from typing import Dict, List, Optional

# Add src to sys.path so we can import cv_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from cv_toolkit.core.models import (  # noqa: E402
    BlockKind,
    BlockNode,
    BreakAfter,
    BreakBefore,
    BreakPolicy,
    DocumentDefinition,
    GroupPolicy,
    PageTemplate,
)


class DocBuilder:
    """
    Small fluent builder for test documents.

    The template has no padding, so the usable height equals the page
    height. Children are declared with ``parent=``; order of declaration
    is document order. Extra page templates are declared with
    ``template()`` and picked by roots through ``template_id=``.
    """

    def __init__(self, usable: float = 1000.0, width: float = 800.0):
        self._base_template = PageTemplate(width=width, height=usable)
        self._templates: List[PageTemplate] = []
        self._entries: Dict[str, dict] = {}
        self._roots: List[str] = []

    def _add(self, node_id: str, kind: BlockKind, height: float, parent: Optional[str], **extra) -> str:
        self._entries[node_id] = {
            "kind": kind,
            "height": height,
            "parent": parent,
            "children": [],
            **extra,
        }
        if parent is None:
            self._roots.append(node_id)
        else:
            self._entries[parent]["children"].append(node_id)
        return node_id

    @staticmethod
    def _policy(break_before="auto", break_after="auto", keep_with_next=False) -> BreakPolicy:
        return BreakPolicy(BreakBefore(break_before), BreakAfter(break_after), keep_with_next)

    def template(self, template_id: str, usable: float, width: Optional[float] = None) -> str:
        if not self._templates:
            self._templates.append(self._base_template)
        self._templates.append(
            PageTemplate(width=width or self._base_template.width, height=usable, id=template_id)
        )
        return template_id

    def block(self, node_id: str, height: float, parent: Optional[str] = None,
              type_name: Optional[str] = None, y: float = 0.0, attributes=None, tag: str = "div",
              style=None, template_id: Optional[str] = None, **policy) -> str:
        return self._add(node_id, BlockKind.ROOT_BLOCK, height, parent,
                         policy=self._policy(**policy), type_name=type_name, y=y,
                         attributes=attributes or {}, tag=tag, style=style or {},
                         template_id=template_id)

    def plain(self, node_id: str, height: float = 0.0, parent: Optional[str] = None,
              y: float = 0.0, attributes=None, tag: str = "div") -> str:
        return self._add(node_id, BlockKind.PLAIN, height, parent, policy=BreakPolicy(),
                         type_name=None, y=y, attributes=attributes or {}, tag=tag)

    def group(self, node_id: str, item_heights: List[float], parent: Optional[str] = None,
              allow_split: bool = True, orphans: int = 1, widows: int = 1,
              type_name: Optional[str] = None, template_id: Optional[str] = None, **policy) -> str:
        self._add(node_id, BlockKind.GROUP, float(sum(item_heights)), parent,
                  policy=self._policy(**policy), type_name=type_name, y=0.0, attributes={}, tag="div",
                  group_policy=GroupPolicy(allow_split, orphans, widows), template_id=template_id)
        offset = 0.0
        for i, height in enumerate(item_heights):
            self.item(f"{node_id}-item-{i}", height, parent=node_id, y=offset)
            offset += height
        return node_id

    def item(self, node_id: str, height: float, parent: Optional[str] = None, y: float = 0.0,
             **policy) -> str:
        return self._add(node_id, BlockKind.GROUP_ITEM, height, parent,
                         policy=self._policy(**policy), type_name=None, y=y, attributes={}, tag="div")

    def build(self) -> DocumentDefinition:
        nodes: List[BlockNode] = []

        def emit(node_id: str) -> None:
            entry = self._entries[node_id]
            nodes.append(BlockNode(
                id=node_id,
                kind=entry["kind"],
                height=entry["height"],
                width=self._base_template.width,
                y=entry.get("y", 0.0),
                policy=entry["policy"],
                group_policy=entry.get("group_policy"),
                children=tuple(entry["children"]),
                parent_id=entry["parent"],
                type_name=entry.get("type_name"),
                tag=entry.get("tag", "div"),
                attributes=entry.get("attributes", {}),
                style=entry.get("style", {}),
                template_id=entry.get("template_id"),
            ))
            for child in entry["children"]:
                emit(child)

        for root in self._roots:
            emit(root)
        return DocumentDefinition(
            template=self._base_template,
            nodes=tuple(nodes),
            roots=tuple(self._roots),
            templates=tuple(self._templates),
        )


@pytest.fixture
def doc_builder():
    """Factory for DocBuilder instances: ``doc_builder(usable=1000)``."""
    return DocBuilder
