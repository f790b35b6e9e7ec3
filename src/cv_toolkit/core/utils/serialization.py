"""
Serialization Utilities

Provides to/from JSON utilities for document snapshots.

**FORMAT:**

- In memory a DocumentDefinition is a flat arena with id references.
- On disk (and over the wire) blocks are nested: each block carries its
  ``children`` inline, which is what the editor exports and what the
  JSON schema describes.
- ``document_from_dict`` is a translation boundary: it assigns parent ids
  and flattens the nesting into the arena in document order.
- ``template`` is the default page template; ``templates`` (written only
  when a document uses more than one) lists every template, and root
  blocks name theirs through ``template_id``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from ..models.blocks import (
    BlockKind,
    BlockNode,
    BreakAfter,
    BreakBefore,
    BreakPolicy,
    GroupPolicy,
)
from ..models.document import DocumentDefinition
from ..models.template import DEFAULT_TEMPLATE_ID, PageTemplate
from ..schemas.validator import (
    DOCUMENT_SCHEMA_VERSION,
    InvalidDocumentError,
    validate_document_data,
)


# ─────────────────────────────────────────────────────────────────────────────
# Document Serialization
# ─────────────────────────────────────────────────────────────────────────────

def document_to_dict(doc: DocumentDefinition) -> dict[str, Any]:
    """
    Serialize a DocumentDefinition to a nested dictionary.

    The output passes ``validate_document_data`` and round-trips through
    ``document_from_dict``.

    Args:
        doc: Document to serialize

    Returns:
        Dictionary suitable for JSON serialization
    """
    data: dict[str, Any] = {
        "schema_version": DOCUMENT_SCHEMA_VERSION,
        "template": _template_to_dict(doc.template),
        "blocks": [_block_to_dict(doc, root) for root in doc.roots],
    }
    if doc.templates:
        data["templates"] = [_template_to_dict(template) for template in doc.templates]
    return data


def _template_to_dict(template: PageTemplate) -> dict[str, Any]:
    return {
        "id": template.id,
        "width": template.width,
        "height": template.height,
        "content_padding": template.content_padding,
        "vertical_reduction": template.vertical_reduction,
        "background": template.background,
    }


def _block_to_dict(doc: DocumentDefinition, node_id: str) -> dict[str, Any]:
    node = doc.get(node_id)
    data: dict[str, Any] = {
        "id": node.id,
        "kind": node.kind.value,
        "height": node.height,
        "width": node.width,
        "x": node.x,
        "y": node.y,
    }
    if not node.policy.is_default:
        data["policy"] = {
            "break_before": node.policy.break_before.value,
            "break_after": node.policy.break_after.value,
            "keep_with_next": node.policy.keep_with_next,
        }
    if node.group_policy is not None:
        data["group_policy"] = {
            "allow_split": node.group_policy.allow_split,
            "orphans": node.group_policy.orphans,
            "widows": node.group_policy.widows,
        }
    if node.type_name is not None:
        data["type_name"] = node.type_name
    if node.tag != "div":
        data["tag"] = node.tag
    if node.text:
        data["text"] = node.text
    if node.attributes:
        data["attributes"] = dict(node.attributes)
    if node.style:
        data["style"] = dict(node.style)
    if node.template_id is not None:
        data["template_id"] = node.template_id
    if node.children:
        data["children"] = [_block_to_dict(doc, child) for child in node.children]
    return data


def document_from_dict(data: dict[str, Any], *, validate: bool = True) -> DocumentDefinition:
    """
    Deserialize a DocumentDefinition from a nested dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to validate against the JSON schema first

    Returns:
        DocumentDefinition with blocks flattened into the arena

    Raises:
        InvalidDocumentError: If validate=True and data is invalid, or if
            a kind/policy value is unknown
    """
    if validate:
        validate_document_data(data)

    template = _template_from_dict(data.get("template", {}))
    templates = tuple(_template_from_dict(raw) for raw in data.get("templates", []))

    nodes: List[BlockNode] = []
    roots = tuple(
        _flatten_block(raw, None, nodes, f"blocks[{i}]")
        for i, raw in enumerate(data.get("blocks", []))
    )
    return DocumentDefinition(template=template, nodes=tuple(nodes), roots=roots, templates=templates)


def _template_from_dict(data: dict[str, Any]) -> PageTemplate:
    return PageTemplate(
        width=float(data.get("width", 0.0)),
        height=float(data.get("height", 0.0)),
        content_padding=float(data.get("content_padding", 0.0)),
        vertical_reduction=float(data.get("vertical_reduction", 0.0)),
        id=data.get("id", DEFAULT_TEMPLATE_ID),
        background=data.get("background"),
    )


def _flatten_block(
    raw: dict[str, Any],
    parent_id: Optional[str],
    nodes: List[BlockNode],
    path: str,
) -> str:
    """Append ``raw`` and its descendants to ``nodes`` (pre-order); return its id."""
    try:
        kind = BlockKind(raw["kind"])
        policy = _policy_from_dict(raw.get("policy", {}))
        group_policy = _group_policy_from_dict(raw["group_policy"]) if "group_policy" in raw else None
    except (KeyError, ValueError) as e:
        raise InvalidDocumentError(f"Invalid block at {path}: {e}", path=path) from e

    if kind is BlockKind.GROUP and group_policy is None:
        group_policy = GroupPolicy()

    position = len(nodes)
    nodes.append(None)  # type: ignore[arg-type]  # reserve pre-order slot
    child_ids = tuple(
        _flatten_block(child, raw["id"], nodes, f"{path}.children[{i}]")
        for i, child in enumerate(raw.get("children", []))
    )
    nodes[position] = BlockNode(
        id=raw["id"],
        kind=kind,
        height=raw["height"],
        width=raw.get("width", 0.0),
        x=raw.get("x", 0.0),
        y=raw.get("y", 0.0),
        policy=policy,
        group_policy=group_policy,
        children=child_ids,
        parent_id=parent_id,
        type_name=raw.get("type_name"),
        tag=raw.get("tag", "div"),
        text=raw.get("text", ""),
        attributes=dict(raw.get("attributes", {})),
        style=dict(raw.get("style", {})),
        template_id=raw.get("template_id"),
    )
    return raw["id"]


def _policy_from_dict(data: dict[str, Any]) -> BreakPolicy:
    return BreakPolicy(
        break_before=BreakBefore(data.get("break_before", "auto")),
        break_after=BreakAfter(data.get("break_after", "auto")),
        keep_with_next=bool(data.get("keep_with_next", False)),
    )


def _group_policy_from_dict(data: dict[str, Any]) -> GroupPolicy:
    return GroupPolicy(
        allow_split=bool(data.get("allow_split", True)),
        orphans=int(data.get("orphans", 1)),
        widows=int(data.get("widows", 1)),
    )


# ─────────────────────────────────────────────────────────────────────────────
# File I/O
# ─────────────────────────────────────────────────────────────────────────────

def load_document(path: Path, *, validate: bool = True) -> DocumentDefinition:
    """Load a document snapshot from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return document_from_dict(json.load(f), validate=validate)


def save_document(doc: DocumentDefinition, path: Path) -> None:
    """Write a document snapshot to a JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document_to_dict(doc), f, indent=2, ensure_ascii=False)
