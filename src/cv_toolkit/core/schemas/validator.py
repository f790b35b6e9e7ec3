"""
Document Validation Utilities

Validates DocumentDefinition snapshots before composition and serialized
documents (JSON dicts) before deserialization.

**ERROR POLICY:**

- Malformed geometry or tree structure is a caller bug, never a layout
  condition: it raises InvalidDocumentError and no partial result is made.
- All problems found in one pass are reported together in ``errors``.
- Overflow (blocks taller than a page) is valid input; the engine reports
  it as a layout warning instead.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import jsonschema

from ..models.blocks import BlockKind, BlockNode, GroupPolicy
from ..models.document import DocumentDefinition
from ..models.template import PageTemplate

DOCUMENT_SCHEMA_VERSION = 1

_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class InvalidDocumentError(Exception):
    """Raised when a document is structurally malformed."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or [message]


def validate_document_data(data: dict[str, Any]) -> None:
    """
    Validate a serialized document against the JSON schema.

    Args:
        data: Document dictionary (as produced by document_to_dict)

    Raises:
        InvalidDocumentError: If the data does not match the schema
    """
    schema = _load_schema("document")
    validator = jsonschema.Draft7Validator(schema)
    problems = sorted(validator.iter_errors(data), key=lambda e: list(e.absolute_path))
    if not problems:
        return
    first = problems[0]
    raise InvalidDocumentError(
        f"Schema validation failed: {first.message}",
        path=".".join(str(p) for p in first.absolute_path),
        errors=[
            f"{'.'.join(str(p) for p in e.absolute_path) or '<root>'}: {e.message}"
            for e in problems
        ],
    )


def validate_document(doc: DocumentDefinition) -> None:
    """
    Validate a document snapshot before composition.

    Checks:
    - Every page template has a positive usable height and a unique id
    - Kinds are known, heights finite and non-negative
    - Ids are unique and every child reference resolves
    - Every node has at most one parent and parent_id names it
    - The tree is acyclic and every node is reachable from a root

    Args:
        doc: Document to validate

    Raises:
        InvalidDocumentError: If any check fails (all failures listed)
    """
    errors: List[str] = []

    _validate_templates(doc, errors)

    seen: Dict[str, int] = {}
    for position, node in enumerate(doc.nodes):
        path = f"nodes[{position}]"
        if node.id in seen:
            errors.append(f"{path}.id: duplicate id {node.id!r} (first at nodes[{seen[node.id]}])")
        else:
            seen[node.id] = position
        _validate_node(node, path, errors)

    roots_resolve = True
    for root in doc.roots:
        if root not in seen:
            errors.append(f"roots: unknown root id {root!r}")
            roots_resolve = False

    parents, links_resolve = _validate_links(doc, seen, errors)
    if roots_resolve and links_resolve:
        _validate_acyclic(doc, parents, errors)

    if errors:
        raise InvalidDocumentError(
            f"Invalid document: {errors[0]}",
            path=errors[0].split(":", 1)[0],
            errors=errors,
        )


def _validate_templates(doc: DocumentDefinition, errors: List[str]) -> None:
    _validate_template(doc.template, "template", errors)
    seen: Dict[str, int] = {}
    for position, template in enumerate(doc.templates):
        path = f"templates[{position}]"
        if template.id in seen:
            errors.append(f"{path}.id: duplicate template id {template.id!r} "
                          f"(first at templates[{seen[template.id]}])")
            continue
        seen[template.id] = position
        if template.id == doc.template.id and template != doc.template:
            errors.append(f"{path}: template {template.id!r} differs from the default template")
            continue
        _validate_template(template, path, errors)


def _validate_template(template: PageTemplate, path: str, errors: List[str]) -> None:
    for name in ("width", "height", "content_padding", "vertical_reduction"):
        value = getattr(template, name)
        if not _is_finite_number(value) or value < 0:
            errors.append(f"{path}.{name}: must be a finite non-negative number, got {value!r}")
            return
    if template.usable_height <= 0:
        errors.append(
            f"{path}: usable height must be positive "
            f"(height={template.height}, padding={template.content_padding})"
        )


def _validate_node(node: BlockNode, path: str, errors: List[str]) -> None:
    if not isinstance(node.kind, BlockKind):
        known = ", ".join(k.value for k in BlockKind)
        errors.append(f"{path}.kind: unknown kind {node.kind!r} (expected one of {known})")
    if not _is_finite_number(node.height):
        errors.append(f"{path}.height: must be a finite number, got {node.height!r}")
    elif node.height < 0:
        errors.append(f"{path}.height: negative height {node.height} for {node.id!r}")
    if node.group_policy is not None:
        if not isinstance(node.group_policy, GroupPolicy):
            errors.append(f"{path}.group_policy: expected GroupPolicy")
        elif node.kind is not BlockKind.GROUP:
            errors.append(f"{path}.group_policy: only group nodes carry a group policy")


def _validate_links(
    doc: DocumentDefinition,
    seen: Dict[str, int],
    errors: List[str],
) -> Tuple[Dict[str, str], bool]:
    """
    Check child references.

    Returns:
        (child id -> parent id, whether every child id resolves)
    """
    parents: Dict[str, str] = {}
    resolved = True
    roots = set(doc.roots)
    for position, node in enumerate(doc.nodes):
        for child in node.children:
            if child not in seen:
                errors.append(f"nodes[{position}].children: dangling child id {child!r}")
                resolved = False
                continue
            if child in parents and parents[child] != node.id:
                errors.append(
                    f"nodes[{seen[child]}]: node {child!r} has two parents "
                    f"({parents[child]!r} and {node.id!r})"
                )
                continue
            if child in roots:
                errors.append(f"nodes[{seen[child]}]: root {child!r} is also a child of {node.id!r}")
            parents[child] = node.id
            declared = doc.nodes[seen[child]].parent_id
            if declared is None:
                errors.append(
                    f"nodes[{seen[child]}].parent_id: missing, expected parent {node.id!r}"
                )
            elif declared != node.id:
                errors.append(
                    f"nodes[{seen[child]}].parent_id: {declared!r} does not match parent {node.id!r}"
                )
    return parents, resolved


def _validate_acyclic(doc: DocumentDefinition, parents: Dict[str, str], errors: List[str]) -> None:
    """Detect cycles and unreachable nodes with an iterative colored DFS."""
    WHITE, GREY, BLACK = 0, 1, 2
    color = {node.id: WHITE for node in doc.nodes}

    def visit(start: str) -> Optional[str]:
        stack: List[tuple[str, int]] = [(start, 0)]
        color[start] = GREY
        while stack:
            node_id, child_pos = stack[-1]
            children = doc.index[node_id].children
            if child_pos < len(children):
                stack[-1] = (node_id, child_pos + 1)
                child = children[child_pos]
                if color[child] == GREY:
                    return child
                if color[child] == WHITE:
                    color[child] = GREY
                    stack.append((child, 0))
            else:
                color[node_id] = BLACK
                stack.pop()
        return None

    for root in doc.roots:
        if color.get(root) == WHITE:
            cyclic = visit(root)
            if cyclic is not None:
                errors.append(f"nodes: cyclic parent reference through {cyclic!r}")
                return

    for node in doc.nodes:
        if color[node.id] == WHITE:
            # Unreached from any root: either orphaned or part of a detached cycle
            cyclic = visit(node.id)
            if cyclic is not None:
                errors.append(f"nodes: cyclic parent reference through {cyclic!r}")
            else:
                errors.append(f"nodes: {node.id!r} is not reachable from any root")
            return


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
