"""
Module: extractor.canvas

Purpose:
    Read-only projection of the live editing canvas. The host UI dumps its
    rendered element tree (tags, attributes, measured rectangles and the
    computed style entries the extractor needs) as JSON; this module turns
    that dump into CanvasElement objects.

Key Classes:
    - Rect: Measured box in zoomed canvas pixels
    - CanvasElement: One rendered element
    - ExtractionError: Raised for unusable dumps

Key Functions:
    - canvas_from_dict(): JSON dump -> CanvasElement tree
    - load_canvas(): Read a dump from disk

Dependencies:
    - dataclasses (std)
    - json (std)

Used By:
    - extractor.extractor: extract()
    - controller: prepare_canvas()
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ExtractionError(Exception):
    """Raised when a canvas dump cannot be read."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class Rect:
    """Measured element box (canvas pixels, zoom applied)."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class CanvasElement:
    """
    One element of the rendered canvas.

    Attributes:
        tag: Lower-case element tag
        attributes: Element attributes (string values)
        rect: Measured bounding box in zoomed canvas pixels
        style: Computed style entries in CSS pixels (unzoomed)
        text: Text carried directly by the element
        children: Child elements in document order
    """

    tag: str = "div"
    attributes: Dict[str, str] = field(default_factory=dict)
    rect: Rect = field(default_factory=Rect)
    style: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    children: Tuple["CanvasElement", ...] = ()

    def has(self, attribute: str) -> bool:
        return attribute in self.attributes

    def get(self, attribute: str, default: Optional[str] = None) -> Optional[str]:
        return self.attributes.get(attribute, default)

    def iter(self) -> Iterator["CanvasElement"]:
        """Iterate this element and its descendants in document order."""
        yield self
        for child in self.children:
            yield from child.iter()

    def find_all(self, attribute: str) -> List["CanvasElement"]:
        """
        Outermost descendants carrying ``attribute`` (document order).

        Matches are not searched for nested matches.
        """
        found: List[CanvasElement] = []
        for child in self.children:
            if child.has(attribute):
                found.append(child)
            else:
                found.extend(child.find_all(attribute))
        return found


def canvas_from_dict(data: Dict[str, Any], path: str = "canvas") -> CanvasElement:
    """
    Build a CanvasElement tree from a JSON dump.

    Expected element shape::

        {"tag": "div", "attributes": {...}, "rect": {"x":0,"y":0,"width":..,"height":..},
         "style": {"padding-top": "48px"}, "text": "", "children": [...]}

    Every key is optional except that ``rect`` values, when present, must
    be numbers.

    Raises:
        ExtractionError: If the dump is not an element object
    """
    if not isinstance(data, dict):
        raise ExtractionError(f"{path}: expected an object, got {type(data).__name__}", path=path)

    raw_rect = data.get("rect") or {}
    if not isinstance(raw_rect, dict):
        raise ExtractionError(f"{path}.rect: expected an object", path=f"{path}.rect")
    try:
        rect = Rect(
            x=float(raw_rect.get("x", 0.0)),
            y=float(raw_rect.get("y", 0.0)),
            width=float(raw_rect.get("width", 0.0)),
            height=float(raw_rect.get("height", 0.0)),
        )
    except (TypeError, ValueError) as e:
        raise ExtractionError(f"{path}.rect: {e}", path=f"{path}.rect") from e

    raw_children = data.get("children") or []
    if not isinstance(raw_children, list):
        raise ExtractionError(f"{path}.children: expected a list", path=f"{path}.children")

    return CanvasElement(
        tag=str(data.get("tag", "div")).lower(),
        attributes={str(k): str(v) for k, v in (data.get("attributes") or {}).items()},
        rect=rect,
        style={str(k): str(v) for k, v in (data.get("style") or {}).items()},
        text=str(data.get("text") or ""),
        children=tuple(
            canvas_from_dict(child, f"{path}.children[{i}]")
            for i, child in enumerate(raw_children)
        ),
    )


def load_canvas(path: Path) -> CanvasElement:
    """Load a canvas dump from a JSON file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"{path}: invalid JSON: {e}", path=str(path)) from e
    logger.debug(f"Loaded canvas dump from {path}")
    return canvas_from_dict(data)
