"""
Module: planning.capabilities

Purpose:
    Which properties each authoring node type recognizes, with the default
    value the editor gives a fresh node. The planner targets nodes by
    capability and the diff reports unknown props as blocked; neither
    inspects node props structurally.

Key Functions:
    - recognizes(): Does a node type take a prop
    - default_for(): Editor default of a prop

Used By:
    - planning.planner
    - planning.diff
    - planning.registry
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

Capabilities = Mapping[str, Mapping[str, Any]]

# Pagination props
BREAK_BEFORE = "breakBefore"
BREAK_AFTER = "breakAfter"
KEEP_WITH_NEXT = "keepWithNext"
PAGE_BREAK = "pageBreak"
ALLOW_ITEM_SPLIT = "allowItemSplit"
ORPHANS = "orphans"
WIDOWS = "widows"

_TEXT_STYLE = {
    "fontSize": "fontSizes.md",
    "fontWeight": "normal",
    "color": "theme.text",
    "textAlign": "left",
    "fontFamily": "fonts.body",
    "lineHeight": 1.4,
}

DEFAULT_CAPABILITIES: Capabilities = {
    "PageNode": {
        "orientation": "portrait",
        "background": "theme.surface",
        "padding": "spacing.2xl",
        PAGE_BREAK: "auto",
    },
    "SectionNode": {
        "title": "Section",
        "showDivider": True,
        "padding": "spacing.lg",
        "gap": "spacing.md",
        KEEP_WITH_NEXT: False,
        BREAK_BEFORE: "auto",
        BREAK_AFTER: "auto",
    },
    "RepeatNode": {
        "collectionPath": "experiences",
        "itemAlias": "experience",
        "gap": "spacing.md",
        "layoutPreset": "list",
        ALLOW_ITEM_SPLIT: True,
        ORPHANS: 1,
        WIDOWS: 1,
        KEEP_WITH_NEXT: False,
    },
    "StackNode": {"direction": "vertical", "gap": "spacing.md", "align": "stretch", "justify": "start"},
    "GridNode": {"columns": 2, "rows": 1, "gap": "spacing.md", "align": "stretch", "autoFlow": "row"},
    "Container": {"padding": "spacing.none", "margin": "spacing.none", "direction": "column"},
    "TextNode": {"text": "Texte", **_TEXT_STYLE},
    "RichTextNode": {"minHeight": 100, "padding": "spacing.md"},
    "VariableTextNode": {"variablePath": "", "fallbackText": "Variable", **_TEXT_STYLE},
    "ImageNode": {"src": "/placeholder.svg", "alt": "Image", "width": 200, "height": 200},
    "BadgeNode": {"label": "Badge", "color": "colors.primary", "uppercase": True},
    "RatingNode": {"value": 3, "max": 5, "icon": "star", "size": 18},
    "ShapeNode": {"type": "rectangle", "width": 120, "height": 8, "rotate": 0},
}


def recognizes(capabilities: Capabilities, node_type: Optional[str], prop: str) -> bool:
    """Whether nodes of ``node_type`` take ``prop`` (unknown types take nothing)."""
    if not node_type:
        return False
    return prop in capabilities.get(node_type, {})


def default_for(capabilities: Capabilities, node_type: Optional[str], prop: str, fallback: Any = None) -> Any:
    """Editor default of ``prop`` for ``node_type``, else ``fallback``."""
    if not node_type:
        return fallback
    return capabilities.get(node_type, {}).get(prop, fallback)
