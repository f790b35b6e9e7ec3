"""
Module: output.proof

Purpose:
    Page proofs for composition results. Draws every page as an image with
    the content box and a labelled rectangle per placement, so pagination
    decisions can be checked without a browser.

Key Functions:
    - draw_page_proofs(): One image per page
    - save_page_proofs(): Write proofs as a PDF or numbered PNGs

Dependencies:
    - PIL: Image drawing and PDF/PNG output
    - cv_toolkit.layout.models

Used By:
    - scripts/paginate_canvas.py (--proof)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from cv_toolkit.core.models import DocumentDefinition
from cv_toolkit.layout.models import PaginationResult, Placement

logger = logging.getLogger(__name__)

# Visualization constants
COLORS = {
    "root-block": (37, 99, 235, 170),    # Blue - blocks
    "group-item": (22, 163, 74, 170),    # Green - collection items
    "group": (147, 51, 234, 170),        # Purple - collections placed whole
    "header": (100, 116, 139, 170),      # Slate - container chrome
}
OVERFLOW_COLOR = (220, 38, 38, 90)       # Red - content past the content box
CONTENT_BOX_COLOR = (203, 213, 225, 255)
PAGE_COLOR = (255, 255, 255, 255)
LABEL_BG_COLOR = (0, 0, 0, 200)
LABEL_TEXT_COLOR = (255, 255, 255)
BOX_LINE_WIDTH = 2
FONT_SIZE = 12


def _load_font(size: int) -> ImageFont.ImageFont:
    try:
        return ImageFont.truetype("Arial.ttf", size)
    except (IOError, OSError):
        return ImageFont.load_default()


def _color_for(doc: DocumentDefinition, placement: Placement, headers: set) -> Tuple[int, int, int, int]:
    if placement.block_id in headers:
        return COLORS["header"]
    node = doc.find(placement.block_id)
    kind = node.kind.value if node is not None else "root-block"
    return COLORS.get(kind, COLORS["root-block"])


def draw_page_proofs(
    result: PaginationResult,
    doc: DocumentDefinition,
    scale: float = 1.0,
) -> List[Image.Image]:
    """
    Draw one proof image per page.

    Args:
        result: Composition output
        doc: Composed document (page templates and node kinds)
        scale: Pixels per length unit

    Returns:
        RGB images, one per page

    Example:
        >>> images = draw_page_proofs(compose(doc), doc, scale=0.5)
        >>> images[0].size
        (397, 562)
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive: {scale}")

    font = _load_font(max(8, round(FONT_SIZE * max(scale, 0.5))))

    placed = {p.block_id for page in result.pages for p in page.placements}
    headers = {block_id for block_id in placed if _holds_placed(doc, block_id, placed)}

    images: List[Image.Image] = []
    for page in result.pages:
        template = doc.template_for(page.template_id)
        width = max(1, round(template.width * scale))
        height = max(1, round(template.height * scale))
        pad = template.content_padding * scale
        usable = template.usable_height * scale

        sheet = Image.new("RGBA", (width, height), PAGE_COLOR)
        overlay = Image.new("RGBA", sheet.size, (255, 255, 255, 0))
        draw = ImageDraw.Draw(overlay)

        content_right = width - pad
        draw.rectangle((pad, pad, content_right, pad + usable), outline=CONTENT_BOX_COLOR, width=1)

        for placement in page.placements:
            top = pad + placement.offset_in_page * scale
            bottom = max(top, pad + placement.bottom * scale)
            box = (pad, top, content_right, bottom)
            _draw_placement_box(draw, box, placement.block_id, _color_for(doc, placement, headers), font)

        if page.height_used > template.usable_height:
            draw.rectangle(
                (pad, pad + usable, content_right, pad + page.height_used * scale),
                fill=OVERFLOW_COLOR,
            )

        images.append(Image.alpha_composite(sheet, overlay).convert("RGB"))

    logger.debug(f"Drew {len(images)} page proof(s) at scale {scale}")
    return images


def _holds_placed(doc: DocumentDefinition, block_id: str, placed: set) -> bool:
    return any(
        node.id in placed
        for node in doc.iter_subtree(block_id)
        if node.id != block_id
    )


def _draw_placement_box(
    draw: ImageDraw.ImageDraw,
    box: Tuple[float, float, float, float],
    label_text: str,
    color: Tuple[int, int, int, int],
    font: ImageFont.ImageFont,
) -> None:
    """Draw one placement rectangle with its id label inside the top-left corner."""
    x0, y0, _, _ = box
    draw.rectangle(box, outline=color, width=BOX_LINE_WIDTH)

    text_bbox = draw.textbbox((0, 0), label_text, font=font)
    text_width = text_bbox[2] - text_bbox[0]
    text_height = text_bbox[3] - text_bbox[1]
    draw.rectangle(
        (x0 + 2, y0 + 2, x0 + text_width + 6, y0 + text_height + 6),
        fill=LABEL_BG_COLOR,
    )
    draw.text((x0 + 4, y0 + 4), label_text, fill=LABEL_TEXT_COLOR, font=font)


def save_page_proofs(images: Sequence[Image.Image], path: Path) -> List[Path]:
    """
    Save page proofs.

    A ``.pdf`` path receives a single multi-page PDF; any other path is
    used as a stem for numbered PNG files (``proof_01.png``, ...).

    Returns:
        Paths written

    Raises:
        ValueError: If there is nothing to save
    """
    if not images:
        raise ValueError("no page proofs to save")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".pdf":
        first, *rest = images
        first.save(path, "PDF", save_all=True, append_images=list(rest))
        written = [path]
    else:
        stem = path.with_suffix("")
        written = []
        for i, image in enumerate(images, start=1):
            target = stem.parent / f"{stem.name}_{i:02d}.png"
            image.save(target, "PNG")
            written.append(target)

    logger.info(f"Saved {len(images)} page proof(s) to {path}")
    return written
