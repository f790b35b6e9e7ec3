"""
Module: controller

Purpose:
    High-level entry point of the composition pipeline. Mirrors the
    editor's export preparation: extract the canvas, compose pages, render
    export-ready page trees, and report warnings and timings.

Key Functions:
    - prepare_canvas(): CanvasElement -> PreparedDocument

Key Classes:
    - PreparedDocument: Everything an exporter needs

Dependencies:
    - cv_toolkit.extractor, layout, output
    - cv_toolkit.timing

Used By:
    - scripts/paginate_canvas.py
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from .core import DocumentDefinition
from .extractor import CanvasElement, ExtractOptions, extract
from .layout import LayoutConfig, LayoutWarning, PaginationResult, compose
from .output import RenderResult, render
from .timing import TimingLog, timed_phase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedDocument:
    """
    Result of preparing a canvas for export.

    Attributes:
        document: Extracted snapshot
        result: Composition result
        rendered: Export-ready pages
        timings: Phase durations of this run
    """
    document: DocumentDefinition
    result: PaginationResult
    rendered: RenderResult
    timings: TimingLog = field(default_factory=TimingLog, compare=False)

    @property
    def warnings(self) -> Tuple[LayoutWarning, ...]:
        return self.result.warnings

    @property
    def page_count(self) -> int:
        return self.result.page_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_count": self.page_count,
            "warnings": [w.to_dict() for w in self.warnings],
            "pages": self.result.to_dict()["pages"],
            "rendered": self.rendered.to_dict(),
            "timings": self.timings.to_dict(),
        }


def prepare_canvas(
    canvas: CanvasElement,
    zoom: float = 1.0,
    config: LayoutConfig = LayoutConfig(),
) -> PreparedDocument:
    """
    Extract, compose and render a canvas.

    Structural errors (ExtractionError, InvalidDocumentError) propagate
    unchanged; layout problems are returned as warnings.

    Args:
        canvas: Root of the canvas dump
        zoom: Zoom factor the canvas was measured at
        config: Engine configuration

    Returns:
        PreparedDocument

    Example:
        >>> prepared = prepare_canvas(load_canvas(Path("cv.json")), zoom=0.75)
        >>> prepared.page_count
        2
    """
    timings = TimingLog()
    with timed_phase(timings, "extract"):
        document = extract(canvas, ExtractOptions(zoom=zoom))
    with timed_phase(timings, "compose"):
        result = compose(document, config)
    with timed_phase(timings, "render"):
        rendered = render(result, document)

    logger.info(
        f"Prepared canvas: {result.page_count} page(s), {len(result.warnings)} warning(s) "
        f"in {timings.total * 1000:.1f} ms"
    )
    return PreparedDocument(document=document, result=result, rendered=rendered, timings=timings)
