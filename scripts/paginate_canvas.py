"""
Paginate a CV canvas dump from the command line.

Reads a canvas dump (as produced by the editor's export hook) or a
serialized DocumentDefinition, composes it, and prints the page layout,
warnings and the remediation plan. Optionally writes page proofs and a
JSON report.

Usage:
    python scripts/paginate_canvas.py canvas.json --zoom 0.75 --proof out/proof.pdf
    python scripts/paginate_canvas.py --document doc.json --plan --json report.json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add src to path so we can import cv_toolkit
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root / "src"))

from cv_toolkit.controller import prepare_canvas
from cv_toolkit.core import InvalidDocumentError
from cv_toolkit.core.utils import load_document
from cv_toolkit.extractor import ExtractionError, load_canvas
from cv_toolkit.layout import LayoutConfig, compose
from cv_toolkit.output import draw_page_proofs, render, save_page_proofs
from cv_toolkit.planning import NodeRegistry, build_plan, diff_plan_operations

logger = logging.getLogger("paginate_canvas")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Paginate a CV canvas dump")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("canvas", nargs="?", type=Path, help="Canvas dump (JSON)")
    source.add_argument("--document", type=Path, help="Serialized DocumentDefinition (JSON)")
    parser.add_argument("--zoom", type=float, default=1.0, help="Zoom the canvas was measured at")
    parser.add_argument("--tolerance", type=float, default=LayoutConfig().fit_tolerance,
                        help="Fit tolerance in CSS pixels")
    parser.add_argument("--plan", action="store_true", help="Print the remediation plan and its diff")
    parser.add_argument("--proof", type=Path, help="Write page proofs (.pdf, or PNG stem)")
    parser.add_argument("--scale", type=float, default=1.0, help="Proof scale (pixels per CSS pixel)")
    parser.add_argument("--json", type=Path, help="Write a JSON report")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    config = LayoutConfig(fit_tolerance=args.tolerance)

    try:
        if args.document:
            document = load_document(args.document)
            result = compose(document, config)
            rendered = render(result, document)
            timings = None
        else:
            prepared = prepare_canvas(load_canvas(args.canvas), zoom=args.zoom, config=config)
            document, result, rendered = prepared.document, prepared.result, prepared.rendered
            timings = prepared.timings
    except (ExtractionError, InvalidDocumentError) as e:
        logger.error(f"Cannot paginate: {e}")
        for detail in getattr(e, "errors", []) or []:
            logger.error(f"  {detail}")
        return 2

    print(f"{result.page_count} page(s), usable height {result.usable_height:g}")
    for page in result.pages:
        usable = document.template_for(page.template_id).usable_height
        print(f"  page {page.index} [{page.template_id}]: {page.height_used:g}/{usable:g} used")
        for placement in page.placements:
            print(f"    {placement.offset_in_page:8.1f}  {placement.block_id}")
    for warning in result.warnings:
        print(f"  ! {warning.kind}: {warning.target_id} ({warning.message})")
    if timings is not None:
        print(timings.summary())

    report = {"result": result.to_dict(), "rendered": rendered.to_dict()}
    if args.plan:
        registry = NodeRegistry.from_document(document)
        plan = build_plan(result.warnings, registry)
        diff = diff_plan_operations(plan.operations, registry)
        print(plan.summary)
        for entry in diff:
            print(f"  [{entry.status}] {entry.operation.label} {entry.operation.props}")
        report["plan"] = plan.to_dict()
        report["diff"] = [entry.to_dict() for entry in diff]

    if args.proof:
        written = save_page_proofs(draw_page_proofs(result, document, scale=args.scale), args.proof)
        print(f"Proofs: {', '.join(str(path) for path in written)}")

    if args.json:
        args.json.parent.mkdir(parents=True, exist_ok=True)
        with open(args.json, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        print(f"Report: {args.json}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
