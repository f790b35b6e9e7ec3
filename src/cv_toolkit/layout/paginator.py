"""
Module: layout.paginator

Purpose:
    Distribute the placement stream of a document over fixed-height pages.
    Honors forced breaks, keep-with-next chains, atomic groups and the
    orphan/widow minimums of splittable groups; reports every constraint
    it had to bend as a layout warning. Each page takes the template of
    the content that opens it, and content authored on another template
    always starts a new page.

Key Functions:
    - compose(): DocumentDefinition -> PaginationResult
    - build_segments(): Group flow units into atomic placement decisions

Dependencies:
    - cv_toolkit.core: validation and models
    - layout.flatten: placement stream

Used By:
    - controller.prepare_canvas()
    - output.renderer (consumes the result)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from itertools import groupby
from typing import Dict, List, Optional, Tuple

from cv_toolkit.core import DocumentDefinition, validate_document
from cv_toolkit.core.models import BreakAfter, BreakBefore, PageTemplate

from .config import LayoutConfig
from .flatten import FlowUnit, flatten
from .models import (
    MSG_ITEM_OVERSIZED,
    BlockOversized,
    GroupOversized,
    LayoutWarning,
    OrphansAdjusted,
    Page,
    PaginationResult,
    Placement,
    WidowsAdjusted,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """
    Units that must land on the same page.

    Attributes:
        units: Member units in flow order
        forced: A forced break precedes this segment
        chained: Joined through keep-with-next or an avoid/avoid pair
    """

    units: Tuple[FlowUnit, ...]
    forced: bool = False
    chained: bool = False

    @property
    def height(self) -> float:
        return sum(unit.height for unit in self.units)

    @property
    def atomic_group_id(self) -> Optional[str]:
        """Group id when the segment is exactly one atomic group's items."""
        first = self.units[0]
        if first.group_atomic and all(unit.same_group(first) for unit in self.units):
            return first.group_id
        return None


def build_segments(units: List[FlowUnit], *, chains: bool = True) -> List[Segment]:
    """
    Group units into segments.

    A unit joins the previous segment when the previous unit keeps with
    next, when both sides of the boundary avoid a break, or when both
    belong to the same atomic group. A forced break, or a change of page
    template, always opens a new segment.

    Args:
        units: Flow units in order
        chains: Honor keep/avoid joins (False when dissolving a chain)
    """
    segments: List[Segment] = []
    previous: Optional[FlowUnit] = None
    for unit in units:
        forced = unit.break_before is BreakBefore.BEFORE or (
            previous is not None and (
                previous.break_after is BreakAfter.AFTER
                or previous.template_id != unit.template_id
            )
        )
        same_atomic = (
            previous is not None and unit.group_atomic and unit.same_group(previous)
        )
        chained = chains and previous is not None and (
            previous.keep_with_next
            or (previous.break_after is BreakAfter.AVOID and unit.break_before is BreakBefore.AVOID)
        )
        if segments and not forced and (same_atomic or chained):
            last = segments[-1]
            segments[-1] = Segment(
                units=last.units + (unit,),
                forced=last.forced,
                chained=last.chained or (chained and not same_atomic),
            )
        else:
            segments.append(Segment(units=(unit,), forced=forced))
        previous = unit
    return segments


@dataclass
class _Slot:
    unit: FlowUnit
    offset: float
    put_id: int


@dataclass
class _PageState:
    index: int
    template: PageTemplate
    slots: List[_Slot] = field(default_factory=list)
    used: float = 0.0

    @property
    def usable(self) -> float:
        return self.template.usable_height


class _Composer:
    """Mutable placement state for a single compose() call."""

    def __init__(self, doc: DocumentDefinition, config: LayoutConfig, units: List[FlowUnit]):
        self.doc = doc
        self.tolerance = config.fit_tolerance
        self.pages: List[_PageState] = []
        self.warnings: List[LayoutWarning] = []
        self._puts = 0
        self._item_heights: Dict[str, List[float]] = {}
        for unit in units:
            if unit.group_id is not None:
                self._item_heights.setdefault(unit.group_id, []).append(unit.height)

    # ── page helpers ────────────────────────────────────────────────────────

    def _page_for(self, template: PageTemplate) -> _PageState:
        """Current page, or a fresh one when content switches template."""
        if not self.pages:
            return self._new_page(template)
        page = self.pages[-1]
        if page.template.id != template.id:
            if page.slots:
                return self._new_page(template)
            page.template = template
        return page

    def _new_page(self, template: PageTemplate) -> _PageState:
        page = _PageState(index=len(self.pages), template=template)
        self.pages.append(page)
        return page

    def _fits(self, page: _PageState, height: float) -> bool:
        return height <= page.usable - page.used + self.tolerance

    def _overflowing(self, page: _PageState) -> bool:
        return page.used > page.usable + self.tolerance

    def _put(self, page: _PageState, segment: Segment) -> None:
        self._puts += 1
        for unit in segment.units:
            page.slots.append(_Slot(unit, page.used, self._puts))
            page.used += unit.height

    # ── placement ───────────────────────────────────────────────────────────

    def place(self, segment: Segment) -> None:
        template = self.doc.template_for(segment.units[0].template_id)
        page = self._page_for(template)
        if segment.forced and page.slots:
            page = self._new_page(template)

        height = segment.height
        if height > template.usable_height + self.tolerance:
            self._place_oversized(page, segment)
            return

        if self._fits(page, height):
            self._put(page, segment)
            return

        carried: List[Segment] = []
        if not self._overflowing(page):
            carried = self._adjust_boundary(page, segment)
        page = self._new_page(template)
        for moved in carried:
            self._put(page, moved)
        if self._fits(page, height):
            self._put(page, segment)
        else:
            self.place(replace(segment, forced=False))

    def _place_oversized(self, page: _PageState, segment: Segment) -> None:
        group_id = segment.atomic_group_id
        if group_id is None and len(segment.units) > 1:
            for part in build_segments(list(segment.units), chains=False):
                self.place(part if part.units[0] is not segment.units[0]
                           else replace(part, forced=segment.forced))
            return

        if page.slots:
            page = self._new_page(page.template)
        self._put(page, segment)
        if group_id is not None:
            warning: LayoutWarning = GroupOversized(group_id)
        else:
            unit = segment.units[0]
            warning = BlockOversized(unit.node_id, MSG_ITEM_OVERSIZED) if unit.in_group \
                else BlockOversized(unit.node_id)
        logger.warning(f"Oversized content on page {page.index}: {warning.target_id} "
                       f"({segment.height:.1f} > {page.usable:.1f})")
        self.warnings.append(warning)

    # ── boundary adjustment ────────────────────────────────────────────────

    def _adjust_boundary(self, page: _PageState, segment: Segment) -> List[Segment]:
        """
        Move trailing items of a split group so its minimums hold.

        Returns the segments to re-place at the top of the next page
        (already removed from ``page``).
        """
        first = segment.units[0]
        if not first.in_group or first.group_atomic or not page.slots:
            return []
        if not page.slots[-1].unit.same_group(first):
            return []

        group_id = first.group_id
        trailing = 0
        for slot in reversed(page.slots):
            if slot.unit.group_id != group_id:
                break
            trailing += 1

        if first.orphans and trailing < first.orphans:
            run = self._tail_run(page, group_id, trailing)
            if run is not None:
                self.warnings.append(OrphansAdjusted(group_id))
                logger.debug(f"Pushed {trailing} orphan item(s) of {group_id} off page {page.index}")
                return self._pop(page, run[0])

        unplaced = first.group_size - first.index_in_group
        if not first.widows or not 0 < unplaced < first.widows:
            return []

        tail_height = sum(self._item_heights[group_id][first.index_in_group:])
        run = self._tail_run(page, group_id, first.widows - unplaced)
        if run is not None and (
            trailing - run[1] < first.orphans
            or not self._fits_fresh_page(page, run[0], tail_height)
        ):
            run = None
        if run is None:
            # Keep the group's tail together instead
            run = self._tail_run(page, group_id, trailing)
            if run is not None and not self._fits_fresh_page(page, run[0], tail_height):
                run = None
        if run is None:
            return []

        self.warnings.append(WidowsAdjusted(group_id))
        logger.debug(f"Moved {run[1]} item(s) of {group_id} off page {page.index} "
                     f"to keep {first.widows} together")
        return self._pop(page, run[0])

    def _fits_fresh_page(self, page: _PageState, slot_count: int, tail_height: float) -> bool:
        # The next page uses the same template: a group never spans templates
        moved_height = sum(slot.unit.height for slot in page.slots[-slot_count:])
        return moved_height + tail_height <= page.usable + self.tolerance

    def _tail_run(self, page: _PageState, group_id: str, items: int) -> Optional[Tuple[int, int]]:
        """
        Smallest run of whole trailing puts holding at least ``items`` items of a group.

        Returns (slot count, item count), or None when moving the run would
        leave the page empty.
        """
        slot_count = 0
        item_count = 0
        index = len(page.slots)
        while item_count < items:
            if index == 0:
                return None
            put_id = page.slots[index - 1].put_id
            while index > 0 and page.slots[index - 1].put_id == put_id:
                index -= 1
                slot_count += 1
                if page.slots[index].unit.group_id == group_id:
                    item_count += 1
        if index == 0:
            return None
        return slot_count, item_count

    def _pop(self, page: _PageState, slot_count: int) -> List[Segment]:
        """Remove the last ``slot_count`` slots and rebuild their segments."""
        popped = page.slots[-slot_count:]
        del page.slots[-slot_count:]
        page.used = sum(slot.unit.height for slot in page.slots)
        return [
            Segment(units=tuple(slot.unit for slot in run))
            for _, run in groupby(popped, key=lambda slot: slot.put_id)
        ]

    def finish(self) -> Tuple[Page, ...]:
        kept = [state for state in self.pages if state.slots]
        return tuple(
            Page(
                index=index,
                placements=tuple(
                    Placement(
                        block_id=slot.unit.node_id,
                        offset_in_page=slot.offset,
                        height=slot.unit.height,
                        group_id=slot.unit.group_id,
                    )
                    for slot in state.slots
                ),
                height_used=state.used,
                template_id=state.template.id,
            )
            for index, state in enumerate(kept)
        )


def compose(doc: DocumentDefinition, config: LayoutConfig = LayoutConfig()) -> PaginationResult:
    """
    Paginate a document.

    Deterministic and free of I/O: equal documents always produce equal
    results, so callers may cache on the snapshot.

    Args:
        doc: Document snapshot
        config: Engine configuration

    Returns:
        PaginationResult with pages, warnings and the usable height of
        the default template

    Raises:
        InvalidDocumentError: If the document is structurally malformed

    Example:
        >>> result = compose(doc)
        >>> [page.block_ids for page in result.pages]
        [('intro', 'experience'), ('skills',)]
    """
    validate_document(doc)

    units = flatten(doc)
    composer = _Composer(doc, config, units)
    for segment in build_segments(units):
        composer.place(segment)

    pages = composer.finish()
    if config.log_pages:
        for page in pages:
            usable = doc.template_for(page.template_id).usable_height
            logger.debug(f"Page {page.index} ({page.template_id}): {page.placement_count} "
                         f"placement(s), {page.height_used:.1f}/{usable:.1f}")
    logger.info(f"Composed {len(units)} units into {len(pages)} page(s) "
                f"with {len(composer.warnings)} warning(s)")
    return PaginationResult(
        pages=pages,
        warnings=tuple(composer.warnings),
        usable_height=doc.template.usable_height,
    )
