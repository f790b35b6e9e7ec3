"""
Module: timing

Purpose:
    Phase timing for the composition pipeline (extract, compose, render),
    so slow canvases can be diagnosed from logs or the CLI report.

Key Classes:
    - TimingLog: Collects phase durations

Key Functions:
    - timed_phase: Context manager for timing code blocks

Dependencies:
    - time (std)
    - contextlib (std)
    - dataclasses (std)

Used By:
    - controller.prepare_canvas()
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Generator

logger = logging.getLogger(__name__)


@dataclass
class TimingLog:
    """
    Phase durations of one pipeline run.

    Attributes:
        phases: phase name -> duration in seconds (insertion order)

    Example:
        >>> log = TimingLog()
        >>> with timed_phase(log, "compose"):
        ...     result = compose(doc)
        >>> log.total >= log.phases["compose"]
        True
    """
    phases: Dict[str, float] = field(default_factory=dict)

    def log_phase(self, phase: str, duration: float) -> None:
        """Record a phase, accumulating if it runs more than once."""
        self.phases[phase] = self.phases.get(phase, 0.0) + duration

    @property
    def total(self) -> float:
        return sum(self.phases.values())

    def slowest(self) -> str:
        """Name of the slowest phase ("" when nothing was timed)."""
        if not self.phases:
            return ""
        return max(self.phases.items(), key=lambda item: item[1])[0]

    def summary(self) -> str:
        """Human-readable timing summary."""
        lines = ["=== Pagination Timing ==="]
        for phase, duration in self.phases.items():
            lines.append(f"  {phase:12s} {duration * 1000:8.2f} ms")
        lines.append(f"  {'total':12s} {self.total * 1000:8.2f} ms")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {"phases": dict(self.phases), "total": self.total}


@contextmanager
def timed_phase(log: TimingLog, phase: str) -> Generator[None, None, None]:
    """
    Context manager for timing a pipeline phase.

    The duration is recorded even if the block raises.

    Example:
        >>> log = TimingLog()
        >>> with timed_phase(log, "extract"):
        ...     doc = extract(canvas)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        log.log_phase(phase, elapsed)
        logger.debug(f"{phase} took {elapsed * 1000:.2f} ms")
