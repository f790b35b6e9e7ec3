"""
Module: layout.config

Purpose:
    Configuration for the pagination engine.
    Page geometry lives on the document's PageTemplate; this holds the
    engine's own numeric policy.

Key Classes:
    - LayoutConfig: Immutable engine configuration

Dependencies:
    - dataclasses (std)

Used By:
    - layout.paginator: compose()
    - controller: prepare_canvas()
"""

from __future__ import annotations

from dataclasses import dataclass

# Measured heights come from floating point layout; sub-pixel excess is not overflow
DEFAULT_FIT_TOLERANCE = 0.01


@dataclass(frozen=True)
class LayoutConfig:
    """
    Configuration for composition (immutable).

    Attributes:
        fit_tolerance: Slack allowed when comparing a height with the
            remaining page space (length units)
        log_pages: Log one debug line per composed page

    Example:
        >>> config = LayoutConfig(fit_tolerance=0.5)
    """

    fit_tolerance: float = DEFAULT_FIT_TOLERANCE
    log_pages: bool = False

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.fit_tolerance < 0:
            raise ValueError(f"fit_tolerance must be non-negative: {self.fit_tolerance}")
