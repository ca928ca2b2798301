"""Axis Scoring — cumulative per-axis totals over a profile's full choice history.

Invariants:
    - Input is every recorded choice of the profile across all of its sessions
    - One accumulation pass; each choice contributes its normalized delta exactly once
    - Choices without an axis or without a delta contribute nothing
    - Totals are keyed by axis_key (case-insensitive) and rounded to SCORE_PRECISION,
      so 0.3 + 0.3 + 0.3 reaches a 0.9 threshold
    - Never reads AxisTracking.current_value (that is a per-session running total)
    - Deterministic: same history in, same totals out

Design Decisions:
    - Totals re-derived from the append-only log on every call, no stored counter
"""

from collections.abc import Iterable

from storycompass.core.apply_choice import choice_axis_delta
from storycompass.core.domain_types import COMPASS_DELTA_LIMIT, SCORE_PRECISION, axis_key
from storycompass.core.session_snapshot import Choice


def compute_axis_totals(
    choices: Iterable[Choice], delta_limit: float = COMPASS_DELTA_LIMIT,
) -> dict[str, float]:
    """Sum normalized deltas per axis."""
    totals: dict[str, float] = {}
    for choice in choices:
        axis_delta = choice_axis_delta(choice, delta_limit)
        if axis_delta is None:
            continue
        axis, delta = axis_delta
        key = axis_key(axis)
        totals[key] = totals.get(key, 0.0) + delta
    return {axis: round(total, SCORE_PRECISION) for axis, total in totals.items()}
