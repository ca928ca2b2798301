"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SessionId, ProfileId, BadgeId are opaque strings — never parse them in domain logic
    - CompassScore is an unbounded float; individual deltas are clamped to ±COMPASS_DELTA_LIMIT
    - All valid states encoded as Enums — no raw string matching
    - Axis identity is case-insensitive: "Honesty" and "honesty" are one axis (axis_key)
    - Axis totals are rounded to SCORE_PRECISION decimals before any threshold comparison

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

SessionId = NewType("SessionId", str)
ProfileId = NewType("ProfileId", str)
BadgeId = NewType("BadgeId", str)
AgeGroupId = NewType("AgeGroupId", str)
Axis = NewType("Axis", str)


# ─── Value Types ─────────────────────────────────────────────────

CompassScore = NewType("CompassScore", float)


# ─── Constants ───────────────────────────────────────────────────

COMPASS_DELTA_LIMIT: float = 2.0
DEFAULT_AGE_GROUP: str = "6-9"
SCORE_PRECISION: int = 6

NEGATIVE_DIRECTIONS: frozenset[str] = frozenset({"negative", "neg", "-", "down"})
POSITIVE_DIRECTIONS: frozenset[str] = frozenset({"positive", "pos", "+", "up"})


def axis_key(axis: str) -> str:
    """Comparison key for an axis name; display names keep their casing."""
    return axis.strip().casefold()


# ─── Enums ───────────────────────────────────────────────────────

class SessionStatus(str, Enum):
    """Session lifecycle states — maps to DB `status` column."""
    IN_PROGRESS = "in_progress"
    PAUSED = "paused"
    COMPLETED = "completed"


class PlayerAction(str, Enum):
    """Player-driven mutations guarded by require_in_progress."""
    MAKE_CHOICE = "make_choice"
    PROGRESS_SCENE = "progress_scene"
