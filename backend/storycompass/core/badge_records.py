"""Badge Records — catalog entries, ledger awards, and the finalize result.

Invariants:
    - BadgeDefinition is immutable reference data keyed by (age_group_id, axis)
    - tier_order ascends with severity (bronze < silver < gold)
    - BadgeAward is unique per (profile_id, badge_id)
"""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    age_group_id: str
    axis: str
    tier: str
    tier_order: int
    required_score: float
    title: str = ""
    description: str = ""
    image_id: str | None = None


@dataclass(frozen=True)
class BadgeAward:
    profile_id: str
    badge_id: str
    awarded_at: datetime
    source_session_id: str
    axis: str = ""
    trigger_value: float = 0.0
    threshold: float = 0.0


@dataclass
class FinalizeResult:
    session_id: str
    awards: list[str] = field(default_factory=list)
