"""Badge Progress — per-axis tier status for a profile's age-group catalog.

Invariants:
    - One AxisProgress per axis present in the catalog (case-insensitive), sorted by axis_key;
      the axis is reported with the catalog's spelling
    - Tiers listed in tier_order; is_earned comes from the ledger, not from the score
    - remaining_score = max(0, required_score - current_score)
"""

from dataclasses import dataclass, field
from datetime import datetime

from storycompass.core.badge_records import BadgeAward, BadgeDefinition
from storycompass.core.domain_types import SCORE_PRECISION, axis_key
from storycompass.core.resolve_badges import group_by_axis


@dataclass
class TierProgress:
    badge_id: str
    tier: str
    tier_order: int
    title: str
    required_score: float
    remaining_score: float
    is_earned: bool = False
    earned_at: datetime | None = None


@dataclass
class AxisProgress:
    axis: str
    current_score: float
    tiers: list[TierProgress] = field(default_factory=list)


def build_badge_progress(
    catalog: list[BadgeDefinition],
    scores: dict[str, float],
    awards: list[BadgeAward],
) -> list[AxisProgress]:
    earned = {a.badge_id: a for a in awards}
    keyed_scores = {axis_key(axis): score for axis, score in scores.items()}
    progress: list[AxisProgress] = []
    for key, badges in sorted(group_by_axis(catalog).items()):
        score = keyed_scores.get(key, 0.0)
        tiers = []
        for badge in badges:
            award = earned.get(badge.id)
            tiers.append(TierProgress(
                badge_id=badge.id,
                tier=badge.tier,
                tier_order=badge.tier_order,
                title=badge.title,
                required_score=badge.required_score,
                remaining_score=max(0.0, round(badge.required_score - score, SCORE_PRECISION)),
                is_earned=award is not None,
                earned_at=award.awarded_at if award else None,
            ))
        progress.append(AxisProgress(axis=badges[0].axis, current_score=score, tiers=tiers))
    return progress
