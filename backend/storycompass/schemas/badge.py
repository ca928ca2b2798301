"""Badge Schemas — catalog entries, awards, axis scores and tier progress."""

from datetime import datetime

from pydantic import BaseModel

from storycompass.core.badge_progress import AxisProgress
from storycompass.core.badge_records import BadgeAward, BadgeDefinition


class BadgeResponse(BaseModel):
    id: str
    age_group_id: str
    axis: str
    tier: str
    tier_order: int
    required_score: float
    title: str
    description: str
    image_id: str | None = None

    @classmethod
    def from_definition(cls, badge: BadgeDefinition) -> "BadgeResponse":
        return cls(
            id=badge.id,
            age_group_id=badge.age_group_id,
            axis=badge.axis,
            tier=badge.tier,
            tier_order=badge.tier_order,
            required_score=badge.required_score,
            title=badge.title,
            description=badge.description,
            image_id=badge.image_id,
        )


class AwardResponse(BaseModel):
    badge_id: str
    awarded_at: datetime
    source_session_id: str
    axis: str
    trigger_value: float
    threshold: float

    @classmethod
    def from_award(cls, award: BadgeAward) -> "AwardResponse":
        return cls(
            badge_id=award.badge_id,
            awarded_at=award.awarded_at,
            source_session_id=award.source_session_id,
            axis=award.axis,
            trigger_value=award.trigger_value,
            threshold=award.threshold,
        )


class AxisScoresResponse(BaseModel):
    profile_id: str
    scores: dict[str, float]


class TierProgressResponse(BaseModel):
    badge_id: str
    tier: str
    tier_order: int
    title: str
    required_score: float
    remaining_score: float
    is_earned: bool
    earned_at: datetime | None = None


class AxisProgressResponse(BaseModel):
    axis: str
    current_score: float
    tiers: list[TierProgressResponse]

    @classmethod
    def from_progress(cls, progress: AxisProgress) -> "AxisProgressResponse":
        return cls(
            axis=progress.axis,
            current_score=progress.current_score,
            tiers=[
                TierProgressResponse(
                    badge_id=t.badge_id, tier=t.tier, tier_order=t.tier_order,
                    title=t.title, required_score=t.required_score,
                    remaining_score=t.remaining_score, is_earned=t.is_earned,
                    earned_at=t.earned_at,
                )
                for t in progress.tiers
            ],
        )
