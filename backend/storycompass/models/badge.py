"""Badge ORM — read-only catalog of tiered milestone badges.

Invariants:
    - Keyed by (age_group_id, axis); tier_order ascends with severity
    - required_score is the cumulative axis score needed to earn the badge
"""

from sqlalchemy import Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from storycompass.db.base import Base


class Badge(Base):
    __tablename__ = "badges"
    __table_args__ = (
        Index("ix_badges_age_group_axis", "age_group_id", "axis"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    age_group_id: Mapped[str] = mapped_column(String(20), nullable=False)
    axis: Mapped[str] = mapped_column(String(64), nullable=False)
    tier: Mapped[str] = mapped_column(String(32), nullable=False)
    tier_order: Mapped[int] = mapped_column(Integer, nullable=False)
    required_score: Mapped[float] = mapped_column(Float, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
