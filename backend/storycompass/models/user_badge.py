"""UserBadge ORM — the award ledger.

Invariants:
    - UNIQUE (profile_id, badge_id): a badge is recorded at most once per profile,
      no matter how many finalize calls race
    - source_session_id links every award to the session whose finalize produced it
    - trigger_value / threshold record the cumulative score at award time

Design Decisions:
    - Uniqueness enforced by the database, not only by the pre-insert ledger check
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from storycompass.db.base import Base


class UserBadge(Base):
    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("profile_id", "badge_id", name="uq_user_badges_profile_badge"),
    )

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    profile_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True,
    )
    badge_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("badges.id"), nullable=False,
    )
    source_session_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("game_sessions.id"), nullable=False,
    )
    axis: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    trigger_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    threshold: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    awarded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
