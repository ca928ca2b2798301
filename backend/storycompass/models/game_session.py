"""GameSession ORM — persists the session aggregate root.

Invariants:
    - id is a string primary key (client-visible, opaque)
    - choice_history is append-only JSON; compass_values is JSON keyed by axis
    - version increments on every successful save (optimistic concurrency token)
    - status transitions: in_progress <-> paused -> completed (terminal)

Design Decisions:
    - JSON columns for choice_history / compass_values: the aggregate is always loaded and
      saved whole, and the profile's choice history is derived by reading its sessions
    - profile_id indexed: cross-session scoring reads every session of one profile
    - elapsed_seconds stored as float: portable across PostgreSQL and SQLite
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, Integer, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from storycompass.db.base import Base


class GameSession(Base):
    """Session aggregate root — owns its choices and compass tracking."""
    __tablename__ = "game_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    scenario_id: Mapped[str] = mapped_column(String(64), nullable=False)
    account_id: Mapped[str] = mapped_column(String(64), nullable=False)
    profile_id: Mapped[str] = mapped_column(
        String(64), nullable=False, index=True,
    )
    player_names: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="in_progress",
    )
    current_scene_id: Mapped[str] = mapped_column(
        String(128), nullable=False, default="",
    )
    choice_history: Mapped[list] = mapped_column(
        JSON, nullable=False, default=list,
    )
    compass_values: Mapped[dict] = mapped_column(
        JSON, nullable=False, default=dict,
    )
    target_age_group: Mapped[str] = mapped_column(
        String(20), nullable=False, default="6-9",
    )
    is_paused: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    elapsed_seconds: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0,
    )
    version: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    end_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    paused_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
