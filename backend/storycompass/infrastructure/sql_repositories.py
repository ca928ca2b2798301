"""SQL Repositories — SQLAlchemy implementations of the core boundary Protocols.

Invariants:
    - Every repository works on the AsyncSession it was given; none of them commit
    - SqlSessionRepository.save is a conditional UPDATE on (id, version); zero affected rows
      raises ConcurrencyError and nothing is written
    - Datetimes leave this module timezone-aware (SQLite returns naive UTC values)
    - The profile's choice history is derived from all of its sessions, oldest first

Design Decisions:
    - Explicit version column compared in the WHERE clause rather than mapper
      version_id_col: the snapshot, not the identity map, carries the token
    - for_update=True emits SELECT ... FOR UPDATE (ignored by SQLite)
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storycompass.core.badge_records import BadgeAward, BadgeDefinition
from storycompass.core.domain_types import SessionStatus
from storycompass.core.errors import ConcurrencyError, ErrorContext
from storycompass.core.session_snapshot import (
    Choice, SessionSnapshot,
    choices_from_json, choices_to_json, compass_from_json, compass_to_json,
)
from storycompass.models.badge import Badge
from storycompass.models.game_session import GameSession
from storycompass.models.user_badge import UserBadge
from storycompass.models.user_profile import UserProfile


def _utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ─── Row <-> snapshot mapping ───────────────────────────────────

def session_to_snapshot(row: GameSession) -> SessionSnapshot:
    return SessionSnapshot(
        id=row.id,
        scenario_id=row.scenario_id,
        account_id=row.account_id,
        profile_id=row.profile_id,
        start_time=_utc(row.start_time),
        status=SessionStatus(row.status),
        player_names=list(row.player_names or []),
        current_scene_id=row.current_scene_id or "",
        end_time=_utc(row.end_time),
        paused_at=_utc(row.paused_at),
        is_paused=row.is_paused,
        choice_history=choices_from_json(row.choice_history),
        compass_values=compass_from_json(row.compass_values),
        target_age_group=row.target_age_group,
        elapsed_time=timedelta(seconds=row.elapsed_seconds or 0.0),
        version=row.version,
    )


def _mutable_columns(session: SessionSnapshot) -> dict:
    return {
        "status": session.status.value,
        "player_names": list(session.player_names),
        "current_scene_id": session.current_scene_id,
        "choice_history": choices_to_json(session.choice_history),
        "compass_values": compass_to_json(session.compass_values),
        "target_age_group": session.target_age_group,
        "is_paused": session.is_paused,
        "elapsed_seconds": session.elapsed_time.total_seconds(),
        "end_time": session.end_time,
        "paused_at": session.paused_at,
    }


def badge_to_definition(row: Badge) -> BadgeDefinition:
    return BadgeDefinition(
        id=row.id,
        age_group_id=row.age_group_id,
        axis=row.axis,
        tier=row.tier,
        tier_order=row.tier_order,
        required_score=row.required_score,
        title=row.title,
        description=row.description,
        image_id=row.image_id,
    )


def user_badge_to_award(row: UserBadge) -> BadgeAward:
    return BadgeAward(
        profile_id=row.profile_id,
        badge_id=row.badge_id,
        awarded_at=_utc(row.awarded_at),
        source_session_id=row.source_session_id,
        axis=row.axis,
        trigger_value=row.trigger_value,
        threshold=row.threshold,
    )


# ─── Repositories ───────────────────────────────────────────────

class SqlSessionRepository:
    """Session persistence with optimistic concurrency on `version`."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(
        self, session_id: str, for_update: bool = False,
    ) -> SessionSnapshot | None:
        query = select(GameSession).where(GameSession.id == session_id)
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        row = result.scalar_one_or_none()
        return session_to_snapshot(row) if row else None

    async def add(self, session: SessionSnapshot) -> None:
        self.db.add(GameSession(
            id=session.id,
            scenario_id=session.scenario_id,
            account_id=session.account_id,
            profile_id=session.profile_id,
            start_time=session.start_time,
            version=session.version,
            **_mutable_columns(session),
        ))
        await self.db.flush()

    async def save(self, session: SessionSnapshot) -> None:
        result = await self.db.execute(
            update(GameSession)
            .where(GameSession.id == session.id)
            .where(GameSession.version == session.version)
            .values(**_mutable_columns(session), version=session.version + 1)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            raise ConcurrencyError(
                f"Session '{session.id}' was modified concurrently "
                f"(expected version {session.version})",
                ErrorContext(session_id=session.id, profile_id=session.profile_id),
            )
        session.version += 1

    async def list_for_profile(self, profile_id: str) -> list[SessionSnapshot]:
        result = await self.db.execute(
            select(GameSession)
            .where(GameSession.profile_id == profile_id)
            .order_by(GameSession.start_time.desc(), GameSession.id),
        )
        return [session_to_snapshot(row) for row in result.scalars().all()]


class SqlChoiceHistory:
    """Choice history of a profile, joined across all of its sessions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_all_choices_for_profile(self, profile_id: str) -> list[Choice]:
        result = await self.db.execute(
            select(GameSession.choice_history)
            .where(GameSession.profile_id == profile_id)
            .order_by(GameSession.start_time, GameSession.id),
        )
        choices: list[Choice] = []
        for history in result.scalars().all():
            choices.extend(choices_from_json(history))
        return choices


class SqlBadgeCatalog:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_age_group(self, age_group_id: str) -> list[BadgeDefinition]:
        result = await self.db.execute(
            select(Badge)
            .where(Badge.age_group_id == age_group_id)
            .order_by(Badge.axis, Badge.tier_order),
        )
        return [badge_to_definition(row) for row in result.scalars().all()]


class SqlAwardLedger:
    """Award ledger backed by user_badges (UNIQUE profile_id, badge_id)."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, profile_id: str, badge_id: str) -> bool:
        result = await self.db.execute(
            select(UserBadge.id)
            .where(UserBadge.profile_id == profile_id)
            .where(UserBadge.badge_id == badge_id),
        )
        return result.first() is not None

    async def get_for_profile(self, profile_id: str) -> list[BadgeAward]:
        result = await self.db.execute(
            select(UserBadge)
            .where(UserBadge.profile_id == profile_id)
            .order_by(UserBadge.awarded_at, UserBadge.badge_id),
        )
        return [user_badge_to_award(row) for row in result.scalars().all()]

    async def add(self, award: BadgeAward) -> None:
        self.db.add(UserBadge(
            profile_id=award.profile_id,
            badge_id=award.badge_id,
            source_session_id=award.source_session_id,
            axis=award.axis,
            trigger_value=award.trigger_value,
            threshold=award.threshold,
            awarded_at=award.awarded_at,
        ))
        await self.db.flush()


class SqlProfileRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_age_group(self, profile_id: str) -> str | None:
        result = await self.db.execute(
            select(UserProfile.age_group).where(UserProfile.id == profile_id),
        )
        return result.scalar_one_or_none()
