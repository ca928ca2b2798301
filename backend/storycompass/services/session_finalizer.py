"""Session Finalizer — score, award and complete a session as one transaction.

Invariants:
    - Scoring, award inserts and the status change commit together or not at all
    - Any failure, or cancellation of the awaiting task, before commit leaves the
      ledger and the session exactly as they were
    - Finalizing a completed session re-evaluates awards (idempotent: the ledger
      already holds earlier ones) and does not rewrite end_time
    - Two concurrent finalizes of one profile never produce duplicate awards:
      the loser hits the ledger constraint or the version check (ConcurrencyError)

Design Decisions:
    - Session row read FOR UPDATE: on PostgreSQL concurrent finalizes of the same
      session serialize at the database instead of conflicting at commit
    - Unknown session raises ResourceNotFoundError (finalize is not a quiet transition)
"""

import logging

from storycompass.core.badge_records import FinalizeResult
from storycompass.core.enforce_session_state import end_session
from storycompass.core.errors import ErrorContext, ResourceNotFoundError
from storycompass.core.repository_protocols import UowFactory
from storycompass.services.axis_scoring import AxisScoringService
from storycompass.services.badge_awarding import BadgeAwardingService
from storycompass.services.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class SessionFinalizer:
    def __init__(
        self,
        uow_factory: UowFactory,
        scoring: AxisScoringService,
        awarding: BadgeAwardingService,
        clock: Clock = utc_now,
    ):
        self._uow_factory = uow_factory
        self._scoring = scoring
        self._awarding = awarding
        self._clock = clock

    async def finalize(self, session_id: str) -> FinalizeResult:
        async with self._uow_factory() as uow:
            session = await uow.sessions.get(session_id, for_update=True)
            if session is None:
                raise ResourceNotFoundError(
                    "Session", session_id, ErrorContext(session_id=session_id),
                )
            now = self._clock()
            scores = await self._scoring.score_profile(uow, session.profile_id)
            age_group = await self._awarding.resolve_age_group(uow, session)
            awards = await self._awarding.award(
                uow, session.profile_id, age_group, scores, session.id, now,
            )
            if end_session(session, now) is not None:
                await uow.sessions.save(session)
            await uow.commit()

        logger.info(
            f"Session finalized with {len(awards)} new badge(s)",
            extra={"session_id": session.id, "profile_id": session.profile_id},
        )
        return FinalizeResult(
            session_id=session.id, awards=[a.badge_id for a in awards],
        )
