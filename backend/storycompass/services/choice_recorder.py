"""Choice Recorder — appends a player choice to a session and persists it.

Invariants:
    - Request validation runs before any unit of work is opened (no store access on
      a ValidationError)
    - Unknown session -> None, nothing written
    - Session not in progress -> StateViolationError, nothing written
    - Two concurrent recorders on one session never lose an entry: the second save
      fails its version check with ConcurrencyError and is retried by the caller

Design Decisions:
    - Single attempt per call; retry_on_conflict wraps it at the API seam
"""

import logging

from storycompass.core.apply_choice import (
    ChoiceRequest, apply_choice, validate_choice_request,
)
from storycompass.core.domain_types import COMPASS_DELTA_LIMIT
from storycompass.core.repository_protocols import UowFactory
from storycompass.core.session_snapshot import SessionSnapshot
from storycompass.services.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class ChoiceRecorder:
    def __init__(
        self,
        uow_factory: UowFactory,
        clock: Clock = utc_now,
        delta_limit: float = COMPASS_DELTA_LIMIT,
    ):
        self._uow_factory = uow_factory
        self._clock = clock
        self._delta_limit = delta_limit

    async def record(self, request: ChoiceRequest) -> SessionSnapshot | None:
        """Record one choice. Returns the updated session, or None if it does not exist."""
        validate_choice_request(request)
        async with self._uow_factory() as uow:
            session = await uow.sessions.get(request.session_id)
            if session is None:
                logger.info(
                    "Choice for unknown session ignored",
                    extra={"session_id": request.session_id},
                )
                return None
            choice = apply_choice(session, request, self._clock(), self._delta_limit)
            await uow.sessions.save(session)
            await uow.commit()
        logger.info(
            f"Choice recorded (#{session.choice_count})",
            extra={
                "session_id": session.id,
                "profile_id": session.profile_id,
                "axis": choice.axis,
            },
        )
        return session
