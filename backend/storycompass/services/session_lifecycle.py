"""Session Lifecycle — start, read, list, pause, resume, end and scene progress.

Invariants:
    - Every command loads, mutates and saves the snapshot inside one unit of work
    - pause / resume / end on a missing session or an illegal status return None
      and write nothing (no save, no commit)
    - progress_to_scene on a missing session returns None; on a session that is not
      in progress it raises StateViolationError
    - get_session raises ResourceNotFoundError (direct reads are loud)

Design Decisions:
    - Transition rules live in core/enforce_session_state.py; this class only does IO
    - Version check on save: a concurrent writer surfaces as ConcurrencyError
"""

import logging
from collections.abc import Callable
from datetime import datetime

from storycompass.core.enforce_session_state import (
    StartSessionRequest, end_session, open_session, pause_session,
    progress_to_scene, resume_session,
)
from storycompass.core.errors import ErrorContext, ResourceNotFoundError
from storycompass.core.repository_protocols import UowFactory
from storycompass.core.session_snapshot import SessionSnapshot
from storycompass.services.clock import Clock, utc_now

logger = logging.getLogger(__name__)

Transition = Callable[[SessionSnapshot | None, datetime], SessionSnapshot | None]


class SessionLifecycleService:
    """Session CRUD plus the quiet lifecycle transitions."""

    def __init__(self, uow_factory: UowFactory, clock: Clock = utc_now):
        self._uow_factory = uow_factory
        self._clock = clock

    async def start_session(self, request: StartSessionRequest) -> SessionSnapshot:
        session = open_session(request, self._clock())
        async with self._uow_factory() as uow:
            await uow.sessions.add(session)
            await uow.commit()
        logger.info(
            "Session started",
            extra={"session_id": session.id, "profile_id": session.profile_id},
        )
        return session

    async def get_session(self, session_id: str) -> SessionSnapshot:
        async with self._uow_factory() as uow:
            session = await uow.sessions.get(session_id)
        if session is None:
            raise ResourceNotFoundError(
                "Session", session_id, ErrorContext(session_id=session_id),
            )
        return session

    async def list_sessions_for_profile(self, profile_id: str) -> list[SessionSnapshot]:
        """Newest first."""
        async with self._uow_factory() as uow:
            return await uow.sessions.list_for_profile(profile_id)

    async def pause(self, session_id: str) -> SessionSnapshot | None:
        return await self._transition(session_id, pause_session, "paused")

    async def resume(self, session_id: str) -> SessionSnapshot | None:
        return await self._transition(session_id, resume_session, "resumed")

    async def end(self, session_id: str) -> SessionSnapshot | None:
        return await self._transition(session_id, end_session, "ended")

    async def progress_to_scene(
        self, session_id: str, scene_id: str,
    ) -> SessionSnapshot | None:
        async with self._uow_factory() as uow:
            session = await uow.sessions.get(session_id)
            if session is None:
                logger.info("Scene progress on unknown session", extra={"session_id": session_id})
                return None
            progress_to_scene(session, scene_id, self._clock())
            await uow.sessions.save(session)
            await uow.commit()
        return session

    async def _transition(
        self, session_id: str, transition: Transition, verb: str,
    ) -> SessionSnapshot | None:
        async with self._uow_factory() as uow:
            session = await uow.sessions.get(session_id)
            updated = transition(session, self._clock())
            if updated is None:
                logger.info(
                    f"Session not {verb}: missing or status does not allow it",
                    extra={
                        "session_id": session_id,
                        "status": session.status.value if session else None,
                    },
                )
                return None
            await uow.sessions.save(updated)
            await uow.commit()
        logger.info(
            f"Session {verb}",
            extra={"session_id": updated.id, "profile_id": updated.profile_id},
        )
        return updated
