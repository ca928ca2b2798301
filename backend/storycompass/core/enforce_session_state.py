"""Session State Machine — legal status transitions and player-action guards.

Invariants:
    - in_progress is the initial status; completed is terminal (never left, never deleted)
    - pause:  in_progress -> paused            (else no-op, returns None)
    - resume: paused -> in_progress            (else no-op, returns None)
    - end:    in_progress | paused -> completed (else no-op, returns None)
    - Player actions (choice, scene progress) require in_progress, else StateViolationError
    - Transition functions mutate the snapshot in place and return it; callers persist

Design Decisions:
    - Asymmetric failure: lifecycle transitions fail quietly (None), player actions fail
      loudly (StateViolationError naming the status)
    - `now` is always passed in
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from storycompass.core.domain_types import (
    DEFAULT_AGE_GROUP, PlayerAction, SessionStatus, axis_key,
)
from storycompass.core.errors import (
    ErrorContext, StateViolationError, ValidationError,
)
from storycompass.core.session_snapshot import (
    AxisTracking, SessionSnapshot, compute_elapsed,
)


@dataclass
class StartSessionRequest:
    scenario_id: str
    account_id: str
    profile_id: str
    player_names: list[str] = field(default_factory=list)
    target_age_group: str | None = None
    compass_axes: list[str] = field(default_factory=list)
    starting_scene_id: str = ""


_START_REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("scenario_id", "ScenarioId"),
    ("account_id", "AccountId"),
    ("profile_id", "ProfileId"),
)


def open_session(
    request: StartSessionRequest, now: datetime, session_id: str | None = None,
) -> SessionSnapshot:
    """Create a new in-progress session with one tracker per compass axis."""
    for attr, label in _START_REQUIRED_FIELDS:
        value = getattr(request, attr)
        if not value or not value.strip():
            raise ValidationError(label)

    compass: dict[str, AxisTracking] = {}
    seen: set[str] = set()
    for raw in request.compass_axes:
        axis = raw.strip()
        if axis and axis_key(axis) not in seen:
            seen.add(axis_key(axis))
            compass[axis] = AxisTracking(axis=axis, last_updated=now)
    return SessionSnapshot(
        id=session_id or str(uuid.uuid4()),
        scenario_id=request.scenario_id,
        account_id=request.account_id,
        profile_id=request.profile_id,
        start_time=now,
        status=SessionStatus.IN_PROGRESS,
        player_names=[n for n in request.player_names if n and n.strip()],
        current_scene_id=request.starting_scene_id,
        compass_values=compass,
        target_age_group=request.target_age_group or DEFAULT_AGE_GROUP,
    )


# ─── Lifecycle transitions (quiet) ──────────────────────────────

def pause_session(
    session: SessionSnapshot | None, now: datetime,
) -> SessionSnapshot | None:
    if session is None or session.status != SessionStatus.IN_PROGRESS:
        return None
    session.status = SessionStatus.PAUSED
    session.is_paused = True
    session.paused_at = now
    session.elapsed_time = compute_elapsed(session.start_time, now)
    return session


def resume_session(
    session: SessionSnapshot | None, now: datetime,
) -> SessionSnapshot | None:
    if session is None or session.status != SessionStatus.PAUSED:
        return None
    session.status = SessionStatus.IN_PROGRESS
    session.is_paused = False
    session.paused_at = None
    session.elapsed_time = compute_elapsed(session.start_time, now)
    return session


def end_session(
    session: SessionSnapshot | None, now: datetime,
) -> SessionSnapshot | None:
    if session is None or session.status == SessionStatus.COMPLETED:
        return None
    session.status = SessionStatus.COMPLETED
    session.end_time = now
    session.is_paused = False
    session.paused_at = None
    session.elapsed_time = compute_elapsed(session.start_time, now)
    return session


# ─── Player-action guard (loud) ─────────────────────────────────

def require_in_progress(session: SessionSnapshot, action: PlayerAction) -> None:
    """Raise StateViolationError unless the session accepts player actions."""
    if session.status != SessionStatus.IN_PROGRESS:
        raise StateViolationError(
            session.status.value, action.value,
            ErrorContext(session_id=session.id, profile_id=session.profile_id),
        )


def progress_to_scene(
    session: SessionSnapshot, scene_id: str, now: datetime,
) -> SessionSnapshot:
    """Move the narrative to scene_id without recording a choice."""
    if not scene_id or not scene_id.strip():
        raise ValidationError("SceneId")
    require_in_progress(session, PlayerAction.PROGRESS_SCENE)
    session.current_scene_id = scene_id
    session.elapsed_time = compute_elapsed(session.start_time, now)
    return session
