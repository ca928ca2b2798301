"""Choice Application — validates a choice request and applies it to a session snapshot.

Invariants:
    - Validation runs before anything else; a failing request never touches the session
    - choice_history only grows; current_scene_id == last appended choice's next_scene_id
    - A delta is normalized once (direction sign, then clamp to ±limit); the normalized
      value is what the Choice, the AxisChange, and later scoring all see
    - Untracked axes are recorded on the Choice but do not create an AxisTracking
    - A choice axis matches its AxisTracking case-insensitively ("Honesty" updates "honesty")

Design Decisions:
    - Pure mutation of the snapshot: the shell owns load/save and the version check
    - Field labels in ValidationError match the request contract (SessionId, ChoiceText, ...)
"""

from dataclasses import dataclass
from datetime import datetime

from storycompass.core.domain_types import (
    COMPASS_DELTA_LIMIT, NEGATIVE_DIRECTIONS, POSITIVE_DIRECTIONS, PlayerAction, axis_key,
)
from storycompass.core.enforce_session_state import require_in_progress
from storycompass.core.errors import ValidationError
from storycompass.core.session_snapshot import (
    AxisChange, AxisTracking, Choice, SessionSnapshot, compute_elapsed,
)


@dataclass
class ChoiceRequest:
    session_id: str
    scene_id: str
    choice_text: str
    next_scene_id: str
    player_id: str | None = None
    axis: str | None = None
    direction: str | None = None
    delta: float | None = None


_REQUIRED_FIELDS: tuple[tuple[str, str], ...] = (
    ("session_id", "SessionId"),
    ("scene_id", "SceneId"),
    ("choice_text", "ChoiceText"),
    ("next_scene_id", "NextSceneId"),
)


def validate_choice_request(request: ChoiceRequest) -> None:
    """Raise ValidationError naming the first missing required field."""
    for attr, label in _REQUIRED_FIELDS:
        value = getattr(request, attr)
        if value is None or not str(value).strip():
            raise ValidationError(label)


def normalize_delta(
    delta: float, direction: str | None, limit: float = COMPASS_DELTA_LIMIT,
) -> float:
    """Apply the direction's sign to delta, then clamp to [-limit, limit]."""
    if direction:
        normalized = direction.strip().lower()
        if normalized in NEGATIVE_DIRECTIONS:
            delta = -abs(delta)
        elif normalized in POSITIVE_DIRECTIONS:
            delta = abs(delta)
    return max(-limit, min(limit, delta))


def choice_axis_delta(
    choice: Choice, limit: float = COMPASS_DELTA_LIMIT,
) -> tuple[str, float] | None:
    """(axis, normalized delta) for a scoring-relevant choice, else None."""
    if not choice.axis or not choice.axis.strip() or choice.delta is None:
        return None
    return choice.axis, normalize_delta(choice.delta, choice.direction, limit)


def find_tracking(session: SessionSnapshot, axis: str) -> AxisTracking | None:
    key = axis_key(axis)
    for name, tracking in session.compass_values.items():
        if axis_key(name) == key:
            return tracking
    return None


def apply_choice(
    session: SessionSnapshot,
    request: ChoiceRequest,
    now: datetime,
    delta_limit: float = COMPASS_DELTA_LIMIT,
) -> Choice:
    """Append the choice, update axis tracking, advance the scene. Returns the Choice."""
    validate_choice_request(request)
    require_in_progress(session, PlayerAction.MAKE_CHOICE)

    player_id = request.player_id or session.profile_id
    axis = request.axis.strip() if request.axis and request.axis.strip() else None
    delta = (
        normalize_delta(request.delta, request.direction, delta_limit)
        if request.delta is not None else None
    )

    change = None
    tracking = find_tracking(session, axis) if axis else None
    if tracking is not None and delta is not None:
        tracking.current_value += delta
        change = AxisChange(
            axis=tracking.axis,
            delta=delta,
            direction=request.direction,
            resulting_value=tracking.current_value,
            timestamp=now,
        )
        tracking.history.append(change)
        tracking.last_updated = now

    choice = Choice(
        scene_id=request.scene_id,
        choice_text=request.choice_text,
        next_scene_id=request.next_scene_id,
        player_id=player_id,
        chosen_at=now,
        axis=axis,
        delta=delta,
        direction=request.direction,
        axis_change=change,
    )
    session.choice_history.append(choice)
    session.current_scene_id = request.next_scene_id
    session.elapsed_time = compute_elapsed(session.start_time, now)
    return choice
