"""Session Snapshot — the session aggregate as plain dataclasses, plus JSON (de)serialization.

Invariants:
    - choice_history, compass_values, player_names are never None (empty on creation)
    - choice_history is append-only; a Choice is never mutated after it is appended
    - AxisTracking.current_value == starting_value + sum(change.delta for change in history)
    - elapsed_time is never negative
    - *_to_dict produce JSON-safe dicts (no datetimes, no Enums); *_from_dict accept them back

Design Decisions:
    - Dataclasses, not ORM rows: core logic stays storage-agnostic and testable without a DB
    - version travels with the snapshot: repositories compare it at save time
    - Missing keys fall back to dataclass defaults (forward-compatible with older rows)
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from storycompass.core.domain_types import DEFAULT_AGE_GROUP, SessionStatus


@dataclass(frozen=True)
class AxisChange:
    """One applied delta on one axis, with the running value it produced."""
    axis: str
    delta: float
    direction: str | None
    resulting_value: float
    timestamp: datetime


@dataclass
class AxisTracking:
    """Per-session running total for a single compass axis."""
    axis: str
    starting_value: float = 0.0
    current_value: float = 0.0
    history: list[AxisChange] = field(default_factory=list)
    last_updated: datetime | None = None


@dataclass(frozen=True)
class Choice:
    """A recorded player choice — immutable once appended to a session."""
    scene_id: str
    choice_text: str
    next_scene_id: str
    player_id: str
    chosen_at: datetime
    axis: str | None = None
    delta: float | None = None
    direction: str | None = None
    axis_change: AxisChange | None = None


@dataclass
class SessionSnapshot:
    """The session aggregate root."""
    id: str
    scenario_id: str
    account_id: str
    profile_id: str
    start_time: datetime
    status: SessionStatus = SessionStatus.IN_PROGRESS
    player_names: list[str] = field(default_factory=list)
    current_scene_id: str = ""
    end_time: datetime | None = None
    paused_at: datetime | None = None
    is_paused: bool = False
    choice_history: list[Choice] = field(default_factory=list)
    compass_values: dict[str, AxisTracking] = field(default_factory=dict)
    target_age_group: str = DEFAULT_AGE_GROUP
    elapsed_time: timedelta = timedelta(0)
    version: int = 0

    @property
    def choice_count(self) -> int:
        return len(self.choice_history)


def compute_elapsed(start_time: datetime, now: datetime) -> timedelta:
    """now - start_time, floored at zero (clock skew never yields negative time)."""
    return max(now - start_time, timedelta(0))


# ─── Serialization ──────────────────────────────────────────────

def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def axis_change_to_dict(change: AxisChange) -> dict:
    return {
        "axis": change.axis,
        "delta": change.delta,
        "direction": change.direction,
        "resulting_value": change.resulting_value,
        "timestamp": _iso(change.timestamp),
    }


def axis_change_from_dict(data: dict) -> AxisChange:
    return AxisChange(
        axis=data["axis"],
        delta=float(data.get("delta", 0.0)),
        direction=data.get("direction"),
        resulting_value=float(data.get("resulting_value", 0.0)),
        timestamp=_parse(data.get("timestamp")),
    )


def choice_to_dict(choice: Choice) -> dict:
    return {
        "scene_id": choice.scene_id,
        "choice_text": choice.choice_text,
        "next_scene_id": choice.next_scene_id,
        "player_id": choice.player_id,
        "chosen_at": _iso(choice.chosen_at),
        "axis": choice.axis,
        "delta": choice.delta,
        "direction": choice.direction,
        "axis_change": (
            axis_change_to_dict(choice.axis_change) if choice.axis_change else None
        ),
    }


def choice_from_dict(data: dict) -> Choice:
    change = data.get("axis_change")
    return Choice(
        scene_id=data.get("scene_id", ""),
        choice_text=data.get("choice_text", ""),
        next_scene_id=data.get("next_scene_id", ""),
        player_id=data.get("player_id", ""),
        chosen_at=_parse(data.get("chosen_at")),
        axis=data.get("axis"),
        delta=data.get("delta"),
        direction=data.get("direction"),
        axis_change=axis_change_from_dict(change) if change else None,
    )


def tracking_to_dict(tracking: AxisTracking) -> dict:
    return {
        "axis": tracking.axis,
        "starting_value": tracking.starting_value,
        "current_value": tracking.current_value,
        "history": [axis_change_to_dict(c) for c in tracking.history],
        "last_updated": _iso(tracking.last_updated),
    }


def tracking_from_dict(data: dict) -> AxisTracking:
    return AxisTracking(
        axis=data["axis"],
        starting_value=float(data.get("starting_value", 0.0)),
        current_value=float(data.get("current_value", 0.0)),
        history=[axis_change_from_dict(c) for c in data.get("history", [])],
        last_updated=_parse(data.get("last_updated")),
    )


def choices_to_json(choices: list[Choice]) -> list[dict]:
    return [choice_to_dict(c) for c in choices]


def choices_from_json(data: list[dict] | None) -> list[Choice]:
    return [choice_from_dict(c) for c in data or []]


def compass_to_json(compass: dict[str, AxisTracking]) -> dict[str, dict]:
    return {axis: tracking_to_dict(t) for axis, t in compass.items()}


def compass_from_json(data: dict[str, dict] | None) -> dict[str, AxisTracking]:
    return {axis: tracking_from_dict(t) for axis, t in (data or {}).items()}
