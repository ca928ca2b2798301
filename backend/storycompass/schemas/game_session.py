"""Game Session Schemas — session start, choice, scene progress and session views.

Invariants:
    - Request models never enforce required-ness of domain ids (see package docstring)
    - SessionResponse.elapsed_seconds is never negative
"""

from datetime import datetime

from pydantic import BaseModel, Field

from storycompass.core.apply_choice import ChoiceRequest
from storycompass.core.badge_records import FinalizeResult
from storycompass.core.enforce_session_state import StartSessionRequest
from storycompass.core.session_snapshot import (
    AxisChange, AxisTracking, Choice, SessionSnapshot,
)


# ─── Requests ───────────────────────────────────────────────────

class StartSessionBody(BaseModel):
    scenario_id: str = ""
    account_id: str = ""
    profile_id: str = ""
    player_names: list[str] = Field(default_factory=list)
    target_age_group: str | None = None
    compass_axes: list[str] = Field(default_factory=list)
    starting_scene_id: str = ""

    def to_request(self) -> StartSessionRequest:
        return StartSessionRequest(
            scenario_id=self.scenario_id,
            account_id=self.account_id,
            profile_id=self.profile_id,
            player_names=list(self.player_names),
            target_age_group=self.target_age_group,
            compass_axes=list(self.compass_axes),
            starting_scene_id=self.starting_scene_id,
        )


class ChoiceBody(BaseModel):
    """A player's choice. axis/delta are optional; direction flips the delta's sign."""
    scene_id: str = ""
    choice_text: str = Field("", max_length=2000)
    next_scene_id: str = ""
    player_id: str | None = None
    axis: str | None = None
    direction: str | None = None
    delta: float | None = None

    def to_request(self, session_id: str) -> ChoiceRequest:
        return ChoiceRequest(
            session_id=session_id,
            scene_id=self.scene_id,
            choice_text=self.choice_text,
            next_scene_id=self.next_scene_id,
            player_id=self.player_id,
            axis=self.axis,
            direction=self.direction,
            delta=self.delta,
        )


class ProgressBody(BaseModel):
    scene_id: str = ""


# ─── Responses ──────────────────────────────────────────────────

class AxisChangeResponse(BaseModel):
    axis: str
    delta: float
    direction: str | None
    resulting_value: float
    timestamp: datetime

    @classmethod
    def from_change(cls, change: AxisChange) -> "AxisChangeResponse":
        return cls(
            axis=change.axis, delta=change.delta, direction=change.direction,
            resulting_value=change.resulting_value, timestamp=change.timestamp,
        )


class AxisTrackingResponse(BaseModel):
    axis: str
    starting_value: float
    current_value: float
    history: list[AxisChangeResponse]
    last_updated: datetime | None

    @classmethod
    def from_tracking(cls, tracking: AxisTracking) -> "AxisTrackingResponse":
        return cls(
            axis=tracking.axis,
            starting_value=tracking.starting_value,
            current_value=tracking.current_value,
            history=[AxisChangeResponse.from_change(c) for c in tracking.history],
            last_updated=tracking.last_updated,
        )


class ChoiceResponse(BaseModel):
    scene_id: str
    choice_text: str
    next_scene_id: str
    player_id: str
    chosen_at: datetime
    axis: str | None = None
    delta: float | None = None
    direction: str | None = None

    @classmethod
    def from_choice(cls, choice: Choice) -> "ChoiceResponse":
        return cls(
            scene_id=choice.scene_id,
            choice_text=choice.choice_text,
            next_scene_id=choice.next_scene_id,
            player_id=choice.player_id,
            chosen_at=choice.chosen_at,
            axis=choice.axis,
            delta=choice.delta,
            direction=choice.direction,
        )


class SessionResponse(BaseModel):
    id: str
    scenario_id: str
    account_id: str
    profile_id: str
    status: str
    is_paused: bool
    player_names: list[str]
    current_scene_id: str
    target_age_group: str
    start_time: datetime
    end_time: datetime | None
    paused_at: datetime | None
    elapsed_seconds: float
    choice_count: int
    choice_history: list[ChoiceResponse]
    compass_values: dict[str, AxisTrackingResponse]
    version: int

    @classmethod
    def from_snapshot(cls, session: SessionSnapshot) -> "SessionResponse":
        return cls(
            id=session.id,
            scenario_id=session.scenario_id,
            account_id=session.account_id,
            profile_id=session.profile_id,
            status=session.status.value,
            is_paused=session.is_paused,
            player_names=list(session.player_names),
            current_scene_id=session.current_scene_id,
            target_age_group=session.target_age_group,
            start_time=session.start_time,
            end_time=session.end_time,
            paused_at=session.paused_at,
            elapsed_seconds=max(0.0, session.elapsed_time.total_seconds()),
            choice_count=session.choice_count,
            choice_history=[ChoiceResponse.from_choice(c) for c in session.choice_history],
            compass_values={
                axis: AxisTrackingResponse.from_tracking(t)
                for axis, t in session.compass_values.items()
            },
            version=session.version,
        )


class SessionSummary(BaseModel):
    """List view — no choice history or axis detail."""
    id: str
    scenario_id: str
    status: str
    current_scene_id: str
    start_time: datetime
    end_time: datetime | None
    choice_count: int

    @classmethod
    def from_snapshot(cls, session: SessionSnapshot) -> "SessionSummary":
        return cls(
            id=session.id,
            scenario_id=session.scenario_id,
            status=session.status.value,
            current_scene_id=session.current_scene_id,
            start_time=session.start_time,
            end_time=session.end_time,
            choice_count=session.choice_count,
        )


class FinalizeResponse(BaseModel):
    session_id: str
    awards: list[str]

    @classmethod
    def from_result(cls, result: FinalizeResult) -> "FinalizeResponse":
        return cls(session_id=result.session_id, awards=list(result.awards))
