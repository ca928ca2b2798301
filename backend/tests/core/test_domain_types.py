"""Domain Types — verifies identity wrappers, constants and enum values.

Tests:
    - NewType wrappers are transparent strings
    - SessionStatus / PlayerAction serialize to their string values
    - Direction vocabularies do not overlap
"""

from storycompass.core.domain_types import (
    COMPASS_DELTA_LIMIT, DEFAULT_AGE_GROUP, NEGATIVE_DIRECTIONS, POSITIVE_DIRECTIONS,
    BadgeId, PlayerAction, ProfileId, SessionId, SessionStatus,
)


def test_identity_types_wrap_str():
    assert SessionId("s-1") == "s-1"
    assert ProfileId("p-1") == "p-1"
    assert BadgeId("b-1") == "b-1"


def test_session_status_values():
    assert SessionStatus.IN_PROGRESS == "in_progress"
    assert SessionStatus.PAUSED == "paused"
    assert SessionStatus.COMPLETED == "completed"
    assert len(SessionStatus) == 3


def test_session_status_round_trips_from_db_value():
    assert SessionStatus("paused") is SessionStatus.PAUSED


def test_player_actions():
    assert {a.value for a in PlayerAction} == {"make_choice", "progress_scene"}


def test_defaults():
    assert COMPASS_DELTA_LIMIT == 2.0
    assert DEFAULT_AGE_GROUP == "6-9"


def test_direction_vocabularies_disjoint():
    assert not NEGATIVE_DIRECTIONS & POSITIVE_DIRECTIONS
    assert "down" in NEGATIVE_DIRECTIONS
    assert "up" in POSITIVE_DIRECTIONS
