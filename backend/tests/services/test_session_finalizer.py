"""Session Finalizer — cumulative scoring, tiered awards, idempotence and atomicity.

Tests cover:
    - Award after crossing a threshold across several sessions
    - Two tiers in one finalize
    - Re-finalize awards nothing new and keeps end_time
    - Age group resolution (profile → session target → default)
    - Failure or cancellation before commit leaves ledger and session untouched
    - Decimal deltas and mixed-case axis names still reach a threshold
    - Concurrent finalizes never duplicate an award
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from storycompass.core.apply_choice import ChoiceRequest, apply_choice
from storycompass.core.badge_records import BadgeDefinition
from storycompass.core.domain_types import SessionStatus
from storycompass.core.enforce_session_state import StartSessionRequest, open_session
from storycompass.core.errors import ResourceNotFoundError, TransientStoreError
from storycompass.services.axis_scoring import AxisScoringService
from storycompass.services.badge_awarding import BadgeAwardingService
from storycompass.services.retry import retry_on_conflict
from storycompass.services.session_finalizer import SessionFinalizer
from tests.services.fake_store import InMemoryStore

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)

CATALOG = [
    BadgeDefinition("courage-bronze", "6-9", "courage", "bronze", 1, 5.0),
    BadgeDefinition("courage-silver", "6-9", "courage", "silver", 2, 10.0),
    BadgeDefinition("courage-gold", "6-9", "courage", "gold", 3, 15.0),
    BadgeDefinition("courage-teen", "10-12", "courage", "bronze", 1, 1.0),
]


def _session(session_id, deltas, offset_minutes=0, profile_id="kid-1", **start):
    started = T0 + timedelta(minutes=offset_minutes)
    session = open_session(
        StartSessionRequest("forest", "acct-1", profile_id, compass_axes=["courage"], **start),
        started, session_id=session_id,
    )
    for i, delta in enumerate(deltas):
        apply_choice(session, ChoiceRequest(
            session_id, f"scene-{i}", "choice", f"scene-{i + 1}", axis="courage", delta=delta,
        ), started)
    return session


@pytest.fixture
def store():
    return InMemoryStore(badges=list(CATALOG))


def _finalizer(store):
    return SessionFinalizer(
        store.uow_factory(), AxisScoringService(), BadgeAwardingService(),
        clock=lambda: T0 + timedelta(hours=1),
    )


async def test_award_after_cumulative_threshold(store):
    # 2.0 + 2.0 in earlier sessions, 1.0 now: total 5.0 == bronze threshold
    store.put_session(_session("s-1", [2.0], 0))
    store.put_session(_session("s-2", [2.0], 10))
    store.put_session(_session("s-3", [1.0], 20))

    result = await _finalizer(store).finalize("s-3")

    assert result.session_id == "s-3"
    assert result.awards == ["courage-bronze"]
    award = store.awards[0]
    assert award.source_session_id == "s-3"
    assert award.trigger_value == 5.0
    assert award.threshold == 5.0
    assert store.sessions["s-3"].status == SessionStatus.COMPLETED


async def test_below_threshold_awards_nothing_but_completes(store):
    store.put_session(_session("s-1", [2.0, 2.0]))
    result = await _finalizer(store).finalize("s-1")
    assert result.awards == []
    assert store.sessions["s-1"].status == SessionStatus.COMPLETED


async def test_two_tiers_in_one_finalize(store):
    store.put_session(_session("s-1", [2.0] * 6))  # 12.0
    result = await _finalizer(store).finalize("s-1")
    assert result.awards == ["courage-bronze", "courage-silver"]


async def test_refinalize_is_idempotent(store):
    store.put_session(_session("s-1", [2.0] * 3))
    finalizer = _finalizer(store)
    await finalizer.finalize("s-1")
    end_time = store.sessions["s-1"].end_time

    second = SessionFinalizer(
        store.uow_factory(), AxisScoringService(), BadgeAwardingService(),
        clock=lambda: T0 + timedelta(days=1),
    )
    result = await second.finalize("s-1")

    assert result.awards == []
    assert [a.badge_id for a in store.awards] == ["courage-bronze"]
    assert store.sessions["s-1"].end_time == end_time


async def test_later_session_awards_only_the_next_tier(store):
    store.put_session(_session("s-1", [2.0] * 3))
    await _finalizer(store).finalize("s-1")
    store.put_session(_session("s-2", [2.0] * 3, 30))  # 12.0 total

    result = await _finalizer(store).finalize("s-2")
    assert result.awards == ["courage-silver"]


async def test_unknown_session_is_not_found(store):
    with pytest.raises(ResourceNotFoundError):
        await _finalizer(store).finalize("nope")


async def test_profile_age_group_wins(store):
    store.profiles["kid-1"] = "10-12"
    store.put_session(_session("s-1", [1.0]))
    result = await _finalizer(store).finalize("s-1")
    assert result.awards == ["courage-teen"]


async def test_session_target_age_group_when_profile_has_none(store):
    store.put_session(_session("s-1", [1.0], target_age_group="10-12"))
    result = await _finalizer(store).finalize("s-1")
    assert result.awards == ["courage-teen"]


async def test_scores_scoped_to_profile(store):
    store.put_session(_session("other", [2.0] * 5, profile_id="kid-2"))
    store.put_session(_session("s-1", [1.0]))
    result = await _finalizer(store).finalize("s-1")
    assert result.awards == []


async def test_store_failure_rolls_back_everything(store):
    store.put_session(_session("s-1", [2.0] * 3))
    store.fail_award_add = True

    with pytest.raises(TransientStoreError):
        await _finalizer(store).finalize("s-1")

    assert store.awards == []
    assert store.sessions["s-1"].status == SessionStatus.IN_PROGRESS
    assert store.commits == 0


async def test_decimal_and_mixed_case_choices_earn_badge(store):
    store.badges.append(BadgeDefinition("honesty-bronze", "6-9", "Honesty", "bronze", 1, 0.9))
    session = open_session(
        StartSessionRequest("forest", "acct-1", "kid-1", compass_axes=["honesty"]),
        T0, session_id="s-1",
    )
    for i, axis in enumerate(["honesty", "Honesty", "HONESTY"]):
        apply_choice(session, ChoiceRequest(
            "s-1", f"scene-{i}", "tell the truth", f"scene-{i + 1}", axis=axis, delta=0.3,
        ), T0)
    store.put_session(session)

    result = await _finalizer(store).finalize("s-1")

    assert result.awards == ["honesty-bronze"]
    [award] = store.awards
    assert award.trigger_value == 0.9


async def test_cancellation_before_commit_rolls_back(store):
    store.put_session(_session("s-1", [2.0] * 3))
    store.commit_gate = asyncio.Event()

    task = asyncio.create_task(_finalizer(store).finalize("s-1"))
    await store.commit_entered.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert store.awards == []
    assert store.sessions["s-1"].status == SessionStatus.IN_PROGRESS
    assert store.sessions["s-1"].version == 0


async def test_concurrent_finalize_same_session_awards_once(store):
    store.put_session(_session("s-1", [2.0] * 3))
    finalizer = _finalizer(store)

    results = await asyncio.gather(*(
        retry_on_conflict(lambda: finalizer.finalize("s-1"), base_delay_ms=1)
        for _ in range(2)
    ))

    assert sorted(len(r.awards) for r in results) == [0, 1]
    assert [a.badge_id for a in store.awards] == ["courage-bronze"]


async def test_concurrent_finalize_sibling_sessions_awards_once(store):
    store.put_session(_session("s-1", [2.0] * 2, 0))
    store.put_session(_session("s-2", [2.0] * 2, 10))  # 8.0 across both
    finalizer = _finalizer(store)

    results = await asyncio.gather(
        retry_on_conflict(lambda: finalizer.finalize("s-1"), base_delay_ms=1),
        retry_on_conflict(lambda: finalizer.finalize("s-2"), base_delay_ms=1),
    )

    assert sorted(len(r.awards) for r in results) == [0, 1]
    assert [a.badge_id for a in store.awards] == ["courage-bronze"]
    assert all(s.status == SessionStatus.COMPLETED for s in store.sessions.values())


async def test_first_and_second_session_scenarios():
    store = InMemoryStore(badges=[
        BadgeDefinition("honesty-bronze", "6-9", "honesty", "bronze", 1, 0.5),
        BadgeDefinition("honesty-silver", "6-9", "honesty", "silver", 2, 1.0),
    ])

    def honesty_session(session_id, deltas, offset_minutes):
        session = _session(session_id, [], offset_minutes)
        for i, delta in enumerate(deltas):
            apply_choice(session, ChoiceRequest(
                session_id, f"scene-{i}", "Tell the truth", f"scene-{i + 1}",
                axis="honesty", delta=delta,
            ), session.start_time)
        return session

    store.put_session(honesty_session("s-1", [0.5], 0))
    first = await _finalizer(store).finalize("s-1")
    assert first.awards == ["honesty-bronze"]

    store.put_session(honesty_session("s-2", [0.3, 0.3], 30))
    second = await _finalizer(store).finalize("s-2")
    assert second.awards == ["honesty-silver"]
