"""SQL Unit of Work — repositories, optimistic versioning, ledger uniqueness, rollback.

Tests cover:
    - Snapshot round-trip through game_sessions (JSON columns, aware datetimes)
    - Stale version save → ConcurrencyError, committed state untouched
    - Duplicate (profile_id, badge_id) → ConcurrencyError
    - No commit / exception / cancellation inside the block → nothing persisted
    - Cross-session choice history and the SQL-backed finalize path
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from storycompass.core.apply_choice import ChoiceRequest, apply_choice
from storycompass.core.badge_records import BadgeAward
from storycompass.core.domain_types import SessionStatus
from storycompass.core.enforce_session_state import StartSessionRequest, open_session
from storycompass.core.errors import ConcurrencyError
from storycompass.services.axis_scoring import AxisScoringService
from storycompass.services.badge_awarding import BadgeAwardingService
from storycompass.services.choice_recorder import ChoiceRecorder
from storycompass.services.session_finalizer import SessionFinalizer

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def _new_session(session_id="s-1", profile_id="kid-1", offset_minutes=0):
    return open_session(
        StartSessionRequest(
            "forest", "acct-1", profile_id, player_names=["Ana"],
            compass_axes=["courage"], starting_scene_id="intro",
        ),
        T0 + timedelta(minutes=offset_minutes), session_id=session_id,
    )


async def _insert(uow_factory, session):
    async with uow_factory() as uow:
        await uow.sessions.add(session)
        await uow.commit()


def _choice(session_id="s-1", delta=2.0, text="Climb"):
    return ChoiceRequest(session_id, "intro", text, "tree", axis="courage", delta=delta)


async def test_snapshot_round_trip(uow_factory):
    session = _new_session()
    apply_choice(session, _choice(delta=1.5), T0 + timedelta(seconds=5))
    await _insert(uow_factory, session)

    async with uow_factory() as uow:
        loaded = await uow.sessions.get("s-1")

    assert loaded.start_time == T0
    assert loaded.start_time.tzinfo is not None
    assert loaded.player_names == ["Ana"]
    assert loaded.choice_history == session.choice_history
    assert loaded.compass_values["courage"].current_value == 1.5
    assert loaded.elapsed_time == timedelta(seconds=5)
    assert loaded.status == SessionStatus.IN_PROGRESS
    assert loaded.version == 0


async def test_get_missing_returns_none(uow_factory):
    async with uow_factory() as uow:
        assert await uow.sessions.get("nope") is None


async def test_save_increments_version(uow_factory):
    await _insert(uow_factory, _new_session())
    async with uow_factory() as uow:
        session = await uow.sessions.get("s-1")
        await uow.sessions.save(session)
        await uow.commit()
    assert session.version == 1

    async with uow_factory() as uow:
        assert (await uow.sessions.get("s-1")).version == 1


async def test_stale_save_raises_conflict(uow_factory):
    await _insert(uow_factory, _new_session())

    async with uow_factory() as uow:
        stale = await uow.sessions.get("s-1")

    async with uow_factory() as uow:
        fresh = await uow.sessions.get("s-1")
        apply_choice(fresh, _choice(text="Climb"), T0)
        await uow.sessions.save(fresh)
        await uow.commit()

    apply_choice(stale, _choice(text="Swim"), T0)
    with pytest.raises(ConcurrencyError):
        async with uow_factory() as uow:
            await uow.sessions.save(stale)
            await uow.commit()

    async with uow_factory() as uow:
        stored = await uow.sessions.get("s-1")
    assert [c.choice_text for c in stored.choice_history] == ["Climb"]
    assert stored.version == 1


async def test_leaving_without_commit_discards_writes(uow_factory):
    await _insert(uow_factory, _new_session())
    async with uow_factory() as uow:
        session = await uow.sessions.get("s-1")
        apply_choice(session, _choice(), T0)
        await uow.sessions.save(session)

    async with uow_factory() as uow:
        assert (await uow.sessions.get("s-1")).choice_count == 0


async def test_exception_rolls_back(uow_factory):
    await _insert(uow_factory, _new_session())
    with pytest.raises(RuntimeError):
        async with uow_factory() as uow:
            session = await uow.sessions.get("s-1")
            apply_choice(session, _choice(), T0)
            await uow.sessions.save(session)
            raise RuntimeError("boom")

    async with uow_factory() as uow:
        assert (await uow.sessions.get("s-1")).version == 0


async def test_cancellation_inside_block_rolls_back(uow_factory):
    await _insert(uow_factory, _new_session())
    with pytest.raises(asyncio.CancelledError):
        async with uow_factory() as uow:
            session = await uow.sessions.get("s-1")
            apply_choice(session, _choice(), T0)
            await uow.sessions.save(session)
            raise asyncio.CancelledError()

    async with uow_factory() as uow:
        stored = await uow.sessions.get("s-1")
        assert stored.version == 0
        assert stored.choice_history == []
        assert stored.compass_values["courage"].current_value == 0.0
        apply_choice(stored, _choice(text="Swim"), T0)
        await uow.sessions.save(stored)
        await uow.commit()

    async with uow_factory() as uow:
        assert (await uow.sessions.get("s-1")).version == 1


async def test_duplicate_award_is_a_conflict(uow_factory, courage_catalog):
    await _insert(uow_factory, _new_session())
    award = BadgeAward("kid-1", "courage-bronze", T0, "s-1", "courage", 5.0, 5.0)

    async with uow_factory() as uow:
        await uow.awards.add(award)
        await uow.commit()

    with pytest.raises(ConcurrencyError):
        async with uow_factory() as uow:
            await uow.awards.add(award)
            await uow.commit()

    async with uow_factory() as uow:
        assert await uow.awards.exists("kid-1", "courage-bronze")
        assert len(await uow.awards.get_for_profile("kid-1")) == 1


async def test_choice_history_spans_profile_sessions(uow_factory):
    first = _new_session("s-1", offset_minutes=0)
    apply_choice(first, _choice("s-1", 1.0, "a"), T0)
    second = _new_session("s-2", offset_minutes=10)
    apply_choice(second, _choice("s-2", 2.0, "b"), T0)
    other = _new_session("s-3", profile_id="kid-2")
    apply_choice(other, _choice("s-3", 2.0, "c"), T0)
    for s in (second, other, first):
        await _insert(uow_factory, s)

    async with uow_factory() as uow:
        choices = await uow.choices.get_all_choices_for_profile("kid-1")
        listed = await uow.sessions.list_for_profile("kid-1")

    assert [c.choice_text for c in choices] == ["a", "b"]
    assert [s.id for s in listed] == ["s-2", "s-1"]


async def test_profile_age_group_lookup(uow_factory, seed_profile):
    await seed_profile("kid-1", "10-12")
    async with uow_factory() as uow:
        assert await uow.profiles.get_age_group("kid-1") == "10-12"
        assert await uow.profiles.get_age_group("nobody") is None


async def test_finalize_through_sql(uow_factory, courage_catalog):
    await _insert(uow_factory, _new_session("s-1", offset_minutes=0))
    await _insert(uow_factory, _new_session("s-2", offset_minutes=10))
    recorder = ChoiceRecorder(uow_factory, clock=lambda: T0)
    for session_id in ("s-1", "s-1", "s-2"):
        await recorder.record(_choice(session_id, 2.0))

    finalizer = SessionFinalizer(
        uow_factory, AxisScoringService(), BadgeAwardingService(),
        clock=lambda: T0 + timedelta(hours=1),
    )
    result = await finalizer.finalize("s-2")
    again = await finalizer.finalize("s-2")

    assert result.awards == ["courage-bronze"]
    assert again.awards == []
    async with uow_factory() as uow:
        session = await uow.sessions.get("s-2")
        awards = await uow.awards.get_for_profile("kid-1")
    assert session.status == SessionStatus.COMPLETED
    assert session.end_time == T0 + timedelta(hours=1)
    assert [(a.badge_id, a.trigger_value, a.source_session_id) for a in awards] == [
        ("courage-bronze", 6.0, "s-2"),
    ]
