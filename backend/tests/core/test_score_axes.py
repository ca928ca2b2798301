"""Axis Scoring — cumulative totals over a flat choice history."""

from datetime import datetime, timezone

from storycompass.core.score_axes import compute_axis_totals
from storycompass.core.session_snapshot import Choice

T0 = datetime(2026, 3, 1, tzinfo=timezone.utc)


def _choice(axis=None, delta=None, direction=None):
    return Choice("a", "text", "b", "kid-1", T0, axis, delta, direction)


def test_empty_history_scores_nothing():
    assert compute_axis_totals([]) == {}


def test_sums_per_axis():
    history = [
        _choice("courage", 1.0), _choice("courage", 1.5),
        _choice("kindness", 0.5), _choice("courage", 1.0, "down"),
    ]
    assert compute_axis_totals(history) == {"courage": 1.5, "kindness": 0.5}


def test_choices_without_axis_or_delta_contribute_nothing():
    history = [_choice(), _choice("courage"), _choice(delta=1.0), _choice("courage", 1.0)]
    assert compute_axis_totals(history) == {"courage": 1.0}


def test_stored_deltas_reclamped_with_limit():
    assert compute_axis_totals([_choice("courage", 9.0)], delta_limit=1.0) == {"courage": 1.0}


def test_accumulates_across_sessions_of_one_profile():
    # three sessions' worth of history, flattened oldest first
    history = [_choice("courage", 2.0) for _ in range(3)] + [_choice("courage", 2.0)]
    assert compute_axis_totals(history)["courage"] == 8.0


def test_deterministic():
    history = [_choice("courage", 0.1) for _ in range(10)]
    assert compute_axis_totals(history) == compute_axis_totals(list(history))


def test_decimal_deltas_total_exactly():
    history = [_choice("honesty", 0.3) for _ in range(3)]
    assert compute_axis_totals(history) == {"honesty": 0.9}


def test_axis_names_fold_case():
    history = [_choice("honesty", 0.5), _choice("Honesty", 0.5), _choice(" HONESTY ", 0.5)]
    assert compute_axis_totals(history) == {"honesty": 1.5}
