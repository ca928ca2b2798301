"""Axis Scoring Service — loads a profile's full choice history and totals it per axis.

Invariants:
    - Scores span every session of the profile, completed or not
    - Runs on the caller's unit of work when one is given (finalize reads and writes
      in the same transaction)
"""

from storycompass.core.domain_types import COMPASS_DELTA_LIMIT
from storycompass.core.repository_protocols import UnitOfWork
from storycompass.core.score_axes import compute_axis_totals


class AxisScoringService:
    def __init__(self, delta_limit: float = COMPASS_DELTA_LIMIT):
        self._delta_limit = delta_limit

    async def score_profile(self, uow: UnitOfWork, profile_id: str) -> dict[str, float]:
        choices = await uow.choices.get_all_choices_for_profile(profile_id)
        return compute_axis_totals(choices, self._delta_limit)
