"""Profile Progress — read-only views of a profile's scores, badges and tier progress.

Invariants:
    - Never writes; every method opens and discards its own unit of work
    - Scores come from the same computation finalize uses (AxisScoringService)
"""

from storycompass.core.badge_progress import AxisProgress, build_badge_progress
from storycompass.core.badge_records import BadgeAward, BadgeDefinition
from storycompass.core.repository_protocols import UowFactory
from storycompass.services.axis_scoring import AxisScoringService


class ProfileProgressService:
    def __init__(
        self,
        uow_factory: UowFactory,
        scoring: AxisScoringService,
        default_age_group: str,
    ):
        self._uow_factory = uow_factory
        self._scoring = scoring
        self._default_age_group = default_age_group

    async def axis_scores(self, profile_id: str) -> dict[str, float]:
        async with self._uow_factory() as uow:
            return await self._scoring.score_profile(uow, profile_id)

    async def awards(self, profile_id: str) -> list[BadgeAward]:
        async with self._uow_factory() as uow:
            return await uow.awards.get_for_profile(profile_id)

    async def catalog(self, age_group_id: str | None = None) -> list[BadgeDefinition]:
        async with self._uow_factory() as uow:
            return await uow.badges.get_by_age_group(age_group_id or self._default_age_group)

    async def badge_progress(self, profile_id: str) -> list[AxisProgress]:
        """Per-axis tier progress against the profile's age-group catalog."""
        async with self._uow_factory() as uow:
            age_group = (
                await uow.profiles.get_age_group(profile_id) or self._default_age_group
            )
            catalog = await uow.badges.get_by_age_group(age_group)
            scores = await self._scoring.score_profile(uow, profile_id)
            awards = await uow.awards.get_for_profile(profile_id)
        return build_badge_progress(catalog, scores, awards)
