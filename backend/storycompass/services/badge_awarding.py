"""Badge Awarding — turns axis scores into new ledger entries for a profile.

Invariants:
    - Catalog is the profile's age group only; age group resolves profile -> session
      target -> configured default
    - Every qualifying badge not yet in the ledger is awarded, each tier on its own
    - A badge is re-checked against the ledger right before its insert; the ledger's
      unique (profile_id, badge_id) constraint is the final guard
    - Awards are staged on the caller's unit of work; nothing commits here

Design Decisions:
    - Decision logic in core/resolve_badges.py; this class loads inputs and writes awards
    - Each award records the axis score that triggered it and the threshold it crossed
"""

import logging
from datetime import datetime

from storycompass.core.badge_records import BadgeAward
from storycompass.core.domain_types import DEFAULT_AGE_GROUP, axis_key
from storycompass.core.repository_protocols import UnitOfWork
from storycompass.core.resolve_badges import resolve_new_badges
from storycompass.core.session_snapshot import SessionSnapshot

logger = logging.getLogger(__name__)


class BadgeAwardingService:
    def __init__(self, default_age_group: str = DEFAULT_AGE_GROUP):
        self._default_age_group = default_age_group

    async def resolve_age_group(self, uow: UnitOfWork, session: SessionSnapshot) -> str:
        profile_age_group = await uow.profiles.get_age_group(session.profile_id)
        return profile_age_group or session.target_age_group or self._default_age_group

    async def award(
        self,
        uow: UnitOfWork,
        profile_id: str,
        age_group_id: str,
        scores: dict[str, float],
        source_session_id: str,
        now: datetime,
    ) -> list[BadgeAward]:
        """Stage awards for every newly earned badge; return them in axis/tier order."""
        catalog = await uow.badges.get_by_age_group(age_group_id)
        existing = await uow.awards.get_for_profile(profile_id)
        candidates = resolve_new_badges(
            age_group_id, scores, catalog, {a.badge_id for a in existing},
        )

        awarded: list[BadgeAward] = []
        for badge in candidates:
            if await uow.awards.exists(profile_id, badge.id):
                continue
            award = BadgeAward(
                profile_id=profile_id,
                badge_id=badge.id,
                awarded_at=now,
                source_session_id=source_session_id,
                axis=badge.axis,
                trigger_value=scores[axis_key(badge.axis)],
                threshold=badge.required_score,
            )
            await uow.awards.add(award)
            awarded.append(award)
            logger.info(
                f"Badge awarded ({badge.tier})",
                extra={
                    "profile_id": profile_id,
                    "badge_id": badge.id,
                    "axis": badge.axis,
                    "session_id": source_session_id,
                },
            )
        return awarded
