"""Badge Resolution — which catalog badges a profile newly qualifies for.

Invariants:
    - Only badges of the profile's age group are considered
    - A badge qualifies iff score(axis) >= required_score; axes without a score never qualify
    - Axes match case-insensitively (axis_key) between catalog and scores
    - Tiers are evaluated independently: crossing two thresholds yields both badges
    - Badges already in the ledger are excluded; the ledger is the only "already awarded" truth
    - Output ordered by axis, then tier_order (stable, deterministic)

Design Decisions:
    - Pure function over (catalog, scores, awarded ids): the shell loads, this decides
    - No early break on the first unmet tier: catalogs with non-monotonic thresholds
      still resolve per-badge
"""

from collections import defaultdict
from collections.abc import Iterable

from storycompass.core.badge_records import BadgeDefinition
from storycompass.core.domain_types import axis_key


def group_by_axis(
    badges: Iterable[BadgeDefinition],
) -> dict[str, list[BadgeDefinition]]:
    """axis_key -> badges sorted by tier_order ascending."""
    grouped: dict[str, list[BadgeDefinition]] = defaultdict(list)
    for badge in badges:
        grouped[axis_key(badge.axis)].append(badge)
    return {
        axis: sorted(items, key=lambda b: (b.tier_order, b.id))
        for axis, items in grouped.items()
    }


def resolve_new_badges(
    age_group_id: str,
    scores: dict[str, float],
    catalog: Iterable[BadgeDefinition],
    awarded_badge_ids: set[str],
) -> list[BadgeDefinition]:
    """Badges newly earned for this call, excluding anything already in the ledger."""
    eligible = [b for b in catalog if b.age_group_id == age_group_id]
    by_axis = group_by_axis(eligible)

    keyed_scores = {axis_key(axis): score for axis, score in scores.items()}

    newly_qualified: list[BadgeDefinition] = []
    for axis in sorted(by_axis):
        if axis not in keyed_scores:
            continue
        score = keyed_scores[axis]
        for badge in by_axis[axis]:
            if badge.id in awarded_badge_ids:
                continue
            if score >= badge.required_score:
                newly_qualified.append(badge)
    return newly_qualified
