"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - GameSession is the aggregate root; UserBadge rows reference sessions and badges

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / autogenerate
"""

from storycompass.models.game_session import GameSession  # noqa: F401
from storycompass.models.user_profile import UserProfile  # noqa: F401
from storycompass.models.badge import Badge  # noqa: F401
from storycompass.models.user_badge import UserBadge  # noqa: F401
