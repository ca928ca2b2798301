"""API Dependencies — per-request service construction for FastAPI routes.

Invariants:
    - Services get a unit-of-work factory, never a live AsyncSession
    - db_manager is looked up at request time (initialized by the lifespan, patched in tests)

Design Decisions:
    - Depends() providers over module-level singletons: tests override get_uow_factory
"""

from fastapi import Depends

import storycompass.infrastructure.database as database
from storycompass.config import Settings, get_settings
from storycompass.core.repository_protocols import UowFactory
from storycompass.infrastructure.unit_of_work import sql_uow_factory
from storycompass.services.axis_scoring import AxisScoringService
from storycompass.services.badge_awarding import BadgeAwardingService
from storycompass.services.choice_recorder import ChoiceRecorder
from storycompass.services.profile_progress import ProfileProgressService
from storycompass.services.session_finalizer import SessionFinalizer
from storycompass.services.session_lifecycle import SessionLifecycleService


def get_uow_factory() -> UowFactory:
    if not database.db_manager:
        raise RuntimeError("Database not initialized")
    return sql_uow_factory(database.db_manager)


def get_lifecycle_service(
    uow_factory: UowFactory = Depends(get_uow_factory),
) -> SessionLifecycleService:
    return SessionLifecycleService(uow_factory)


def get_choice_recorder(
    uow_factory: UowFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
) -> ChoiceRecorder:
    return ChoiceRecorder(uow_factory, delta_limit=settings.compass_delta_limit)


def get_session_finalizer(
    uow_factory: UowFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
) -> SessionFinalizer:
    return SessionFinalizer(
        uow_factory,
        AxisScoringService(settings.compass_delta_limit),
        BadgeAwardingService(settings.default_age_group),
    )


def get_profile_progress(
    uow_factory: UowFactory = Depends(get_uow_factory),
    settings: Settings = Depends(get_settings),
) -> ProfileProgressService:
    return ProfileProgressService(
        uow_factory,
        AxisScoringService(settings.compass_delta_limit),
        settings.default_age_group,
    )
