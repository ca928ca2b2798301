"""Profile Routes — a profile's sessions, axis scores, awards and badge progress."""

from fastapi import APIRouter, Depends

from storycompass.api.dependencies import get_lifecycle_service, get_profile_progress
from storycompass.schemas.badge import (
    AwardResponse, AxisProgressResponse, AxisScoresResponse,
)
from storycompass.schemas.game_session import SessionSummary
from storycompass.services.profile_progress import ProfileProgressService
from storycompass.services.session_lifecycle import SessionLifecycleService

router = APIRouter(prefix="/api/v1/profiles", tags=["profiles"])


@router.get("/{profile_id}/sessions", response_model=list[SessionSummary])
async def list_profile_sessions(
    profile_id: str,
    lifecycle: SessionLifecycleService = Depends(get_lifecycle_service),
):
    """Newest first."""
    sessions = await lifecycle.list_sessions_for_profile(profile_id)
    return [SessionSummary.from_snapshot(s) for s in sessions]


@router.get("/{profile_id}/axis-scores", response_model=AxisScoresResponse)
async def get_axis_scores(
    profile_id: str,
    progress: ProfileProgressService = Depends(get_profile_progress),
):
    scores = await progress.axis_scores(profile_id)
    return AxisScoresResponse(profile_id=profile_id, scores=scores)


@router.get("/{profile_id}/badges", response_model=list[AwardResponse])
async def get_profile_badges(
    profile_id: str,
    progress: ProfileProgressService = Depends(get_profile_progress),
):
    return [AwardResponse.from_award(a) for a in await progress.awards(profile_id)]


@router.get("/{profile_id}/badge-progress", response_model=list[AxisProgressResponse])
async def get_badge_progress(
    profile_id: str,
    progress: ProfileProgressService = Depends(get_profile_progress),
):
    report = await progress.badge_progress(profile_id)
    return [AxisProgressResponse.from_progress(p) for p in report]
