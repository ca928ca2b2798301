"""Badge Catalog Routes — read-only catalog per age group."""

from fastapi import APIRouter, Depends, Query

from storycompass.api.dependencies import get_profile_progress
from storycompass.schemas.badge import BadgeResponse
from storycompass.services.profile_progress import ProfileProgressService

router = APIRouter(prefix="/api/v1/badges", tags=["badges"])


@router.get("", response_model=list[BadgeResponse])
async def list_badges(
    age_group: str | None = Query(None, max_length=20),
    progress: ProfileProgressService = Depends(get_profile_progress),
):
    """Catalog for age_group (configured default age group when omitted)."""
    return [BadgeResponse.from_definition(b) for b in await progress.catalog(age_group)]
