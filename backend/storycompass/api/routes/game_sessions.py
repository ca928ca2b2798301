"""Game Session Routes — session lifecycle, choices, scene progress and finalize.

Invariants:
    - Routes hold no business logic: build the service, call it, shape the response
    - Quiet commands (choice, progress, pause, resume, end) answer 200 with `null`
      when the session does not exist or the transition is not allowed
    - GET and finalize on an unknown session answer 404
    - Every mutating command except start is retried on ConcurrencyError

Design Decisions:
    - retry_on_conflict applied here, at the outermost seam, so each attempt is a
      fresh unit of work
"""


from fastapi import APIRouter, Depends, status

from storycompass.api.dependencies import (
    get_choice_recorder, get_lifecycle_service, get_session_finalizer,
)
from storycompass.config import Settings, get_settings
from storycompass.schemas.game_session import (
    ChoiceBody, FinalizeResponse, ProgressBody, SessionResponse, StartSessionBody,
)
from storycompass.services.choice_recorder import ChoiceRecorder
from storycompass.services.retry import retry_on_conflict
from storycompass.services.session_finalizer import SessionFinalizer
from storycompass.services.session_lifecycle import SessionLifecycleService

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


def _maybe(session) -> SessionResponse | None:
    return SessionResponse.from_snapshot(session) if session else None


@router.post(
    "", response_model=SessionResponse, status_code=status.HTTP_201_CREATED,
)
async def start_session(
    body: StartSessionBody,
    lifecycle: SessionLifecycleService = Depends(get_lifecycle_service),
):
    session = await lifecycle.start_session(body.to_request())
    return SessionResponse.from_snapshot(session)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    lifecycle: SessionLifecycleService = Depends(get_lifecycle_service),
):
    return SessionResponse.from_snapshot(await lifecycle.get_session(session_id))


@router.post("/{session_id}/choices", response_model=SessionResponse | None)
async def record_choice(
    session_id: str,
    body: ChoiceBody,
    recorder: ChoiceRecorder = Depends(get_choice_recorder),
    settings: Settings = Depends(get_settings),
):
    request = body.to_request(session_id)
    session = await retry_on_conflict(
        lambda: recorder.record(request), settings.conflict_max_retries,
    )
    return _maybe(session)


@router.post("/{session_id}/progress", response_model=SessionResponse | None)
async def progress_to_scene(
    session_id: str,
    body: ProgressBody,
    lifecycle: SessionLifecycleService = Depends(get_lifecycle_service),
    settings: Settings = Depends(get_settings),
):
    session = await retry_on_conflict(
        lambda: lifecycle.progress_to_scene(session_id, body.scene_id),
        settings.conflict_max_retries,
    )
    return _maybe(session)


@router.post("/{session_id}/pause", response_model=SessionResponse | None)
async def pause_session(
    session_id: str,
    lifecycle: SessionLifecycleService = Depends(get_lifecycle_service),
    settings: Settings = Depends(get_settings),
):
    return _maybe(await retry_on_conflict(
        lambda: lifecycle.pause(session_id), settings.conflict_max_retries,
    ))


@router.post("/{session_id}/resume", response_model=SessionResponse | None)
async def resume_session(
    session_id: str,
    lifecycle: SessionLifecycleService = Depends(get_lifecycle_service),
    settings: Settings = Depends(get_settings),
):
    return _maybe(await retry_on_conflict(
        lambda: lifecycle.resume(session_id), settings.conflict_max_retries,
    ))


@router.post("/{session_id}/end", response_model=SessionResponse | None)
async def end_session(
    session_id: str,
    lifecycle: SessionLifecycleService = Depends(get_lifecycle_service),
    settings: Settings = Depends(get_settings),
):
    return _maybe(await retry_on_conflict(
        lambda: lifecycle.end(session_id), settings.conflict_max_retries,
    ))


@router.post("/{session_id}/finalize", response_model=FinalizeResponse)
async def finalize_session(
    session_id: str,
    finalizer: SessionFinalizer = Depends(get_session_finalizer),
    settings: Settings = Depends(get_settings),
):
    result = await retry_on_conflict(
        lambda: finalizer.finalize(session_id), settings.conflict_max_retries,
    )
    return FinalizeResponse.from_result(result)
