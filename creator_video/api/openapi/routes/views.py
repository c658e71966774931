"""View session endpoints used by the player."""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from creator_video.api.dependencies import ViewTrackerDep
from creator_video.api.middleware.error_handler import error_status
from creator_video.application.dtos.views import (
    CompleteViewRequest,
    CompleteViewResponse,
    StartViewRequest,
    StartViewResponse,
    UpdateViewRequest,
    UpdateViewResponse,
)
from creator_video.commons.telemetry import get_logger
from creator_video.domain.exceptions import DomainException, SessionExpiredException
from creator_video.domain.models.view_session import ClientContext
from creator_video.domain.value_objects.viewer_identity import ViewerIdentity

router = APIRouter()
logger = get_logger(__name__)


def _client_context(request: Request, body: StartViewRequest) -> ClientContext:
    forwarded = request.headers.get("X-Forwarded-For", "")
    ip_address = forwarded.split(",")[0].strip() if forwarded else ""
    if not ip_address and request.client:
        ip_address = request.client.host
    return ClientContext(
        ip_address=ip_address,
        user_agent=request.headers.get("User-Agent"),
        country=body.country,
        city=body.city,
        device_type=body.device_type,
        traffic_source=body.traffic_source,
    )


def _failure(exc: DomainException, body: dict[str, object]) -> JSONResponse:
    status_code, code = error_status(exc)
    logger.info(f"View request refused: {code}", extra={"error_message": str(exc)})
    return JSONResponse(status_code=status_code, content=body)


@router.post(
    "/videos/{video_id}/views/start",
    response_model=StartViewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Start view session",
    description="Open a view session for a video and count the view.",
)
async def start_view(
    video_id: str,
    body: StartViewRequest,
    request: Request,
    tracker: ViewTrackerDep,
) -> StartViewResponse | JSONResponse:
    identity = ViewerIdentity.resolve(body.user_id, body.anonymous_id)
    try:
        return await tracker.start(video_id, identity, _client_context(request, body))
    except DomainException as exc:
        return _failure(
            exc,
            StartViewResponse(success=False, error_message=str(exc)).model_dump(),
        )


@router.put(
    "/videos/views/{session_id}",
    response_model=UpdateViewResponse,
    summary="Update view session",
    description="Report playback progress. Expired sessions answer 410.",
)
async def update_view(
    session_id: str,
    body: UpdateViewRequest,
    tracker: ViewTrackerDep,
) -> UpdateViewResponse | JSONResponse:
    try:
        await tracker.update(session_id, body)
    except DomainException as exc:
        return _failure(
            exc,
            UpdateViewResponse(
                success=False,
                session_expired=isinstance(exc, SessionExpiredException),
                error_message=str(exc),
            ).model_dump(),
        )
    return UpdateViewResponse(success=True)


@router.post(
    "/videos/views/{session_id}/complete",
    response_model=CompleteViewResponse,
    summary="Complete view session",
    description="Close a view session. Repeated calls return the stored summary.",
)
async def complete_view(
    session_id: str,
    body: CompleteViewRequest,
    tracker: ViewTrackerDep,
) -> CompleteViewResponse | JSONResponse:
    try:
        summary = await tracker.complete(session_id, body)
    except DomainException as exc:
        return _failure(
            exc,
            CompleteViewResponse(success=False, error_message=str(exc)).model_dump(),
        )
    return CompleteViewResponse(success=True, summary=summary)
