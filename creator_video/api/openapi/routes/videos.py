"""Video lifecycle and statistics endpoints."""

from fastapi import APIRouter

from creator_video.api.dependencies import EngagementDep, LifecycleServiceDep
from creator_video.application.dtos.lifecycle import UnpublishRequest, VideoResponse
from creator_video.application.dtos.views import VideoViewStats

router = APIRouter()


@router.get(
    "/videos/{video_id}",
    response_model=VideoResponse,
    summary="Get video",
    description="Get a video with its lifecycle state and the events it currently accepts.",
)
async def get_video(
    video_id: str,
    service: LifecycleServiceDep,
) -> VideoResponse:
    video = await service.get_video(video_id)
    return VideoResponse.from_record(video)


@router.post(
    "/videos/{video_id}/publish",
    response_model=VideoResponse,
    summary="Publish video",
    description="Publish a transcoded video that is ready to publish or unpublished.",
)
async def publish_video(
    video_id: str,
    service: LifecycleServiceDep,
) -> VideoResponse:
    video = await service.publish(video_id)
    return VideoResponse.from_record(video)


@router.post(
    "/videos/{video_id}/unpublish",
    response_model=VideoResponse,
    summary="Unpublish video",
    description="Withdraw a published video, optionally recording a reason.",
)
async def unpublish_video(
    video_id: str,
    service: LifecycleServiceDep,
    request: UnpublishRequest | None = None,
) -> VideoResponse:
    reason = request.reason if request else None
    video = await service.unpublish(video_id, reason)
    return VideoResponse.from_record(video)


@router.post(
    "/videos/{video_id}/republish",
    response_model=VideoResponse,
    summary="Republish video",
    description="Publish an unpublished video again.",
)
async def republish_video(
    video_id: str,
    service: LifecycleServiceDep,
) -> VideoResponse:
    video = await service.republish(video_id)
    return VideoResponse.from_record(video)


@router.get(
    "/videos/{video_id}/stats",
    response_model=VideoViewStats,
    summary="Get view statistics",
    description="Aggregate view statistics computed from the video's sessions.",
)
async def get_video_stats(
    video_id: str,
    engagement: EngagementDep,
) -> VideoViewStats:
    return await engagement.compute_stats(video_id)


@router.post(
    "/videos/{video_id}/stats/reconcile",
    response_model=VideoViewStats,
    summary="Reconcile counters",
    description="Recompute the stored engagement counters from the session table.",
)
async def reconcile_video_stats(
    video_id: str,
    engagement: EngagementDep,
) -> VideoViewStats:
    return await engagement.reconcile(video_id)
