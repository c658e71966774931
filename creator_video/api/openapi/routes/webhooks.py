"""Transcoding provider webhook endpoint."""

from fastapi import APIRouter, Request

from creator_video.api.dependencies import SettingsDep, WebhookServiceDep
from creator_video.application.dtos.webhooks import WebhookResult

router = APIRouter()


@router.post(
    "/webhooks/provider",
    response_model=WebhookResult,
    summary="Provider notification",
    description=(
        "Receive a signed processing notification from the transcoding provider. "
        "Notifications for unknown assets and repeated deliveries are accepted "
        "without changes."
    ),
)
async def provider_webhook(
    request: Request,
    settings: SettingsDep,
    service: WebhookServiceDep,
) -> WebhookResult:
    # The signature covers the exact bytes, so the body is read raw
    raw_body = await request.body()
    signature = request.headers.get(settings.webhook.signature_header)
    return await service.handle(raw_body, signature)
