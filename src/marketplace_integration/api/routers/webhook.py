"""Webhook router - signed Vercel event deliveries."""

from fastapi import APIRouter, Depends, Header, Request, Response

from ...webhooks import WebhookProcessor
from ..dependencies import get_webhook_processor

router = APIRouter(tags=["webhook"])


@router.post("/webhook")
async def receive_webhook(
    request: Request,
    x_vercel_signature: str | None = Header(None),
    processor: WebhookProcessor = Depends(get_webhook_processor),
) -> Response:
    """Answer 200 with an empty body for every authenticated delivery.

    A bad signature raises InvalidSignature, rendered as 401.
    """
    body = await request.body()
    await processor.handle(body, x_vercel_signature)
    return Response(content="", status_code=200)
