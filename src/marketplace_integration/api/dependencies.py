"""FastAPI dependencies for stores, services and authorization."""

from fastapi import Depends, Header, Request
from redis.asyncio import Redis

from ..auth import Claims, parse_bearer, verify_token
from ..config import Settings, get_settings
from ..lifecycle import LifecycleManager
from ..webhooks import WebhookProcessor


def get_redis(request: Request) -> Redis:
    """Redis connection opened in the app lifespan."""
    return request.app.state.redis_client.redis


def get_lifecycle(
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
) -> LifecycleManager:
    return LifecycleManager.from_settings(redis, settings)


def get_webhook_processor(
    redis: Redis = Depends(get_redis),
    settings: Settings = Depends(get_settings),
    lifecycle: LifecycleManager = Depends(get_lifecycle),
) -> WebhookProcessor:
    return WebhookProcessor.from_settings(redis, settings, lifecycle=lifecycle)


async def get_claims(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> Claims:
    """Verify the bearer token.

    Raises AuthInvalid (401) if the header is missing or the token is invalid.
    """
    token = parse_bearer(authorization)
    return verify_token(token, settings.integration_client_secret)
