"""Liveness and Redis reachability."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from redis.exceptions import RedisError

from ...logging_config import get_logger
from ..dependencies import get_redis

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(redis: Redis = Depends(get_redis)):
    try:
        await redis.ping()
    except RedisError as e:
        logger.warning("health_redis_unreachable", error=str(e))
        return JSONResponse({"status": "degraded", "redis": "unreachable"}, status_code=503)
    return {"status": "ok", "redis": "ok"}
