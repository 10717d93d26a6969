import json
from typing import Any

from pydantic import BaseModel
from redis.asyncio import Redis

from .keys import WEBHOOK_EVENTS_KEY

MAX_WEBHOOK_EVENTS = 100


class WebhookEventLog:
    """Bounded audit trail of received webhook events, newest first.

    Advisory only: entries are not used to deduplicate deliveries.
    """

    def __init__(self, redis: Redis, max_events: int = MAX_WEBHOOK_EVENTS):
        self.redis = redis
        self.max_events = max_events

    async def append(self, event: BaseModel) -> None:
        pipe = self.redis.pipeline(transaction=False)
        pipe.lpush(
            WEBHOOK_EVENTS_KEY,
            event.model_dump_json(by_alias=True, exclude_none=True),
        )
        pipe.ltrim(WEBHOOK_EVENTS_KEY, 0, self.max_events - 1)
        await pipe.execute()

    async def recent(self, limit: int | None = None) -> list[dict[str, Any]]:
        end = (limit or self.max_events) - 1
        raws = await self.redis.lrange(WEBHOOK_EVENTS_KEY, 0, end)
        return [json.loads(raw) for raw in raws]
