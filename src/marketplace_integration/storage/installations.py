"""Installation records and the global installation index.

The record and the index are written in one pipelined batch without a
transaction. A crash between the two leaves them diverged; readers resolve
index entries defensively and skip missing or deleted records.
"""

import time

from redis.asyncio import Redis

from ..schemas.installation import Installation
from .keys import INSTALLATIONS_KEY, installation_key


def now_ms() -> int:
    return int(time.time() * 1000)


class InstallationStore:
    def __init__(self, redis: Redis):
        self.redis = redis

    async def put(self, installation: Installation) -> None:
        """Write the record and move its id to the front of the index."""
        installation_id = installation.installation_id
        pipe = self.redis.pipeline(transaction=False)
        pipe.set(installation_key(installation_id), installation.to_json())
        pipe.lrem(INSTALLATIONS_KEY, 0, installation_id)
        pipe.lpush(INSTALLATIONS_KEY, installation_id)
        await pipe.execute()

    async def get(self, installation_id: str) -> Installation | None:
        """Return the raw record, deleted or not."""
        raw = await self.redis.get(installation_key(installation_id))
        if raw is None:
            return None
        return Installation.model_validate_json(raw)

    async def mark_deleted(self, installation: Installation) -> Installation:
        """Overwrite the record with ``deleted_at`` set and drop it from the index."""
        deleted = installation.model_copy(update={"deleted_at": now_ms()})
        pipe = self.redis.pipeline(transaction=False)
        pipe.set(installation_key(installation.installation_id), deleted.to_json())
        pipe.lrem(INSTALLATIONS_KEY, 0, installation.installation_id)
        await pipe.execute()
        return deleted

    async def list_ids(self) -> list[str]:
        """Installation ids, most recently installed first."""
        return await self.redis.lrange(INSTALLATIONS_KEY, 0, -1)
