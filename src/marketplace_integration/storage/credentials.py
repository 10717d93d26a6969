from redis.asyncio import Redis

from ..schemas.installation import Credential
from .keys import token_key


class CredentialStore:
    """Vercel access tokens keyed by installation id."""

    def __init__(self, redis: Redis):
        self.redis = redis

    async def store(self, installation_id: str, credential: Credential) -> None:
        await self.redis.set(token_key(installation_id), credential.model_dump_json())

    async def get(self, installation_id: str) -> Credential | None:
        raw = await self.redis.get(token_key(installation_id))
        if raw is None:
            return None
        return Credential.model_validate_json(raw)

    async def delete(self, installation_id: str) -> None:
        await self.redis.delete(token_key(installation_id))
