"""Resource records, per-installation resource index and the project index.

Writes go record first, then indexes, in one non-transactional pipeline.
``list`` drops index entries whose record is gone. The project index is a
sorted set of ``installationId:resourceId`` members scored by write time, so
every resource linked to a project stays reachable, newest first.
"""

from __future__ import annotations

import time

from redis.asyncio import Redis

from ..schemas.resource import Resource
from .keys import project_key, resource_index_key, resource_key


def _project_member(installation_id: str, resource_id: str) -> str:
    return f"{installation_id}:{resource_id}"


def _project_id(resource: Resource | None) -> str | None:
    if resource is None or resource.metadata is None:
        return None
    return resource.metadata.project_id


class ResourceStore:
    def __init__(self, redis: Redis):
        self.redis = redis

    async def put(self, installation_id: str, resource: Resource) -> None:
        previous = _project_id(await self.get(installation_id, resource.id))
        project_id = _project_id(resource)

        pipe = self.redis.pipeline(transaction=False)
        pipe.set(resource_key(installation_id, resource.id), resource.to_json())
        pipe.lpush(resource_index_key(installation_id), resource.id)
        member = _project_member(installation_id, resource.id)
        if previous and previous != project_id:
            pipe.zrem(project_key(previous), member)
        if project_id:
            pipe.zadd(project_key(project_id), {member: time.time_ns() // 1000})
        await pipe.execute()

    async def get(self, installation_id: str, resource_id: str) -> Resource | None:
        raw = await self.redis.get(resource_key(installation_id, resource_id))
        if raw is None:
            return None
        return Resource.model_validate_json(raw)

    async def delete(self, installation_id: str, resource_id: str) -> None:
        """Remove the record and its index entries. Missing resources are a no-op."""
        project_id = _project_id(await self.get(installation_id, resource_id))

        pipe = self.redis.pipeline(transaction=False)
        pipe.delete(resource_key(installation_id, resource_id))
        pipe.lrem(resource_index_key(installation_id), 0, resource_id)
        if project_id:
            pipe.zrem(project_key(project_id), _project_member(installation_id, resource_id))
        await pipe.execute()

    async def list(self, installation_id: str) -> list[Resource]:
        """Resolve every indexed id, newest first, skipping dangling ids."""
        resource_ids = await self.redis.lrange(resource_index_key(installation_id), 0, -1)
        if not resource_ids:
            return []

        raws = await self.redis.mget(
            [resource_key(installation_id, resource_id) for resource_id in resource_ids]
        )
        return [Resource.model_validate_json(raw) for raw in raws if raw is not None]

    async def find_by_project(self, project_id: str) -> list[tuple[str, Resource]]:
        """Every (installation id, resource) linked to a Vercel project, newest first.

        Members whose record is gone or no longer points at the project are
        dropped from the index.
        """
        members = await self.redis.zrevrange(project_key(project_id), 0, -1)
        if not members:
            return []

        owners = [member.rsplit(":", 1) for member in members]
        raws = await self.redis.mget(
            [resource_key(installation_id, resource_id) for installation_id, resource_id in owners]
        )

        found = []
        stale = []
        for member, (installation_id, _), raw in zip(members, owners, raws, strict=True):
            resource = Resource.model_validate_json(raw) if raw is not None else None
            if _project_id(resource) != project_id:
                stale.append(member)
                continue
            found.append((installation_id, resource))

        if stale:
            await self.redis.zrem(project_key(project_id), *stale)
        return found
