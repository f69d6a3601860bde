"""Redis-backed cache for worker model list queries.

All keys live under one namespace (``HATCHERY_CACHE_NAMESPACE``)::

    {namespace}:gen
    {namespace}:list:{generation}:{scope}:{binary}:{state}

A list key is built from the generation read *before* the database query.
Any committed create / update / delete calls ``invalidate_namespace`` which
bumps the generation and then drops every list key.  A read that raced a
commit therefore fills a key of the old generation, which is never looked up
again and expires with its TTL.  No per-group invalidation is attempted.

Cached payloads never contain ``editable``: it depends on the caller and is
computed by the presenter after the cache lookup.

Cache failures are logged and swallowed.  The store is authoritative; a
mutation that committed must not be reported as failed because Redis was
unreachable.
"""

from __future__ import annotations

import redis.asyncio as aioredis
from loguru import logger
from pydantic import TypeAdapter
from redis.exceptions import RedisError

from hatchery.catalog.models.api import WorkerModelResponse

_DELETE_BATCH_SIZE = 100

_SNAPSHOTS = TypeAdapter(list[WorkerModelResponse])
_CALLER_FIELDS = {"__all__": {"editable"}}


class WorkerModelCache:
    """Namespaced, generation-keyed list cache.

    A ``None`` client disables caching: ``list_key`` returns ``None`` and
    invalidation is a no-op.
    """

    def __init__(self, client: aioredis.Redis | None, *, namespace: str, ttl: int = 300) -> None:
        self._client = client
        self._namespace = namespace
        self._ttl = ttl
        self._generation_key = f"{namespace}:gen"

    async def list_key(self, *parts: str | None) -> str | None:
        """Key for a list query under the current generation.

        ``None`` means the query must not be cached (no client, or the
        generation could not be read).
        """
        if self._client is None:
            return None
        try:
            raw = await self._client.get(self._generation_key)
        except RedisError as exc:
            logger.warning("Worker model cache generation read failed: {}", exc)
            return None
        generation = int(raw) if raw is not None else 0
        return ":".join([self._namespace, "list", str(generation), *(part or "" for part in parts)])

    # -- Read / fill -----------------------------------------------------------

    async def get_list(self, key: str | None) -> list[WorkerModelResponse] | None:
        if self._client is None or key is None:
            return None
        try:
            raw = await self._client.get(key)
        except RedisError as exc:
            logger.warning("Worker model cache read failed for {}: {}", key, exc)
            return None
        if raw is None:
            return None
        return _SNAPSHOTS.validate_json(raw)

    async def set_list(self, key: str | None, snapshots: list[WorkerModelResponse]) -> None:
        if self._client is None or key is None:
            return
        try:
            await self._client.set(key, _SNAPSHOTS.dump_json(snapshots, exclude=_CALLER_FIELDS), ex=self._ttl)
        except RedisError as exc:
            logger.warning("Worker model cache write failed for {}: {}", key, exc)

    # -- Invalidation ----------------------------------------------------------

    async def invalidate_namespace(self) -> int:
        """Bump the generation and delete every list key.  Returns the number deleted."""
        if self._client is None:
            return 0

        pattern = f"{self._namespace}:list:*"
        deleted = 0
        try:
            generation = await self._client.incr(self._generation_key)
            # Batched so memory stays flat for large namespaces.
            batch: list[bytes | str] = []
            async for key in self._client.scan_iter(match=pattern, count=_DELETE_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= _DELETE_BATCH_SIZE:
                    deleted += await self._client.delete(*batch)
                    batch = []
            if batch:
                deleted += await self._client.delete(*batch)
        except RedisError as exc:
            logger.warning("Worker model cache invalidation failed ({}): {}", pattern, exc)
            return deleted

        logger.debug("Worker model cache invalidated: generation {}, {} keys under {}", generation, deleted, pattern)
        return deleted
