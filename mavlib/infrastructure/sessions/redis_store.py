"""Redis-backed session store.

Each record is written as a JSON string under ``session:<token>`` with
``SETEX`` so Redis expires it together with the session TTL.
"""

import json
import logging
from typing import Optional

import redis.asyncio as aioredis

from mavlib.domain.repositories import ISessionStore

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


class RedisSessionStore(ISessionStore):

    def __init__(self, client: aioredis.Redis):
        self.client = client

    @classmethod
    def from_url(cls, redis_url: str) -> "RedisSessionStore":
        return cls(aioredis.from_url(redis_url, decode_responses=True))

    async def save(self, token: str, record: dict, ttl_seconds: int) -> None:
        await self.client.setex(f"{SESSION_KEY_PREFIX}{token}", max(ttl_seconds, 1), json.dumps(record))

    async def load(self, token: str) -> Optional[dict]:
        raw = await self.client.get(f"{SESSION_KEY_PREFIX}{token}")
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable session record")
            await self.delete(token)
            return None

    async def delete(self, token: str) -> bool:
        return await self.client.delete(f"{SESSION_KEY_PREFIX}{token}") == 1

    async def close(self) -> None:
        await self.client.aclose()
