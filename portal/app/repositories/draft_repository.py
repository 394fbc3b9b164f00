"""Identity-keyed storage for in-progress application drafts"""

import json
from typing import Any, Dict, Optional, Protocol

import redis.asyncio as redis
from redis.asyncio import Redis

from portal.app.core.config import settings
from portal.app.core.logging import get_logger

logger = get_logger(__name__)


class DraftStore(Protocol):
    """Last-writer-wins slot per user identity"""

    async def load(self, identity_key: str) -> Optional[Dict[str, Any]]:
        ...

    async def save(self, identity_key: str, draft: Dict[str, Any]) -> None:
        ...

    async def clear(self, identity_key: str) -> None:
        ...


class InMemoryDraftStore:
    """Draft store living for the lifetime of the process"""

    def __init__(self):
        self._drafts: Dict[str, str] = {}

    async def load(self, identity_key: str) -> Optional[Dict[str, Any]]:
        raw = self._drafts.get(identity_key)
        return json.loads(raw) if raw is not None else None

    async def save(self, identity_key: str, draft: Dict[str, Any]) -> None:
        # Stored serialized so callers cannot mutate the saved copy
        self._drafts[identity_key] = json.dumps(draft)

    async def clear(self, identity_key: str) -> None:
        self._drafts.pop(identity_key, None)

    def __contains__(self, identity_key: str) -> bool:
        return identity_key in self._drafts


class RedisDraftStore:
    """Redis-backed draft store, one JSON string per identity"""

    def __init__(
        self,
        redis_url: Optional[str] = None,
        key_prefix: Optional[str] = None,
        ttl_seconds: Optional[int] = None
    ):
        self.redis_url = redis_url or settings.REDIS_URL
        self.key_prefix = key_prefix if key_prefix is not None else settings.DRAFT_KEY_PREFIX
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.DRAFT_TTL_SECONDS
        self._redis: Optional[Redis] = None

    async def connect(self) -> None:
        """Establish Redis connection"""
        try:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True
            )
            await self._redis.ping()
            logger.info("Connected to Redis draft store")
        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise

    async def disconnect(self) -> None:
        """Close Redis connection"""
        if self._redis:
            await self._redis.close()
            logger.info("Disconnected from Redis draft store")

    def _key(self, identity_key: str) -> str:
        return f"{self.key_prefix}{identity_key}"

    async def load(self, identity_key: str) -> Optional[Dict[str, Any]]:
        """
        Load the saved draft for an identity

        Args:
            identity_key: User email

        Returns:
            Draft fields or None if nothing is saved
        """
        if not self._redis:
            await self.connect()

        raw = await self._redis.get(self._key(identity_key))
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Discarding unreadable draft for {identity_key}")
            await self._redis.delete(self._key(identity_key))
            return None

    async def save(self, identity_key: str, draft: Dict[str, Any]) -> None:
        """Overwrite the draft for an identity"""
        if not self._redis:
            await self.connect()

        payload = json.dumps(draft)
        if self.ttl_seconds:
            await self._redis.setex(self._key(identity_key), self.ttl_seconds, payload)
        else:
            await self._redis.set(self._key(identity_key), payload)

        logger.debug(f"Saved draft for {identity_key}")

    async def clear(self, identity_key: str) -> None:
        """Discard the draft for an identity"""
        if not self._redis:
            await self.connect()

        await self._redis.delete(self._key(identity_key))
        logger.debug(f"Cleared draft for {identity_key}")
