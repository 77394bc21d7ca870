"""
Persisted session storage

Key/value storage of JSON documents, read once at screen entry.
"""

import json
from typing import Any, Optional, Protocol

from redis.asyncio import Redis

from matchchats.core.config import settings
from matchchats.core.errors import SessionStoreUnavailableError
from matchchats.core.logging import get_logger
from matchchats.schemas.session import Session

logger = get_logger(__name__)


class SessionStorage(Protocol):
    async def get_from_storage(self, key: str) -> Optional[Any]: ...


class RedisSessionStorage:
    """SessionStorage over a Redis string key holding JSON"""

    def __init__(self, redis: Redis, namespace: str = "matchchats:storage"):
        self.redis = redis
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    async def get_from_storage(self, key: str) -> Optional[Any]:
        raw = await self.redis.get(self._key(key))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            # Let the session boundary decide what to do with it
            logger.warning(f"Storage key {key!r} does not hold JSON")
            return raw


async def load_session(storage: SessionStorage, key: Optional[str] = None) -> Optional[Session]:
    """
    Read and validate the persisted session.

    Returns None when nothing is stored (not signed in).
    Raises CorruptSessionError when something is stored but unusable,
    SessionStoreUnavailableError when the store itself cannot be read.
    """
    key = key or settings.session_key
    try:
        payload = await storage.get_from_storage(key)
    except Exception as e:
        logger.error(f"Reading session key {key!r} failed: {e}")
        raise SessionStoreUnavailableError(f"Session store unavailable: {e}") from e
    if payload is None:
        return None
    return Session.from_storage(payload)
