"""Key-value backends with TTL for session persistence.

Three implementations of ``SessionBackend``, chosen once at startup:

- ``MongoSessionBackend``: durable storage, one document per key::

      {
          "_id": "session:5b0c...",
          "value": {...},                  # the serialized session
          "expires_at": ISODate(...),      # TTL index, expireAfterSeconds=0
          "updated_at": ISODate(...)
      }

  MongoDB's TTL monitor only runs about once a minute, so reads also filter
  on ``expires_at``.
- ``InMemorySessionBackend``: process-local dict with an injectable clock.
- ``NullSessionBackend``: no storage at all; sessions live only for the
  request that created them.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from motor.motor_asyncio import AsyncIOMotorClient

logger = logging.getLogger(__name__)

COLLECTION_NAME = "chat_sessions"

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionBackend(ABC):
    """Capability interface: get, put-with-ttl and delete over JSON values."""

    available: bool = True
    name: str = "backend"

    async def initialize(self) -> None:
        """Prepare the backend (indexes, connections). Called once at startup."""

    async def close(self) -> None:
        """Release connections. Called once at shutdown."""

    @abstractmethod
    async def get(self, key: str) -> Optional[dict[str, Any]]:
        """Return the stored value, or None when missing or expired."""

    @abstractmethod
    async def put(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        """Store ``value`` so that it expires ``ttl_seconds`` from now."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove ``key``. Missing keys are not an error."""

    async def count(self) -> int:
        """Number of live entries, where the backend can tell."""
        return 0

    async def ping(self) -> None:
        """Raise if the backend is unreachable."""


class NullSessionBackend(SessionBackend):
    """Backend used when no session storage is configured."""

    available = False
    name = "none"

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        return None

    async def put(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        return None

    async def delete(self, key: str) -> None:
        return None


class InMemorySessionBackend(SessionBackend):
    """Process-local storage with TTL. Lost on restart."""

    name = "memory"

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._items: dict[str, tuple[dict[str, Any], datetime]] = {}

    def _evict_expired(self, now: datetime) -> None:
        expired = [k for k, (_, expires_at) in self._items.items() if expires_at <= now]
        for key in expired:
            del self._items[key]

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        item = self._items.get(key)
        if item is None:
            return None
        value, expires_at = item
        if expires_at <= self._clock():
            del self._items[key]
            return None
        return dict(value)

    async def put(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        now = self._clock()
        self._evict_expired(now)
        self._items[key] = (dict(value), now + timedelta(seconds=ttl_seconds))

    async def delete(self, key: str) -> None:
        self._items.pop(key, None)

    async def count(self) -> int:
        self._evict_expired(self._clock())
        return len(self._items)


class MongoSessionBackend(SessionBackend):
    """MongoDB storage relying on a TTL index for expiry."""

    name = "mongodb"

    def __init__(
        self,
        uri: str,
        database: str,
        collection: str = COLLECTION_NAME,
        clock: Clock = utcnow,
        client: Optional[AsyncIOMotorClient] = None,
    ) -> None:
        self._clock = clock
        self._client = client or AsyncIOMotorClient(uri, serverSelectionTimeoutMS=5_000)
        self._collection = self._client[database][collection]

    async def initialize(self) -> None:
        await self._collection.create_index("expires_at", expireAfterSeconds=0)
        logger.info("MongoDB session collection ready (TTL index on expires_at)")

    async def close(self) -> None:
        self._client.close()
        logger.info("MongoDB connection closed")

    async def get(self, key: str) -> Optional[dict[str, Any]]:
        doc = await self._collection.find_one(
            {"_id": key, "expires_at": {"$gt": self._clock()}},
            {"value": 1},
        )
        if not doc:
            return None
        return doc.get("value")

    async def put(self, key: str, value: dict[str, Any], ttl_seconds: int) -> None:
        now = self._clock()
        await self._collection.replace_one(
            {"_id": key},
            {
                "_id": key,
                "value": value,
                "expires_at": now + timedelta(seconds=ttl_seconds),
                "updated_at": now,
            },
            upsert=True,
        )

    async def delete(self, key: str) -> None:
        await self._collection.delete_one({"_id": key})

    async def count(self) -> int:
        return await self._collection.count_documents(
            {"expires_at": {"$gt": self._clock()}}
        )

    async def ping(self) -> None:
        await self._client.admin.command("ping")
