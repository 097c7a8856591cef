"""
Review history persistence.

Records are kept per owner, most recent first. Two backends share one
interface: an in-process store and a Redis list per owner.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Optional, Protocol

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .models import DetectedLanguage, ReviewRecord

logger = logging.getLogger(__name__)


class HistoryStoreError(Exception):
    """Raised when the history backend cannot be reached."""

    def __init__(self, message: str, owner: Optional[str] = None):
        self.message = message
        self.owner = owner
        super().__init__(message)


class HistoryStore(Protocol):
    async def append(self, owner: str, record: ReviewRecord) -> None: ...

    async def list(self, owner: str) -> list[ReviewRecord]: ...

    async def clear(self, owner: str) -> None: ...

    async def close(self) -> None: ...


def make_record(
    owner: str,
    code: str,
    language: DetectedLanguage,
    profile: str,
    result: str,
) -> ReviewRecord:
    return ReviewRecord(
        id=uuid.uuid4().hex,
        timestamp=int(time.time() * 1000),
        owner=owner,
        code=code,
        language=language,
        profile=profile,
        result=result,
    )


class MemoryHistoryStore:
    """Per-process store; history is lost on restart."""

    def __init__(self, max_records: Optional[int] = None):
        self._records: dict[str, list[ReviewRecord]] = {}
        self._max_records = max_records

    async def append(self, owner: str, record: ReviewRecord) -> None:
        records = self._records.setdefault(owner, [])
        records.insert(0, record)
        if self._max_records:
            del records[self._max_records:]

    async def list(self, owner: str) -> list[ReviewRecord]:
        return list(self._records.get(owner, []))

    async def clear(self, owner: str) -> None:
        self._records.pop(owner, None)

    async def close(self) -> None:
        self._records.clear()


_redis_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    retry=retry_if_exception_type((RedisConnectionError, RedisTimeoutError)),
    reraise=True,
)


class RedisHistoryStore:
    """
    Redis-backed store.

    Each owner has one list; new records are pushed on the left so LRANGE
    returns them most recent first.
    """

    KEY_PREFIX = "codementor:history:"

    def __init__(self, client: Redis, max_records: Optional[int] = None):
        self._client = client
        self._max_records = max_records

    @classmethod
    def from_url(
        cls,
        url: str,
        timeout_seconds: float = 2.0,
        max_records: Optional[int] = None,
    ) -> "RedisHistoryStore":
        client = Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout_seconds,
            socket_connect_timeout=timeout_seconds,
        )
        return cls(client, max_records=max_records)

    def _key(self, owner: str) -> str:
        return f"{self.KEY_PREFIX}{owner}"

    @_redis_retry
    async def _push(self, owner: str, payload: str) -> None:
        # MULTI/EXEC so a retried push never stores the record twice
        key = self._key(owner)
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.lpush(key, payload)
            if self._max_records:
                pipe.ltrim(key, 0, self._max_records - 1)
            await pipe.execute()

    @_redis_retry
    async def _range(self, owner: str) -> list[str]:
        return await self._client.lrange(self._key(owner), 0, -1)

    @_redis_retry
    async def _delete(self, owner: str) -> None:
        await self._client.delete(self._key(owner))

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as exc:
            logger.warning("Redis ping failed: %s", exc)
            return False

    async def append(self, owner: str, record: ReviewRecord) -> None:
        try:
            await self._push(owner, record.model_dump_json())
        except RedisError as exc:
            raise HistoryStoreError(f"Failed to save review: {exc}", owner=owner) from exc

    async def list(self, owner: str) -> list[ReviewRecord]:
        try:
            raw = await self._range(owner)
        except RedisError as exc:
            raise HistoryStoreError(f"Failed to load history: {exc}", owner=owner) from exc

        records = []
        for item in raw:
            try:
                records.append(ReviewRecord.model_validate_json(item))
            except ValidationError:
                logger.warning("Skipping unreadable history entry for %s", owner)
        return records

    async def clear(self, owner: str) -> None:
        try:
            await self._delete(owner)
        except RedisError as exc:
            raise HistoryStoreError(f"Failed to clear history: {exc}", owner=owner) from exc

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except RedisError as exc:
            raise HistoryStoreError(f"Failed to close Redis connection: {exc}") from exc
