"""Snapshot cache: active-token ranking and the recent-token record list.

Absent keys and undecodable payloads both read as "nothing cached"; the
aggregator rewrites the snapshot on its next successful run.
"""

import json
import logging
from abc import ABC, abstractmethod

from pydantic import TypeAdapter, ValidationError
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from tokenpulse.domain.models import ActiveSnapshot, TokenRecord

logger = logging.getLogger(__name__)

ACTIVE_KEY = "tokens:active"
RECORDS_KEY = "tokens:records"

ACTIVE_TTL_SECONDS = 3600
RECORDS_TTL_SECONDS = 172800

_records_adapter = TypeAdapter(list[TokenRecord])

# Writes replace whole values, so repeating one after a dropped connection is safe
_retry_transient = retry(
    retry=retry_if_exception_type((RedisConnectionError, RedisTimeoutError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.2, max=2),
    reraise=True,
)


class SnapshotRepository(ABC):
    @abstractmethod
    async def get_active(self) -> ActiveSnapshot | None:
        """Current ranking snapshot, or None when expired/missing/corrupt."""

    @abstractmethod
    async def put_active(self, snapshot: ActiveSnapshot) -> None:
        """Replace the ranking snapshot in one write, resetting its TTL."""

    @abstractmethod
    async def get_records(self) -> list[TokenRecord]:
        """Recent token records, newest first. Empty when missing/corrupt."""

    @abstractmethod
    async def put_records(self, records: list[TokenRecord]) -> None:
        """Replace the recent token list, resetting its TTL."""


class RedisSnapshotStore(SnapshotRepository):
    """SnapshotRepository over redis.asyncio; values are JSON strings with SET ... EX expiry."""

    def __init__(
        self,
        redis: Redis,
        active_ttl: int = ACTIVE_TTL_SECONDS,
        records_ttl: int = RECORDS_TTL_SECONDS,
    ) -> None:
        self._redis = redis
        self._active_ttl = active_ttl
        self._records_ttl = records_ttl

    async def get_active(self) -> ActiveSnapshot | None:
        raw = await self._redis.get(ACTIVE_KEY)
        if raw is None:
            return None
        try:
            return ActiveSnapshot.model_validate_json(raw)
        except ValidationError:
            logger.exception("Failed to decode %s; treating as empty", ACTIVE_KEY)
            return None

    @_retry_transient
    async def put_active(self, snapshot: ActiveSnapshot) -> None:
        await self._redis.set(ACTIVE_KEY, snapshot.model_dump_json(), ex=self._active_ttl)

    async def get_records(self) -> list[TokenRecord]:
        raw = await self._redis.get(RECORDS_KEY)
        if raw is None:
            return []
        try:
            return _records_adapter.validate_json(raw)
        except ValidationError:
            logger.exception("Failed to decode %s; treating as empty", RECORDS_KEY)
            return []

    @_retry_transient
    async def put_records(self, records: list[TokenRecord]) -> None:
        payload = json.dumps([r.model_dump(mode="json") for r in records])
        await self._redis.set(RECORDS_KEY, payload, ex=self._records_ttl)
