"""Token identity and holder-count webhooks."""

import logging

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tokenpulse.db.repos.token_repo import TokenRepo
from tokenpulse.domain.models import HolderBatch, TokenBatch, TokenRecord
from tokenpulse.infra.cache.snapshot_store import SnapshotRepository

logger = logging.getLogger(__name__)


class TokenRegistry:
    """Upserts token rows and keeps the cached recent-token list current."""

    def __init__(self, session: AsyncSession, snapshots: SnapshotRepository) -> None:
        self._session = session
        self._tokens = TokenRepo(session)
        self._snapshots = snapshots

    async def register(self, batch: TokenBatch, now: int) -> int:
        """Store raw identities; display defaults go only into the cached list."""
        records = await self._snapshots.get_records()

        for token in batch.records:
            try:
                async with self._session.begin_nested():
                    await self._tokens.upsert(token)
            except SQLAlchemyError:
                logger.exception("DB upsert error for token: %s", token.id)
                continue
            records = _place_record(records, token.to_record(now))

        try:
            await self._snapshots.put_records(records)
        except RedisError:
            logger.exception("Failed to cache %d token records", len(records))
        logger.info("Registered %d/%d tokens", len(batch.records), batch.received)
        return batch.received

    async def update_holders(self, batch: HolderBatch) -> int:
        for h in batch.records:
            found = await self._tokens.set_holder_count(h.id, h.holder_count)
            if not found:
                logger.info("Holder count for unknown token %s ignored", h.id)
        return batch.received


def _place_record(records: list[TokenRecord], token: TokenRecord) -> list[TokenRecord]:
    """Replace an existing entry in place, otherwise prepend."""
    for i, existing in enumerate(records):
        if existing.id == token.id:
            records[i] = token
            return records
    records.insert(0, token)
    return records
