"""IngestionMerger — folds price and swap observations into hourly buckets."""

import logging
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from tokenpulse.db.repos.bucket_repo import BucketRepository
from tokenpulse.domain.buckets import hour_bucket
from tokenpulse.domain.models import PriceBatch, SwapBatch, SwapObservation

logger = logging.getLogger(__name__)


class IngestionMerger:
    """Webhook batch -> bucket rows. Writes to the bucket store only.

    Each record is written inside its own atomic scope so one bad record
    never aborts its siblings. Batch methods return the number of records
    received, not the number stored.
    """

    def __init__(self, buckets: BucketRepository) -> None:
        self._buckets = buckets

    async def merge_price(self, token_id: str, timestamp: int, price_usd: Decimal) -> None:
        # Last delivery wins; observed timestamps are not compared.
        await self._buckets.upsert_price(token_id.lower(), hour_bucket(timestamp), timestamp, price_usd)

    async def merge_swap(self, swap: SwapObservation) -> bool:
        """Record a swap and credit its volume to both token legs.

        Returns False (and accumulates nothing) for an already-seen swap id.
        """
        inserted = await self._buckets.insert_swap(swap)
        if not inserted:
            logger.debug("Duplicate swap %s ignored", swap.id)
            return False

        bucket = hour_bucket(swap.timestamp)
        for token_id in (swap.token0, swap.token1):
            await self._buckets.add_volume(
                token_id.lower(),
                swap.pair.lower(),
                swap.source,
                bucket,
                swap.amount_usd,
                swap.amount_native,
            )
        return True

    async def merge_prices(self, batch: PriceBatch) -> int:
        for rec in batch.records:
            try:
                async with self._buckets.atomic():
                    await self.merge_price(rec.token_id, rec.timestamp, rec.price_usd)
            except SQLAlchemyError:
                logger.exception("DB insert error for price: %s", rec.token_id)
        logger.info("Merged price batch: %d received, %d decoded", batch.received, len(batch.records))
        return batch.received

    async def merge_swaps(self, batch: SwapBatch) -> int:
        accumulated = 0
        for rec in batch.records:
            try:
                async with self._buckets.atomic():
                    if await self.merge_swap(rec):
                        accumulated += 1
            except SQLAlchemyError:
                logger.exception("DB insert error for swap: %s", rec.id)
        logger.info(
            "Merged swap batch: %d received, %d decoded, %d new",
            batch.received, len(batch.records), accumulated,
        )
        return batch.received
