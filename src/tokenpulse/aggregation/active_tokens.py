"""Active-token aggregator — trailing 48h volume ranking written to the snapshot cache."""

import logging
import time
from dataclasses import dataclass

from tokenpulse.db.repos.bucket_repo import BucketRepository
from tokenpulse.db.repos.token_repo import TokenRepo
from tokenpulse.domain.buckets import WINDOW_HOURS, current_hour
from tokenpulse.domain.models import ActiveSnapshot, ActiveToken, VenueVolume
from tokenpulse.infra.cache.snapshot_store import SnapshotRepository

logger = logging.getLogger(__name__)

VOLUME_THRESHOLD = 5e8
METADATA_BATCH_SIZE = 80


@dataclass
class _TokenStats:
    total_volume: float
    top_pool: str
    top_source: str
    top_volume: float


def rank_venues(rows: list[VenueVolume]) -> dict[str, _TokenStats]:
    """Fold per-venue volume rows into per-token totals and a dominant venue.

    The first row seen for a token seeds its dominant venue; later rows only
    replace it when strictly larger, so ties go to the store's row order.
    """
    stats: dict[str, _TokenStats] = {}
    for row in rows:
        token_id = row.token_id.lower()
        vol = float(row.volume_usd or 0)

        current = stats.get(token_id)
        if current is None:
            current = _TokenStats(total_volume=0.0, top_pool=row.pool.lower(), top_source=row.source, top_volume=vol)
            stats[token_id] = current

        current.total_volume += vol
        if vol > current.top_volume:
            current.top_volume = vol
            current.top_pool = row.pool.lower()
            current.top_source = row.source
    return stats


def select_active(stats: dict[str, _TokenStats], threshold: float = VOLUME_THRESHOLD) -> list[ActiveToken]:
    """Tokens whose total exceeds the threshold, ordered by total volume descending."""
    active = [
        ActiveToken(
            token_id=token_id,
            total_volume_usd=s.total_volume,
            dominant_pool_id=s.top_pool,
            dominant_source_id=s.top_source,
        )
        for token_id, s in stats.items()
        if s.total_volume > threshold
    ]
    # sorted() is stable: equal totals keep first-seen order
    return sorted(active, key=lambda t: t.total_volume_usd, reverse=True)


class ActiveTokenAggregator:
    """Recomputes the active-token snapshot from the bucket store.

    Holds no state between runs; every refresh reads the stores afresh.
    A failure before the final cache write leaves the previous snapshot in place.
    """

    def __init__(
        self,
        buckets: BucketRepository,
        tokens: TokenRepo,
        snapshots: SnapshotRepository,
        threshold: float = VOLUME_THRESHOLD,
        batch_size: int = METADATA_BATCH_SIZE,
    ) -> None:
        self._buckets = buckets
        self._tokens = tokens
        self._snapshots = snapshots
        self._threshold = threshold
        self._batch_size = batch_size

    async def refresh(self, now: float | None = None) -> ActiveSnapshot | None:
        if now is None:
            now = time.time()
        since_bucket = current_hour(now) - WINDOW_HOURS

        rows = await self._buckets.volume_by_venue(since_bucket)
        if not rows:
            logger.info("No volume records found in past %d hours", WINDOW_HOURS)
            return None
        logger.info("Loaded %d token-pool volume records", len(rows))

        active = select_active(rank_venues(rows), self._threshold)
        logger.info("Active tokens above %s volume: %d", self._threshold, len(active))
        if not active:
            return None

        await self._attach_metadata(active)

        snapshot = ActiveSnapshot(updated_at=int(now * 1000), tokens=active)
        await self._snapshots.put_active(snapshot)
        logger.info("Refreshed active tokens: %d", len(active))
        return snapshot

    async def _attach_metadata(self, active: list[ActiveToken]) -> None:
        ids = [t.token_id for t in active]
        meta = {}
        for i in range(0, len(ids), self._batch_size):
            for row in await self._tokens.get_many(ids[i : i + self._batch_size]):
                meta[row.id.lower()] = row

        for token in active:
            row = meta.get(token.token_id)
            if row is None:
                continue
            token.name = row.name
            token.symbol = row.symbol
            token.decimals = row.decimals
            token.created_at = row.created_at
            token.holder_count = row.holder_count or 0
