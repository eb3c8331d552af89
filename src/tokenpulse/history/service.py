"""Assembles the price and token-info read models."""

import logging
import time
from typing import Any, Optional

from tokenpulse.db.repos.bucket_repo import BucketRepository
from tokenpulse.db.repos.token_repo import TokenRepo
from tokenpulse.domain.buckets import HOUR_SECONDS, WINDOW_HOURS, current_hour
from tokenpulse.domain.models import ActiveSnapshot, TokenMetadata
from tokenpulse.history.metadata import MetadataResolver
from tokenpulse.history.reconstructor import (
    build_history,
    build_volume_history,
    latest_prices,
    normalize_price,
    normalize_volume,
)
from tokenpulse.infra.cache.snapshot_store import SnapshotRepository

logger = logging.getLogger(__name__)


class NoTokensError(Exception):
    """Neither recent launches nor the active snapshot produced a token id."""


class HistoryService:
    def __init__(
        self,
        buckets: BucketRepository,
        tokens: TokenRepo,
        snapshots: SnapshotRepository,
        points: int = WINDOW_HOURS,
    ) -> None:
        self._buckets = buckets
        self._tokens = tokens
        self._snapshots = snapshots
        self._resolver = MetadataResolver(tokens, snapshots)
        self._points = points

    async def _collect_ids(self, now: float) -> tuple[list[str], Optional[ActiveSnapshot]]:
        """Ids of tokens launched in the last 48h, then active-snapshot ids; de-duplicated, order kept."""
        since = int(now) - WINDOW_HOURS * HOUR_SECONDS
        recent = await self._tokens.list_created_since(since)
        snapshot = await self._snapshots.get_active()

        ids = [r.id.lower() for r in recent]
        if snapshot is not None:
            ids.extend(t.token_id.lower() for t in snapshot.tokens)
        ids = list(dict.fromkeys(ids))

        logger.debug("Read set: %d recent launches, %d unique ids", len(recent), len(ids))
        if not ids:
            raise NoTokensError()
        return ids, snapshot

    async def prices(self, now: Optional[float] = None) -> dict[str, dict[str, Any]]:
        if now is None:
            now = time.time()
        ids, snapshot = await self._collect_ids(now)
        now_hour = current_hour(now)

        # Same inclusive window as token_info: the bucket at offset `points` seeds the oldest slot
        rows = await self._buckets.price_points(now_hour - self._points, now_hour, ids)
        latest = latest_prices(rows)
        history = build_history(now_hour, rows, ids, self._points, latest)
        meta = await self._resolver.resolve(ids, snapshot)

        result: dict[str, dict[str, Any]] = {}
        for token_id in ids:
            m = meta.get(token_id) or TokenMetadata(id=token_id)
            decimals = m.effective_decimals
            result[token_id] = {
                "id": token_id,
                "symbol": m.symbol or "-",
                "created_at": m.created_at,
                "now": normalize_price(latest.get(token_id, 0), decimals),
                "history": {k: normalize_price(v, decimals) for k, v in history[token_id].items()},
            }
        return result

    async def token_info(self, now: Optional[float] = None) -> dict[str, dict[str, Any]]:
        if now is None:
            now = time.time()
        ids, snapshot = await self._collect_ids(now)
        now_hour = current_hour(now)

        rows = await self._buckets.price_points(now_hour - self._points, now_hour, ids)
        volume_rows = await self._buckets.volume_points(now_hour - self._points, now_hour, ids)
        latest = latest_prices(rows)
        history = build_history(now_hour, rows, ids, self._points, latest)
        volume = build_volume_history(now_hour, volume_rows, ids, self._points)
        meta = await self._resolver.resolve(ids, snapshot)

        result: dict[str, dict[str, Any]] = {}
        for token_id in ids:
            m = meta.get(token_id) or TokenMetadata(id=token_id)
            decimals = m.effective_decimals

            active = snapshot.get(token_id) if snapshot is not None else None
            if active is not None:
                active_pool = {"pool": active.dominant_pool_id, "source": active.dominant_source_id}
            else:
                active_pool = {"pool": m.pool, "source": m.source}

            result[token_id] = {
                "id": token_id,
                "name": m.name,
                "symbol": m.symbol,
                "holder_count": m.holder_count or 0,
                "decimals": decimals,
                "created_at": m.created_at,
                "now": normalize_price(latest.get(token_id, 0), decimals),
                "history": {k: normalize_price(v, decimals) for k, v in history[token_id].items()},
                "volume": {k: normalize_volume(v) for k, v in volume[token_id].items()},
                "active_pool": active_pool,
            }
        return result

    async def list_tokens(self) -> list[dict[str, Any]]:
        """Recent records overlaid with active-snapshot entries, keyed by id."""
        merged: dict[str, dict[str, Any]] = {}
        for rec in await self._snapshots.get_records():
            merged[rec.id.lower()] = rec.model_dump()

        snapshot = await self._snapshots.get_active()
        if snapshot is not None:
            for t in snapshot.tokens:
                merged[t.token_id] = {"id": t.token_id, **t.model_dump()}
        return list(merged.values())
