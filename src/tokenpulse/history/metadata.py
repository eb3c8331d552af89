"""Field-level merge of token metadata from the token table and the cache."""

import logging
from typing import Any, Iterable, Optional

from tokenpulse.db.repos.token_repo import TokenRepo
from tokenpulse.domain.models import ActiveSnapshot, TokenMetadata
from tokenpulse.infra.cache.snapshot_store import SnapshotRepository

logger = logging.getLogger(__name__)

_FIELDS = ("name", "symbol", "decimals", "created_at", "pool", "source", "holder_count")


def merge_metadata(sources: Iterable[Iterable[dict[str, Any]]]) -> dict[str, TokenMetadata]:
    """Fold metadata dicts, highest-precedence source first.

    Keys are lowercased ids. For every field the first non-null value wins;
    later sources only fill gaps and never replace a whole record.
    """
    merged: dict[str, dict[str, Any]] = {}
    for source in sources:
        for item in source:
            token_id = (item.get("id") or "").lower()
            if not token_id:
                continue
            target = merged.setdefault(token_id, {"id": token_id})
            for field in _FIELDS:
                if target.get(field) is None and item.get(field) is not None:
                    target[field] = item[field]
    return {token_id: TokenMetadata(**fields) for token_id, fields in merged.items()}


def _snapshot_items(snapshot: Optional[ActiveSnapshot]) -> list[dict[str, Any]]:
    if snapshot is None:
        return []
    return [
        {
            "id": t.token_id,
            "name": t.name,
            "symbol": t.symbol,
            "decimals": t.decimals,
            "created_at": t.created_at,
            "pool": t.dominant_pool_id,
            "source": t.dominant_source_id,
            "holder_count": t.holder_count,
        }
        for t in snapshot.tokens
    ]


class MetadataResolver:
    """Token table rows > cached recent records > active snapshot entries."""

    def __init__(self, tokens: TokenRepo, snapshots: SnapshotRepository) -> None:
        self._tokens = tokens
        self._snapshots = snapshots

    async def resolve(
        self, token_ids: Iterable[str], snapshot: Optional[ActiveSnapshot] = None
    ) -> dict[str, TokenMetadata]:
        """Metadata for the given ids. ``snapshot`` skips a cache read when the caller already has it."""
        wanted = {t.lower() for t in token_ids}
        if not wanted:
            return {}

        rows = await self._tokens.get_many(wanted)
        records = await self._snapshots.get_records()
        if snapshot is None:
            snapshot = await self._snapshots.get_active()

        merged = merge_metadata([
            [{"id": r.id, **{f: getattr(r, f) for f in _FIELDS}} for r in rows],
            [r.model_dump() for r in records],
            _snapshot_items(snapshot),
        ])
        logger.debug("Resolved metadata for %d/%d tokens", len(merged.keys() & wanted), len(wanted))
        return {token_id: meta for token_id, meta in merged.items() if token_id in wanted}
