"""Bucket store: hourly price/volume rows and the raw swap log."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from decimal import Decimal
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from tokenpulse.db.models.price import PriceBucket
from tokenpulse.db.models.swap import SwapRecord
from tokenpulse.db.models.volume import VolumeBucket
from tokenpulse.domain.models import BucketPoint, SwapObservation, VenueVolume


class BucketRepository(ABC):
    """Narrow contract the merger, aggregator and history reads depend on.

    Upserts and additive increments must be atomic at the store level;
    callers never read-modify-write.
    """

    @abstractmethod
    def atomic(self) -> AbstractAsyncContextManager:
        """Scope for a single record's writes. A failure rolls back only that scope."""

    @abstractmethod
    async def upsert_price(self, token_id: str, hour_bucket: int, ts: int, price_usd: Decimal) -> None:
        """Insert or unconditionally replace the price of (token_id, hour_bucket)."""

    @abstractmethod
    async def insert_swap(self, swap: SwapObservation) -> bool:
        """Insert the raw swap. Returns False when the swap id already exists."""

    @abstractmethod
    async def add_volume(
        self,
        token_id: str,
        pool: str,
        source: str,
        hour_bucket: int,
        volume_usd: Decimal,
        volume_native: Decimal,
    ) -> None:
        """Increment the (token_id, pool, source, hour_bucket) volume accumulators."""

    @abstractmethod
    async def volume_by_venue(self, since_bucket: int) -> list[VenueVolume]:
        """Summed volume per (token, pool, source) for buckets > since_bucket, largest first."""

    @abstractmethod
    async def price_points(
        self, from_bucket: int, to_bucket: int, token_ids: Optional[Iterable[str]] = None
    ) -> list[BucketPoint]:
        """Price rows with from_bucket <= hour_bucket <= to_bucket, oldest first."""

    @abstractmethod
    async def volume_points(
        self, from_bucket: int, to_bucket: int, token_ids: Iterable[str]
    ) -> list[BucketPoint]:
        """Per (token, hour) volume summed over venues, oldest first."""


class SqlBucketRepository(BucketRepository):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def atomic(self) -> AbstractAsyncContextManager:
        return self._session.begin_nested()

    def _insert(self, model):
        """Dialect-specific INSERT exposing on_conflict_do_update / do_nothing."""
        if self._session.get_bind().dialect.name == "postgresql":
            return postgresql.insert(model)
        return sqlite.insert(model)

    async def upsert_price(self, token_id: str, hour_bucket: int, ts: int, price_usd: Decimal) -> None:
        stmt = self._insert(PriceBucket).values(
            token_id=token_id, hour_bucket=hour_bucket, ts=ts, price_usd=price_usd
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[PriceBucket.token_id, PriceBucket.hour_bucket],
            set_={"ts": stmt.excluded.ts, "price_usd": stmt.excluded.price_usd},
        )
        await self._session.execute(stmt)

    async def insert_swap(self, swap: SwapObservation) -> bool:
        stmt = (
            self._insert(SwapRecord)
            .values(**swap.model_dump())
            .on_conflict_do_nothing(index_elements=[SwapRecord.id])
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def add_volume(
        self,
        token_id: str,
        pool: str,
        source: str,
        hour_bucket: int,
        volume_usd: Decimal,
        volume_native: Decimal,
    ) -> None:
        stmt = self._insert(VolumeBucket).values(
            token_id=token_id,
            pool=pool,
            source=source,
            hour_bucket=hour_bucket,
            volume_usd=volume_usd,
            volume_native=volume_native,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                VolumeBucket.token_id,
                VolumeBucket.pool,
                VolumeBucket.source,
                VolumeBucket.hour_bucket,
            ],
            set_={
                "volume_usd": VolumeBucket.volume_usd + stmt.excluded.volume_usd,
                "volume_native": VolumeBucket.volume_native + stmt.excluded.volume_native,
            },
        )
        await self._session.execute(stmt)

    async def volume_by_venue(self, since_bucket: int) -> list[VenueVolume]:
        total = func.sum(VolumeBucket.volume_usd).label("total_volume")
        stmt = (
            select(VolumeBucket.token_id, VolumeBucket.pool, VolumeBucket.source, total)
            .where(VolumeBucket.hour_bucket > since_bucket)
            .group_by(VolumeBucket.token_id, VolumeBucket.pool, VolumeBucket.source)
            .order_by(total.desc())
        )
        result = await self._session.execute(stmt)
        return [
            VenueVolume(
                token_id=row.token_id,
                pool=row.pool,
                source=row.source,
                volume_usd=Decimal(str(row.total_volume or 0)),
            )
            for row in result.all()
        ]

    async def price_points(
        self, from_bucket: int, to_bucket: int, token_ids: Optional[Iterable[str]] = None
    ) -> list[BucketPoint]:
        stmt = select(PriceBucket.token_id, PriceBucket.hour_bucket, PriceBucket.price_usd).where(
            PriceBucket.hour_bucket >= from_bucket,
            PriceBucket.hour_bucket <= to_bucket,
        )
        if token_ids is not None:
            stmt = stmt.where(PriceBucket.token_id.in_(list(token_ids)))
        stmt = stmt.order_by(PriceBucket.hour_bucket.asc())

        result = await self._session.execute(stmt)
        return [
            BucketPoint(token_id=row.token_id, hour_bucket=row.hour_bucket, value=Decimal(str(row.price_usd)))
            for row in result.all()
        ]

    async def volume_points(
        self, from_bucket: int, to_bucket: int, token_ids: Iterable[str]
    ) -> list[BucketPoint]:
        total = func.sum(VolumeBucket.volume_usd).label("volume_usd")
        stmt = (
            select(VolumeBucket.token_id, VolumeBucket.hour_bucket, total)
            .where(
                VolumeBucket.hour_bucket >= from_bucket,
                VolumeBucket.hour_bucket <= to_bucket,
                VolumeBucket.token_id.in_(list(token_ids)),
            )
            .group_by(VolumeBucket.token_id, VolumeBucket.hour_bucket)
            .order_by(VolumeBucket.hour_bucket.asc())
        )
        result = await self._session.execute(stmt)
        return [
            BucketPoint(token_id=row.token_id, hour_bucket=row.hour_bucket, value=Decimal(str(row.volume_usd or 0)))
            for row in result.all()
        ]
