from collections import defaultdict
from contextlib import nullcontext
from decimal import Decimal
from typing import Iterable, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tokenpulse.db.repos.bucket_repo import BucketRepository
from tokenpulse.db.session import Base
from tokenpulse.domain.models import BucketPoint, SwapObservation, VenueVolume
from tokenpulse.infra.cache.snapshot_store import RedisSnapshotStore
import tokenpulse.db.models  # noqa: F401


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
async def engine():
    eng = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest.fixture()
async def session(engine) -> AsyncSession:
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as sess:
        yield sess


class FakeRedis:
    """The slice of redis.asyncio.Redis the snapshot store uses."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, Optional[int]] = {}

    async def get(self, name: str) -> Optional[str]:
        return self.store.get(name)

    async def set(self, name: str, value: str, ex: Optional[int] = None) -> bool:
        self.store[name] = value
        self.ttls[name] = ex
        return True

    async def delete(self, *names: str) -> int:
        removed = 0
        for name in names:
            if self.store.pop(name, None) is not None:
                removed += 1
            self.ttls.pop(name, None)
        return removed

    async def aclose(self) -> None:
        pass


class InMemoryBucketRepository(BucketRepository):
    """Dict-backed bucket store with the same semantics as the SQL one."""

    def __init__(self) -> None:
        self.prices: dict[tuple[str, int], tuple[int, Decimal]] = {}
        self.swaps: dict[str, SwapObservation] = {}
        self.volume: dict[tuple[str, str, str, int], list[Decimal]] = {}

    def atomic(self):
        return nullcontext()

    async def upsert_price(self, token_id, hour_bucket, ts, price_usd):
        self.prices[(token_id, hour_bucket)] = (ts, price_usd)

    async def insert_swap(self, swap):
        if swap.id in self.swaps:
            return False
        self.swaps[swap.id] = swap
        return True

    async def add_volume(self, token_id, pool, source, hour_bucket, volume_usd, volume_native):
        acc = self.volume.setdefault((token_id, pool, source, hour_bucket), [Decimal(0), Decimal(0)])
        acc[0] += volume_usd
        acc[1] += volume_native

    async def volume_by_venue(self, since_bucket):
        totals: dict[tuple[str, str, str], Decimal] = defaultdict(Decimal)
        for (token_id, pool, source, bucket), (usd, _) in self.volume.items():
            if bucket > since_bucket:
                totals[(token_id, pool, source)] += usd
        rows = [
            VenueVolume(token_id=t, pool=p, source=s, volume_usd=v) for (t, p, s), v in totals.items()
        ]
        return sorted(rows, key=lambda r: r.volume_usd, reverse=True)

    async def price_points(self, from_bucket, to_bucket, token_ids: Optional[Iterable[str]] = None):
        wanted = set(token_ids) if token_ids is not None else None
        points = [
            BucketPoint(token_id=t, hour_bucket=b, value=price)
            for (t, b), (_, price) in self.prices.items()
            if from_bucket <= b <= to_bucket and (wanted is None or t in wanted)
        ]
        return sorted(points, key=lambda p: p.hour_bucket)

    async def volume_points(self, from_bucket, to_bucket, token_ids):
        wanted = set(token_ids)
        totals: dict[tuple[str, int], Decimal] = defaultdict(Decimal)
        for (t, _, _, b), (usd, _) in self.volume.items():
            if from_bucket <= b <= to_bucket and t in wanted:
                totals[(t, b)] += usd
        points = [BucketPoint(token_id=t, hour_bucket=b, value=v) for (t, b), v in totals.items()]
        return sorted(points, key=lambda p: p.hour_bucket)


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def snapshot_store(fake_redis) -> RedisSnapshotStore:
    return RedisSnapshotStore(fake_redis)


@pytest.fixture()
def memory_buckets() -> InMemoryBucketRepository:
    return InMemoryBucketRepository()
