from typing import AsyncGenerator

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tokenpulse.aggregation.active_tokens import ActiveTokenAggregator
from tokenpulse.config import settings
from tokenpulse.container import Container
from tokenpulse.db.repos.bucket_repo import SqlBucketRepository
from tokenpulse.db.repos.token_repo import TokenRepo
from tokenpulse.history.service import HistoryService
from tokenpulse.infra.cache.snapshot_store import RedisSnapshotStore, SnapshotRepository


@inject
async def get_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(Provide[Container.session_factory]),
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@inject
async def get_redis(redis: Redis = Depends(Provide[Container.redis])) -> Redis:
    return redis


async def get_snapshots(redis: Redis = Depends(get_redis)) -> SnapshotRepository:
    return RedisSnapshotStore(
        redis,
        active_ttl=settings.active_ttl_seconds,
        records_ttl=settings.records_ttl_seconds,
    )


def build_history_service(db: AsyncSession, snapshots: SnapshotRepository) -> HistoryService:
    return HistoryService(
        SqlBucketRepository(db),
        TokenRepo(db),
        snapshots,
        points=settings.history_points,
    )


def build_aggregator(db: AsyncSession, snapshots: SnapshotRepository) -> ActiveTokenAggregator:
    return ActiveTokenAggregator(
        SqlBucketRepository(db),
        TokenRepo(db),
        snapshots,
        threshold=settings.volume_threshold_usd,
        batch_size=settings.metadata_batch_size,
    )
