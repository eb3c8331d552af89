"""Celery tasks for scheduled aggregation."""

import asyncio
import logging

from tokenpulse.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="refresh_active_tokens")
def refresh_active_tokens_task() -> dict:
    """Recompute the active-token snapshot.

    Bridges to async code via asyncio.run(); each run builds its own engine,
    session and Redis client and shares nothing with the API process.
    """
    return asyncio.run(_refresh_async())


async def _refresh_async() -> dict:
    from redis.asyncio import Redis

    from tokenpulse.aggregation.active_tokens import ActiveTokenAggregator
    from tokenpulse.config import settings
    from tokenpulse.db.repos.bucket_repo import SqlBucketRepository
    from tokenpulse.db.repos.token_repo import TokenRepo
    from tokenpulse.db.session import build_engine, build_session_factory
    from tokenpulse.infra.cache.snapshot_store import RedisSnapshotStore

    engine = build_engine(settings.database_url, echo=False)
    session_factory = build_session_factory(engine)
    redis = Redis.from_url(settings.redis_url, decode_responses=True)

    try:
        async with session_factory() as session:
            aggregator = ActiveTokenAggregator(
                SqlBucketRepository(session),
                TokenRepo(session),
                RedisSnapshotStore(
                    redis,
                    active_ttl=settings.active_ttl_seconds,
                    records_ttl=settings.records_ttl_seconds,
                ),
                threshold=settings.volume_threshold_usd,
                batch_size=settings.metadata_batch_size,
            )
            snapshot = await aggregator.refresh()
        active = len(snapshot.tokens) if snapshot else 0
        logger.info("Active-token refresh finished: %d tokens", active)
        return {"status": "ok", "active": active}
    except Exception as e:
        # Previous snapshot stays in the cache until its TTL runs out
        logger.exception("Active-token refresh failed")
        return {"status": "error", "message": str(e)}
    finally:
        await redis.aclose()
        await engine.dispose()
