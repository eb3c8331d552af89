"""Indexer webhooks. Responses report records received, whatever was stored."""

import logging
import time
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tokenpulse.api.deps import get_db, get_snapshots
from tokenpulse.api.schemas.webhook import (
    PayloadError,
    decode_holders,
    decode_prices,
    decode_swaps,
    decode_tokens,
)
from tokenpulse.db.repos.bucket_repo import SqlBucketRepository
from tokenpulse.infra.cache.snapshot_store import SnapshotRepository
from tokenpulse.ingest.merger import IngestionMerger
from tokenpulse.ingest.token_registry import TokenRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/launchpad/webhook", tags=["webhook"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
SnapshotsDep = Annotated[SnapshotRepository, Depends(get_snapshots)]
JsonBody = Annotated[Any, Body()]


def _decode(decoder, body: Any, *args):
    try:
        return decoder(body, *args)
    except PayloadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.post("/prices")
async def receive_prices(body: JsonBody, db: DbDep) -> dict:
    batch = _decode(decode_prices, body)
    logger.info("Received price records: %d", batch.received)

    count = await IngestionMerger(SqlBucketRepository(db)).merge_prices(batch)
    await db.commit()
    return {"ok": True, "count": count}


@router.post("/swaps")
async def receive_swaps(body: JsonBody, db: DbDep) -> dict:
    batch = _decode(decode_swaps, body)
    logger.info("Received swap records: %d", batch.received)

    count = await IngestionMerger(SqlBucketRepository(db)).merge_swaps(batch)
    await db.commit()
    return {"ok": True, "count": count}


@router.post("/tokens")
async def receive_tokens(body: JsonBody, db: DbDep, snapshots: SnapshotsDep) -> dict:
    batch = _decode(decode_tokens, body)
    logger.info("Received token records: %d", batch.received)

    count = await TokenRegistry(db, snapshots).register(batch, int(time.time()))
    await db.commit()
    return {"status": "ok", "count": count}


@router.post("/holders")
async def receive_holders(body: JsonBody, db: DbDep, snapshots: SnapshotsDep) -> dict:
    batch = _decode(decode_holders, body)

    count = await TokenRegistry(db, snapshots).update_holders(batch)
    await db.commit()
    return {"ok": True, "count": count}
