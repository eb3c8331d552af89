"""Operator endpoints: synchronous aggregator run and raw cache views."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tokenpulse.api.deps import build_aggregator, get_db, get_snapshots
from tokenpulse.infra.cache.snapshot_store import SnapshotRepository

router = APIRouter(tags=["debug"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
SnapshotsDep = Annotated[SnapshotRepository, Depends(get_snapshots)]


@router.get("/debug/refresh")
async def refresh_active(db: DbDep, snapshots: SnapshotsDep) -> dict:
    snapshot = await build_aggregator(db, snapshots).refresh()
    return {"ok": True, "active": len(snapshot.tokens) if snapshot else 0}


@router.get("/api/launchpad/debug/kv/tokensrecords")
async def dump_records(snapshots: SnapshotsDep):
    records = await snapshots.get_records()
    if not records:
        return {"message": "KV empty"}
    return [r.model_dump() for r in records]


@router.get("/api/launchpad/debug/kv/tokensactive")
async def dump_active(snapshots: SnapshotsDep):
    snapshot = await snapshots.get_active()
    if snapshot is None:
        return {"message": "KV empty"}
    return snapshot.model_dump()
