"""Read endpoints: gap-filled price history, richer token info and the token list."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tokenpulse.api.deps import build_history_service, get_db, get_snapshots
from tokenpulse.api.schemas.prices import PricesResponse, TokenInfoResponse, TokenList
from tokenpulse.history.service import NoTokensError
from tokenpulse.infra.cache.snapshot_store import SnapshotRepository

router = APIRouter(prefix="/api/launchpad", tags=["prices"])

DbDep = Annotated[AsyncSession, Depends(get_db)]
SnapshotsDep = Annotated[SnapshotRepository, Depends(get_snapshots)]


def _no_tokens() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "no tokens"})


@router.get("/prices", response_model=PricesResponse)
async def get_prices(db: DbDep, snapshots: SnapshotsDep):
    service = build_history_service(db, snapshots)
    try:
        prices = await service.prices()
    except NoTokensError:
        return _no_tokens()
    return PricesResponse(prices=prices)


@router.get("/tokeninfo", response_model=TokenInfoResponse)
async def get_token_info(db: DbDep, snapshots: SnapshotsDep):
    service = build_history_service(db, snapshots)
    try:
        info = await service.token_info()
    except NoTokensError:
        return _no_tokens()
    return TokenInfoResponse(tokenInfo=info)


@router.get("/tokens", response_model=TokenList)
async def list_tokens(db: DbDep, snapshots: SnapshotsDep) -> TokenList:
    service = build_history_service(db, snapshots)
    return TokenList(tokens=await service.list_tokens())
