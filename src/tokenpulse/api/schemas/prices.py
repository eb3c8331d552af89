from typing import Optional

from pydantic import BaseModel


class PriceEntry(BaseModel):
    id: str
    symbol: str
    created_at: Optional[int] = None
    now: float
    history: dict[str, float]


class PricesResponse(BaseModel):
    prices: dict[str, PriceEntry]


class ActivePool(BaseModel):
    pool: Optional[str] = None
    source: Optional[str] = None


class TokenInfoEntry(BaseModel):
    id: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    holder_count: int = 0
    decimals: int = 18
    created_at: Optional[int] = None
    now: float
    history: dict[str, float]
    volume: dict[str, float]
    active_pool: ActivePool


class TokenInfoResponse(BaseModel):
    tokenInfo: dict[str, TokenInfoEntry]


class TokenListItem(BaseModel):
    id: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    created_at: Optional[int] = None
    pool: Optional[str] = None
    source: Optional[str] = None
    total_volume_usd: Optional[float] = None
    dominant_pool_id: Optional[str] = None
    dominant_source_id: Optional[str] = None
    holder_count: Optional[int] = None


class TokenList(BaseModel):
    tokens: list[TokenListItem]
