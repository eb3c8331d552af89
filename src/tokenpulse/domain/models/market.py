"""Canonical market-data types passed between ingestion, aggregation and reads."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

DEFAULT_DECIMALS = 18


class PriceObservation(BaseModel):
    """One price push for a token. `price_usd` is the raw integer-scaled value."""

    token_id: str
    timestamp: int  # Unix seconds
    price_usd: Decimal


class SwapObservation(BaseModel):
    """One swap on a pool; volume is credited to both token legs."""

    id: str
    vid: Optional[int] = None
    timestamp: int
    pair: str
    token0: str
    token1: str
    token_0_amount: Optional[str] = None
    token_1_amount: Optional[str] = None
    account: Optional[str] = None
    amount_usd: Decimal = Decimal(0)
    amount_native: Decimal = Decimal(0)
    source: str


class PriceBatch(BaseModel):
    """Decoded price webhook body. `received` counts every record in the body, valid or not."""

    received: int
    records: list[PriceObservation] = []


class SwapBatch(BaseModel):
    received: int
    records: list[SwapObservation] = []


class TokenRecord(BaseModel):
    """Entry of the cached recent-token list."""

    id: str
    name: str = "Unknown"
    symbol: str = "UNK"
    decimals: int = DEFAULT_DECIMALS
    created_at: Optional[int] = None
    pool: Optional[str] = None
    source: Optional[str] = None


class TokenUpdate(BaseModel):
    """Token identity as pushed by an indexer. Absent fields stay None in the token table."""

    id: str
    symbol: str
    name: Optional[str] = None
    decimals: Optional[int] = None
    created_at: Optional[int] = None
    pool: Optional[str] = None
    source: Optional[str] = None

    def to_record(self, now: int) -> TokenRecord:
        """Cached list entry, with display defaults filled in."""
        return TokenRecord(
            id=self.id,
            name=self.name or "Unknown",
            symbol=self.symbol,
            decimals=self.decimals if self.decimals is not None else DEFAULT_DECIMALS,
            created_at=self.created_at if self.created_at is not None else now,
            pool=self.pool,
            source=self.source,
        )


class TokenBatch(BaseModel):
    received: int
    records: list[TokenUpdate] = []


class HolderUpdate(BaseModel):
    id: str
    holder_count: int


class HolderBatch(BaseModel):
    received: int
    records: list[HolderUpdate] = []


class VenueVolume(BaseModel):
    """Trailing volume of a token on a single (pool, source) venue."""

    token_id: str
    pool: str
    source: str
    volume_usd: Decimal


class BucketPoint(BaseModel):
    """A stored value at (token, hour bucket): a price or a summed volume."""

    token_id: str
    hour_bucket: int
    value: Decimal


class ActiveToken(BaseModel):
    token_id: str
    total_volume_usd: float
    dominant_pool_id: str
    dominant_source_id: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    created_at: Optional[int] = None
    holder_count: int = 0


class ActiveSnapshot(BaseModel):
    """Cached output of the active-token aggregator."""

    updated_at: int  # Unix milliseconds
    tokens: list[ActiveToken] = []

    def get(self, token_id: str) -> Optional[ActiveToken]:
        key = token_id.lower()
        for token in self.tokens:
            if token.token_id == key:
                return token
        return None


class TokenMetadata(BaseModel):
    """Display metadata merged from the token table, the record list and the active snapshot."""

    id: str
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None
    created_at: Optional[int] = None
    pool: Optional[str] = None
    source: Optional[str] = None
    holder_count: Optional[int] = None

    @property
    def effective_decimals(self) -> int:
        return self.decimals if self.decimals is not None else DEFAULT_DECIMALS
