from tokenpulse.domain.models.market import (
    DEFAULT_DECIMALS,
    ActiveSnapshot,
    ActiveToken,
    BucketPoint,
    HolderBatch,
    HolderUpdate,
    PriceBatch,
    PriceObservation,
    SwapBatch,
    SwapObservation,
    TokenBatch,
    TokenMetadata,
    TokenRecord,
    TokenUpdate,
    VenueVolume,
)

__all__ = [
    "DEFAULT_DECIMALS",
    "ActiveSnapshot",
    "ActiveToken",
    "BucketPoint",
    "HolderBatch",
    "HolderUpdate",
    "PriceBatch",
    "PriceObservation",
    "SwapBatch",
    "SwapObservation",
    "TokenBatch",
    "TokenMetadata",
    "TokenRecord",
    "TokenUpdate",
    "VenueVolume",
]
