"""Webhook wire models and the decode step that normalizes bodies into canonical batches.

Indexers send tokens as a list, a ``{"tokens": [...]}`` envelope, a
``{"tokens": {...}}`` envelope or a bare record. The body is first tagged
by shape, then each record is validated on its own so one malformed record
is skipped without rejecting the batch.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from tokenpulse.domain.models import (
    HolderBatch,
    HolderUpdate,
    PriceBatch,
    PriceObservation,
    SwapBatch,
    SwapObservation,
    TokenBatch,
    TokenUpdate,
)

logger = logging.getLogger(__name__)

UNKNOWN_SOURCE = "unknown"

# Above this a numeric timestamp is taken to be milliseconds
_MS_THRESHOLD = 10**11


class PayloadError(ValueError):
    """Webhook body has none of the accepted shapes."""


def to_unix_seconds(value: Any) -> int:
    """Unix seconds (int/float/numeric string, ms auto-detected) or ISO-8601 -> int seconds."""
    if isinstance(value, datetime):
        dt = value if value.tzinfo else value.replace(tzinfo=timezone.utc)
        return int(dt.timestamp())
    if isinstance(value, bool):
        raise ValueError("timestamp must not be a boolean")
    if isinstance(value, (int, float, Decimal)):
        seconds = int(value // 1000) if value >= _MS_THRESHOLD else int(value)
    elif isinstance(value, str):
        text = value.strip()
        try:
            numeric = Decimal(text)
        except InvalidOperation:
            dt = datetime.fromisoformat(text)
            return to_unix_seconds(dt)
        if not numeric.is_finite():
            raise ValueError(f"unsupported timestamp: {value!r}")
        return to_unix_seconds(int(numeric))
    else:
        raise ValueError(f"unsupported timestamp: {value!r}")
    if seconds < 0:
        raise ValueError("timestamp before the epoch")
    return seconds


def _decimal_or_zero(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal(0)
    return Decimal(str(value))


class PricePayload(BaseModel):
    id: Optional[str] = None
    timestamp: int
    token: str
    price_usd: Decimal

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> int:
        return to_unix_seconds(v)

    def to_observation(self) -> PriceObservation:
        return PriceObservation(token_id=self.token.lower(), timestamp=self.timestamp, price_usd=self.price_usd)


class SwapPayload(BaseModel):
    id: str
    vid: Optional[int] = None
    timestamp: int
    pair: str
    token0: str = Field(validation_alias=AliasChoices("token0", "token_0"))
    token1: str = Field(validation_alias=AliasChoices("token1", "token_1"))
    token_0_amount: Optional[str] = None
    token_1_amount: Optional[str] = None
    account: Optional[str] = None
    amount_usd: Decimal = Decimal(0)
    amount_native: Decimal = Decimal(0)
    source: Optional[str] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> int:
        return to_unix_seconds(v)

    @field_validator("amount_usd", "amount_native", mode="before")
    @classmethod
    def parse_amount(cls, v: Any) -> Decimal:
        return _decimal_or_zero(v)

    @field_validator("token_0_amount", "token_1_amount", mode="before")
    @classmethod
    def stringify_raw_amount(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    def to_observation(self) -> SwapObservation:
        return SwapObservation(
            id=self.id,
            vid=self.vid,
            timestamp=self.timestamp,
            pair=self.pair.lower(),
            token0=self.token0.lower(),
            token1=self.token1.lower(),
            token_0_amount=self.token_0_amount,
            token_1_amount=self.token_1_amount,
            account=self.account,
            amount_usd=self.amount_usd,
            amount_native=self.amount_native,
            source=self.source or UNKNOWN_SOURCE,
        )


class TokenPayload(BaseModel):
    id: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    name: Optional[str] = None
    decimals: Optional[int] = None
    created_at: Optional[int] = None
    pool: Optional[str] = None
    source: Optional[str] = None

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, v: Any) -> Optional[int]:
        return None if v is None else to_unix_seconds(v)

    def to_update(self) -> TokenUpdate:
        return TokenUpdate(
            id=self.id.lower(),
            symbol=self.symbol,
            name=self.name,
            decimals=self.decimals,
            created_at=self.created_at,
            pool=self.pool.lower() if self.pool else None,
            source=self.source,
        )


class HolderPayload(BaseModel):
    id: str
    holder_count: int = Field(validation_alias=AliasChoices("holderCount", "holder_count"))

    def to_update(self) -> HolderUpdate:
        return HolderUpdate(id=self.id.lower(), holder_count=self.holder_count)


BodyShape = Literal["list", "envelope_list", "envelope_record", "record"]


def classify_body(body: Any, envelope_key: str) -> BodyShape:
    if isinstance(body, list):
        return "list"
    if isinstance(body, dict):
        inner = body.get(envelope_key)
        if isinstance(inner, list):
            return "envelope_list"
        if isinstance(inner, dict):
            return "envelope_record"
        if body.get("id"):
            return "record"
    raise PayloadError(f"Invalid payload, expected {envelope_key}")


def unwrap(body: Any, envelope_key: str) -> list[Any]:
    shape = classify_body(body, envelope_key)
    if shape == "list":
        return list(body)
    if shape == "envelope_list":
        return list(body[envelope_key])
    if shape == "envelope_record":
        return [body[envelope_key]]
    return [body]


def _validate_each(model: type[BaseModel], items: list[Any], kind: str) -> list[Any]:
    valid = []
    for item in items:
        try:
            valid.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning("Skip invalid %s record: %s", kind, e.errors(include_url=False))
    return valid


def decode_prices(body: Any) -> PriceBatch:
    items = unwrap(body, "prices")
    payloads = _validate_each(PricePayload, items, "price")
    return PriceBatch(received=len(items), records=[p.to_observation() for p in payloads])


def decode_swaps(body: Any) -> SwapBatch:
    items = unwrap(body, "swaps")
    payloads = _validate_each(SwapPayload, items, "swap")
    return SwapBatch(received=len(items), records=[p.to_observation() for p in payloads])


def decode_tokens(body: Any) -> TokenBatch:
    items = unwrap(body, "tokens")
    payloads = _validate_each(TokenPayload, items, "token")
    return TokenBatch(received=len(items), records=[p.to_update() for p in payloads])


def decode_holders(body: Any) -> HolderBatch:
    items = unwrap(body, "holders")
    payloads = _validate_each(HolderPayload, items, "holder")
    return HolderBatch(received=len(items), records=[p.to_update() for p in payloads])
