"""Hourly price buckets: one row per (token, hour)."""

from decimal import Decimal

from sqlalchemy import BigInteger, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from tokenpulse.db.session import Base


class PriceBucket(Base):
    """Last delivered price observation inside an hour bucket.

    `price_usd` is the raw integer-scaled magnitude reported by the indexer;
    normalization to a display price happens on read.
    """

    __tablename__ = "prices"

    token_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    hour_bucket: Mapped[int] = mapped_column(BigInteger, primary_key=True, index=True)  # floor(unix / 3600)
    ts: Mapped[int] = mapped_column(BigInteger)  # observed_at, Unix seconds
    price_usd: Mapped[Decimal] = mapped_column(Numeric(78, 18))
