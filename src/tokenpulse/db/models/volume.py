"""Hourly volume buckets per token and trading venue."""

from decimal import Decimal

from sqlalchemy import BigInteger, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from tokenpulse.db.session import Base


class VolumeBucket(Base):
    """Additive volume accumulator keyed by (token, pool, source, hour)."""

    __tablename__ = "volume"

    token_id: Mapped[str] = mapped_column(String(100), primary_key=True)
    pool: Mapped[str] = mapped_column(String(100), primary_key=True)
    source: Mapped[str] = mapped_column(String(50), primary_key=True)
    hour_bucket: Mapped[int] = mapped_column(BigInteger, primary_key=True, index=True)
    volume_usd: Mapped[Decimal] = mapped_column(Numeric(78, 18), default=Decimal(0))
    volume_native: Mapped[Decimal] = mapped_column(Numeric(78, 18), default=Decimal(0))
