"""Raw swap rows. The unique swap id absorbs duplicate webhook deliveries."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import BigInteger, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from tokenpulse.db.session import Base


class SwapRecord(Base):
    __tablename__ = "swaps"

    id: Mapped[str] = mapped_column(String(150), primary_key=True)
    vid: Mapped[Optional[int]] = mapped_column(BigInteger, default=None)
    timestamp: Mapped[int] = mapped_column(BigInteger, index=True)
    pair: Mapped[str] = mapped_column(String(100))
    token0: Mapped[str] = mapped_column(String(100))
    token1: Mapped[str] = mapped_column(String(100))
    token_0_amount: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    token_1_amount: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    account: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    amount_usd: Mapped[Decimal] = mapped_column(Numeric(78, 18), default=Decimal(0))
    amount_native: Mapped[Decimal] = mapped_column(Numeric(78, 18), default=Decimal(0))
    source: Mapped[str] = mapped_column(String(50))
