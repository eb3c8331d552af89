"""Token identity rows written by the token/holder webhooks."""

from typing import Optional

from sqlalchemy import BigInteger, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from tokenpulse.db.session import Base


class Token(Base):
    """Launched token. `id` is the lowercased contract address."""

    __tablename__ = "tokens"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    name: Mapped[Optional[str]] = mapped_column(String(255), default=None)
    symbol: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    decimals: Mapped[Optional[int]] = mapped_column(Integer, default=None)
    created_at: Mapped[Optional[int]] = mapped_column(BigInteger, default=None, index=True)  # Unix seconds
    pool: Mapped[Optional[str]] = mapped_column(String(100), default=None)
    source: Mapped[Optional[str]] = mapped_column(String(50), default=None)
    holder_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
