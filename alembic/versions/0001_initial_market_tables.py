"""initial market tables

Revision ID: 0001_market
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001_market"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tokens",
        sa.Column("id", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("symbol", sa.String(100), nullable=True),
        sa.Column("decimals", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.BigInteger(), nullable=True),
        sa.Column("pool", sa.String(100), nullable=True),
        sa.Column("source", sa.String(50), nullable=True),
        sa.Column("holder_count", sa.Integer(), server_default="0", nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_tokens")),
    )
    op.create_index(op.f("ix_tokens_created_at"), "tokens", ["created_at"])

    op.create_table(
        "prices",
        sa.Column("token_id", sa.String(100), nullable=False),
        sa.Column("hour_bucket", sa.BigInteger(), nullable=False),
        sa.Column("ts", sa.BigInteger(), nullable=False),
        sa.Column("price_usd", sa.Numeric(78, 18), nullable=False),
        sa.PrimaryKeyConstraint("token_id", "hour_bucket", name=op.f("pk_prices")),
    )
    op.create_index(op.f("ix_prices_hour_bucket"), "prices", ["hour_bucket"])

    op.create_table(
        "volume",
        sa.Column("token_id", sa.String(100), nullable=False),
        sa.Column("pool", sa.String(100), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.Column("hour_bucket", sa.BigInteger(), nullable=False),
        sa.Column("volume_usd", sa.Numeric(78, 18), nullable=False),
        sa.Column("volume_native", sa.Numeric(78, 18), nullable=False),
        sa.PrimaryKeyConstraint("token_id", "pool", "source", "hour_bucket", name=op.f("pk_volume")),
    )
    op.create_index(op.f("ix_volume_hour_bucket"), "volume", ["hour_bucket"])

    op.create_table(
        "swaps",
        sa.Column("id", sa.String(150), nullable=False),
        sa.Column("vid", sa.BigInteger(), nullable=True),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("pair", sa.String(100), nullable=False),
        sa.Column("token0", sa.String(100), nullable=False),
        sa.Column("token1", sa.String(100), nullable=False),
        sa.Column("token_0_amount", sa.String(100), nullable=True),
        sa.Column("token_1_amount", sa.String(100), nullable=True),
        sa.Column("account", sa.String(100), nullable=True),
        sa.Column("amount_usd", sa.Numeric(78, 18), nullable=False),
        sa.Column("amount_native", sa.Numeric(78, 18), nullable=False),
        sa.Column("source", sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_swaps")),
    )
    op.create_index(op.f("ix_swaps_timestamp"), "swaps", ["timestamp"])


def downgrade() -> None:
    op.drop_index(op.f("ix_swaps_timestamp"), table_name="swaps")
    op.drop_table("swaps")
    op.drop_index(op.f("ix_volume_hour_bucket"), table_name="volume")
    op.drop_table("volume")
    op.drop_index(op.f("ix_prices_hour_bucket"), table_name="prices")
    op.drop_table("prices")
    op.drop_index(op.f("ix_tokens_created_at"), table_name="tokens")
    op.drop_table("tokens")
