from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from tokenpulse.db.models.token import Token
from tokenpulse.domain.models import TokenRecord, TokenUpdate


class TokenRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def upsert(self, record: TokenRecord | TokenUpdate) -> None:
        """Insert a token or overwrite its identity fields. holder_count is left untouched."""
        insert = postgresql.insert if self._session.get_bind().dialect.name == "postgresql" else sqlite.insert
        stmt = insert(Token).values(
            id=record.id.lower(),
            name=record.name,
            symbol=record.symbol,
            decimals=record.decimals,
            created_at=record.created_at,
            pool=record.pool,
            source=record.source,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Token.id],
            set_={
                "name": stmt.excluded.name,
                "symbol": stmt.excluded.symbol,
                "decimals": stmt.excluded.decimals,
                "created_at": stmt.excluded.created_at,
                "pool": stmt.excluded.pool,
                "source": stmt.excluded.source,
            },
        )
        await self._session.execute(stmt)

    async def get_many(self, token_ids: Iterable[str]) -> list[Token]:
        ids = [t.lower() for t in token_ids]
        if not ids:
            return []
        result = await self._session.execute(select(Token).where(Token.id.in_(ids)))
        return list(result.scalars().all())

    async def list_created_since(self, since_ts: int) -> list[Token]:
        """Tokens whose created_at (Unix seconds) is at or after since_ts, newest first."""
        result = await self._session.execute(
            select(Token).where(Token.created_at >= since_ts).order_by(Token.created_at.desc())
        )
        return list(result.scalars().all())

    async def set_holder_count(self, token_id: str, holder_count: int) -> bool:
        result = await self._session.execute(
            update(Token).where(Token.id == token_id.lower()).values(holder_count=holder_count)
        )
        return result.rowcount > 0
