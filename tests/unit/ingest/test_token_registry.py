"""Tests for TokenRegistry."""

from unittest.mock import AsyncMock

from redis.exceptions import ResponseError

from tokenpulse.db.repos.token_repo import TokenRepo
from tokenpulse.domain.models import HolderBatch, HolderUpdate, TokenBatch, TokenRecord, TokenUpdate
from tokenpulse.ingest.token_registry import TokenRegistry

NOW = 1_700_000_000


def _batch(*updates: TokenUpdate, received: int | None = None) -> TokenBatch:
    return TokenBatch(received=received if received is not None else len(updates), records=list(updates))


class TestRegister:
    async def test_upserts_rows_and_prepends_records(self, session, snapshot_store):
        await snapshot_store.put_records([TokenRecord(id="0xold", symbol="OLD")])
        registry = TokenRegistry(session, snapshot_store)

        count = await registry.register(_batch(TokenUpdate(id="0xnew", symbol="NEW", created_at=5)), NOW)

        assert count == 1
        rows = await TokenRepo(session).get_many(["0xnew"])
        assert rows[0].symbol == "NEW"
        records = await snapshot_store.get_records()
        assert [r.id for r in records] == ["0xnew", "0xold"]

    async def test_existing_record_replaced_in_place(self, session, snapshot_store):
        await snapshot_store.put_records([
            TokenRecord(id="0xa", symbol="A1"),
            TokenRecord(id="0xb", symbol="B"),
        ])
        registry = TokenRegistry(session, snapshot_store)

        await registry.register(_batch(TokenUpdate(id="0xb", symbol="B2")), NOW)

        records = await snapshot_store.get_records()
        assert [(r.id, r.symbol) for r in records] == [("0xa", "A1"), ("0xb", "B2")]

    async def test_defaults_cached_but_not_stored(self, session, snapshot_store):
        await TokenRegistry(session, snapshot_store).register(_batch(TokenUpdate(id="0xa", symbol="A")), NOW)

        row = (await TokenRepo(session).get_many(["0xa"]))[0]
        assert row.name is None
        assert row.decimals is None
        assert row.created_at is None

        record = (await snapshot_store.get_records())[0]
        assert (record.name, record.decimals, record.created_at) == ("Unknown", 18, NOW)

    async def test_token_without_created_at_not_a_recent_launch(self, session, snapshot_store):
        await TokenRegistry(session, snapshot_store).register(_batch(TokenUpdate(id="0xa", symbol="A")), NOW)
        assert await TokenRepo(session).list_created_since(NOW - 3600) == []

    async def test_records_written_with_ttl(self, session, snapshot_store, fake_redis):
        await TokenRegistry(session, snapshot_store).register(_batch(TokenUpdate(id="0xa", symbol="A")), NOW)
        assert fake_redis.ttls["tokens:records"] == 172800

    async def test_reupsert_keeps_holder_count(self, session, snapshot_store):
        repo = TokenRepo(session)
        registry = TokenRegistry(session, snapshot_store)
        await registry.register(_batch(TokenUpdate(id="0xa", symbol="A")), NOW)
        await repo.set_holder_count("0xa", 7)

        await registry.register(_batch(TokenUpdate(id="0xa", symbol="A2")), NOW)

        rows = await repo.get_many(["0xa"])
        await session.refresh(rows[0])
        assert rows[0].symbol == "A2"
        assert rows[0].holder_count == 7

    async def test_cache_failure_does_not_fail_batch(self, session, snapshot_store, fake_redis):
        fake_redis.set = AsyncMock(side_effect=ResponseError("OOM command not allowed"))

        count = await TokenRegistry(session, snapshot_store).register(
            _batch(TokenUpdate(id="0xa", symbol="A"), received=2), NOW
        )

        assert count == 2
        assert len(await TokenRepo(session).get_many(["0xa"])) == 1


class TestUpdateHolders:
    async def test_known_and_unknown_tokens(self, session, snapshot_store):
        registry = TokenRegistry(session, snapshot_store)
        await registry.register(_batch(TokenUpdate(id="0xa", symbol="A")), NOW)

        count = await registry.update_holders(HolderBatch(received=2, records=[
            HolderUpdate(id="0xa", holder_count=12),
            HolderUpdate(id="0xmissing", holder_count=3),
        ]))

        assert count == 2
        rows = await TokenRepo(session).get_many(["0xa"])
        await session.refresh(rows[0])
        assert rows[0].holder_count == 12

    async def test_count_includes_invalid_records(self, session, snapshot_store):
        batch = HolderBatch(received=3, records=[HolderUpdate(id="0xa", holder_count=1)])
        assert await TokenRegistry(session, snapshot_store).update_holders(batch) == 3
