"""Tests for webhook body decoding."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from tokenpulse.api.schemas.webhook import (
    PayloadError,
    classify_body,
    decode_holders,
    decode_prices,
    decode_swaps,
    decode_tokens,
    to_unix_seconds,
)

NOW = 1_700_000_000


def _swap(**overrides) -> dict:
    body = {
        "id": "0xtx-1",
        "timestamp": NOW,
        "pair": "0xPOOL",
        "token0": "0xAAA",
        "token1": "0xBBB",
        "amount_usd": "100.5",
        "amount_native": "0.03",
        "source": "uniswap",
    }
    body.update(overrides)
    return body


class TestToUnixSeconds:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (NOW, NOW),
            (NOW * 1000, NOW),
            (float(NOW) + 0.7, NOW),
            (str(NOW), NOW),
            (str(NOW * 1000), NOW),
            ("2023-11-14T22:13:20+00:00", NOW),
            ("2023-11-14T22:13:20", NOW),
            (datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc), NOW),
            (Decimal(NOW), NOW),
        ],
    )
    def test_accepted_forms(self, value, expected):
        assert to_unix_seconds(value) == expected

    @pytest.mark.parametrize("value", [-5, "not a date", "Infinity", True, None, [NOW]])
    def test_rejected_forms(self, value):
        with pytest.raises(ValueError):
            to_unix_seconds(value)


class TestClassifyBody:
    def test_shapes(self):
        assert classify_body([{"id": "x"}], "tokens") == "list"
        assert classify_body({"tokens": []}, "tokens") == "envelope_list"
        assert classify_body({"tokens": {"id": "x"}}, "tokens") == "envelope_record"
        assert classify_body({"id": "x"}, "tokens") == "record"

    @pytest.mark.parametrize("body", [None, "text", 42, {}, {"tokens": "x"}, {"id": ""}])
    def test_invalid_shapes(self, body):
        with pytest.raises(PayloadError):
            classify_body(body, "tokens")


class TestDecodePrices:
    def test_valid_records(self):
        batch = decode_prices({"prices": [
            {"timestamp": NOW, "token": "0xAbC", "price_usd": "18000000000000000000"},
        ]})
        assert batch.received == 1
        obs = batch.records[0]
        assert obs.token_id == "0xabc"
        assert obs.timestamp == NOW
        assert obs.price_usd == Decimal("18000000000000000000")

    def test_invalid_record_skipped_but_counted(self):
        batch = decode_prices([
            {"timestamp": NOW, "token": "0xa", "price_usd": "1"},
            {"timestamp": "garbage", "token": "0xb", "price_usd": "1"},
            {"token": "0xc"},
        ])
        assert batch.received == 3
        assert [r.token_id for r in batch.records] == ["0xa"]


class TestDecodeSwaps:
    def test_normalizes_swap(self):
        batch = decode_swaps({"swaps": [_swap(token_0_amount=123, token_1_amount="-45")]})

        swap = batch.records[0]
        assert swap.pair == "0xpool"
        assert (swap.token0, swap.token1) == ("0xaaa", "0xbbb")
        assert swap.amount_usd == Decimal("100.5")
        assert swap.token_0_amount == "123"
        assert swap.source == "uniswap"

    def test_underscore_token_aliases(self):
        body = _swap()
        body["token_0"] = body.pop("token0")
        body["token_1"] = body.pop("token1")
        swap = decode_swaps([body]).records[0]
        assert (swap.token0, swap.token1) == ("0xaaa", "0xbbb")

    def test_missing_source_is_unknown(self):
        body = _swap()
        del body["source"]
        assert decode_swaps([body]).records[0].source == "unknown"

    def test_empty_amounts_are_zero(self):
        swap = decode_swaps([_swap(amount_usd="", amount_native=None)]).records[0]
        assert swap.amount_usd == Decimal(0)
        assert swap.amount_native == Decimal(0)

    def test_millisecond_timestamp(self):
        assert decode_swaps([_swap(timestamp=NOW * 1000)]).records[0].timestamp == NOW

    def test_rejects_body_without_swaps(self):
        with pytest.raises(PayloadError):
            decode_swaps({"data": []})


class TestDecodeTokens:
    def test_absent_fields_stay_unset(self):
        batch = decode_tokens({"tokens": {"id": "0xAAA", "symbol": "AAA"}})

        update = batch.records[0]
        assert update.id == "0xaaa"
        assert update.name is None
        assert update.decimals is None
        assert update.created_at is None

    def test_defaults_only_on_cached_record(self):
        update = decode_tokens({"id": "0xa", "symbol": "A"}).records[0]

        record = update.to_record(NOW)
        assert (record.name, record.symbol, record.decimals, record.created_at) == ("Unknown", "A", 18, NOW)

    def test_bare_record(self):
        batch = decode_tokens({"id": "0xa", "symbol": "A", "decimals": 6, "created_at": 5, "pool": "0xP"})
        update = batch.records[0]
        assert (update.decimals, update.created_at, update.pool) == (6, 5, "0xp")
        assert update.to_record(NOW).created_at == 5

    def test_missing_symbol_skipped(self):
        batch = decode_tokens([{"id": "0xa"}, {"id": "0xb", "symbol": "B"}])
        assert batch.received == 2
        assert [r.id for r in batch.records] == ["0xb"]


class TestDecodeHolders:
    def test_camel_case_count(self):
        batch = decode_holders({"id": "0xA", "holderCount": 12})
        assert batch.received == 1
        assert batch.records[0].id == "0xa"
        assert batch.records[0].holder_count == 12

    def test_invalid_record_skipped_but_counted(self):
        batch = decode_holders([{"id": "0xA", "holderCount": 3}, {"id": "0xB"}])
        assert batch.received == 2
        assert [u.id for u in batch.records] == ["0xa"]
