"""Dense hourly series from sparse bucket rows — pure functions, no I/O.

Slot offsets are 1-based hours back from the current hour: offset ``i``
holds bucket ``now_hour - i``. Results are always total over
``{"1h", ..., f"{points}h"}``.
"""

from decimal import Decimal
from typing import Iterable, Mapping, Optional

from tokenpulse.domain.models import DEFAULT_DECIMALS, BucketPoint

Number = Decimal | float | int

VOLUME_SCALE = Decimal(10) ** 6


def _index(rows: Iterable[BucketPoint]) -> dict[str, dict[int, Decimal]]:
    raw: dict[str, dict[int, Decimal]] = {}
    for r in rows:
        raw.setdefault(r.token_id.lower(), {})[r.hour_bucket] = r.value
    return raw


def fill_slots(slots: list[Optional[Number]], fallback: Number = 0) -> list[Number]:
    """Carry-then-forward gap fill over slots ordered newest (index 0) to oldest.

    1. Walk oldest -> newest carrying the last value seen into unset slots.
    2. Walk newest -> oldest; the first known value seeds "last known" and
       every unset slot inherits it.
    3. With no known value at all every slot becomes ``fallback``.

    Pass 1 runs first, so an unset slot between two known values takes the
    older neighbour.
    """
    buffer = list(slots)
    points = len(buffer)

    carry: Optional[Number] = None
    for i in range(points - 1, -1, -1):
        if buffer[i] is not None:
            carry = buffer[i]
        elif carry is not None:
            buffer[i] = carry

    last_known = next((v for v in buffer if v is not None), None)
    if last_known is None:
        return [fallback] * points

    for i in range(points):
        if buffer[i] is None:
            buffer[i] = last_known
        else:
            last_known = buffer[i]
    return buffer  # type: ignore[return-value]


def build_history(
    now_hour: int,
    rows: Iterable[BucketPoint],
    token_ids: Iterable[str],
    points: int = 48,
    fallback: Optional[Mapping[str, Number]] = None,
) -> dict[str, dict[str, Number]]:
    """Gap-filled price series per token, keyed ``"1h"`` (most recent) .. ``f"{points}h"``."""
    raw = _index(rows)
    fallback = fallback or {}

    result: dict[str, dict[str, Number]] = {}
    for token_id in token_ids:
        known = raw.get(token_id.lower(), {})
        slots = [known.get(now_hour - i) for i in range(1, points + 1)]
        filled = fill_slots(slots, fallback.get(token_id, 0))
        result[token_id] = {f"{i}h": filled[i - 1] for i in range(1, points + 1)}
    return result


def build_volume_history(
    now_hour: int,
    rows: Iterable[BucketPoint],
    token_ids: Iterable[str],
    points: int = 48,
) -> dict[str, dict[str, Number]]:
    """Per-hour volume per token; hours without trades are 0, never filled."""
    raw = _index(rows)
    result: dict[str, dict[str, Number]] = {}
    for token_id in token_ids:
        known = raw.get(token_id.lower(), {})
        result[token_id] = {f"{i}h": known.get(now_hour - i, 0) for i in range(1, points + 1)}
    return result


def latest_prices(rows: Iterable[BucketPoint]) -> dict[str, Decimal]:
    """Price at the newest bucket per token."""
    newest: dict[str, tuple[int, Decimal]] = {}
    for r in rows:
        token_id = r.token_id.lower()
        seen = newest.get(token_id)
        if seen is None or r.hour_bucket > seen[0]:
            newest[token_id] = (r.hour_bucket, r.value)
    return {token_id: price for token_id, (_, price) in newest.items()}


def normalize_price(raw: Optional[Number], decimals: Optional[int] = DEFAULT_DECIMALS) -> float:
    """Display price: ``raw / 10 ** (18 - (decimals - 6))``.

    Fixed calibration of an 18-decimal USD-scaled source value to a
    6-decimal display convention; not a generic decimal shift.
    """
    if raw is None:
        return 0.0
    if decimals is None:
        decimals = DEFAULT_DECIMALS
    adjustment = 18 - (decimals - 6)
    return float(Decimal(str(raw)) / (Decimal(10) ** adjustment))


def normalize_volume(raw: Optional[Number]) -> float:
    if raw is None:
        return 0.0
    return float(Decimal(str(raw)) / VOLUME_SCALE)
