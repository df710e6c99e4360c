from __future__ import annotations

import math
from datetime import date, datetime, timezone


def as_utc(ts: datetime) -> datetime:
    """Return ``ts`` as an aware UTC datetime; naive values are taken as UTC."""

    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def trading_date(ts: datetime) -> date:
    """Calendar date (UTC) of a snapshot timestamp."""

    return as_utc(ts).date()


def days_since(ts: datetime, now: datetime) -> float:
    """Fractional days elapsed from ``ts`` to ``now``."""

    return (as_utc(now) - as_utc(ts)).total_seconds() / 86400.0


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties going up (``round`` uses banker's rounding)."""

    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor
