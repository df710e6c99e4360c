import datetime as dt

import pytest

from narrative_engine.engine.prices import PricePoint, PriceSeries

from tests.factories import on, points, series


def test_first_close_on_or_after_skips_gaps():
    s = series({1: 100.0, 4: 104.0, 5: 105.0})
    assert s.first_close_on_or_after(on(1)) == (on(1), 100.0)
    assert s.first_close_on_or_after(on(2)) == (on(4), 104.0)
    assert s.first_close_on_or_after(on(6)) is None


def test_forward_offset_counts_available_rows():
    s = series({1: 100.0, 2: 101.0, 5: 105.0, 9: 109.0})
    assert s.close_at_forward_offset(on(1), 0) == 100.0
    assert s.close_at_forward_offset(on(1), 2) == 105.0
    assert s.close_at_forward_offset(on(3), 1) == 109.0
    assert s.close_at_forward_offset(on(1), 4) is None


def test_arbitrary_input_order_and_duplicates():
    pts = points({3: 103.0, 1: 100.0, 2: 102.0})
    pts.append(PricePoint(date=on(2), close=202.0))
    s = PriceSeries(reversed(pts))
    assert len(s) == 3
    assert s.closes_from(on(1), 5) == [100.0, 102.0, 103.0]


def test_closes_from_window():
    s = series({d: 100.0 + d for d in range(1, 8)})
    assert s.closes_from(on(3), 3) == [103.0, 104.0, 105.0]
    assert s.closes_from(on(30), 3) == []


def test_negative_offset_rejected():
    with pytest.raises(ValueError):
        series({1: 100.0}).close_at_forward_offset(on(1), -1)


@pytest.mark.parametrize("close", [0, -5.0])
def test_non_positive_close_rejected(close):
    with pytest.raises(ValueError, match="close must be positive"):
        PricePoint(date=dt.date(2026, 1, 5), close=close)


def test_datetime_date_rejected():
    with pytest.raises(ValueError, match="must be a date"):
        PricePoint(date=dt.datetime(2026, 1, 5, 16, 0), close=100.0)
