from narrative_engine.engine.forward import compute_outcome

from tests.factories import on, series


def test_returns_at_horizons():
    closes = {d: 100.0 for d in range(1, 12)}
    closes[6] = 110.0
    closes[11] = 95.0
    out = compute_outcome(series(closes), on(1))
    assert out.anchor_close == 100.0
    assert out.return_5d == 10.0
    assert out.return_10d == -5.0
    assert out.usable


def test_short_coverage_gives_null_return():
    out = compute_outcome(series({d: 100.0 for d in range(1, 6)}), on(1))
    assert out.return_5d is None
    assert out.return_10d is None
    assert not out.usable


def test_five_day_only():
    closes = {d: 100.0 + d for d in range(1, 8)}
    out = compute_outcome(series(closes), on(1))
    assert out.return_5d == round((106.0 - 101.0) / 101.0 * 100, 2)
    assert out.return_10d is None
    assert out.usable


def test_anchor_rolls_forward_to_next_available_row():
    closes = {3: 100.0, 4: 90.0, 5: 95.0, 6: 99.0, 7: 101.0, 8: 102.0}
    out = compute_outcome(series(closes), on(1))
    assert out.anchor_close == 100.0
    assert out.return_5d == 2.0
    assert out.max_drawdown == -10.0


def test_no_anchor_close():
    out = compute_outcome(series({1: 100.0}), on(5))
    assert out.anchor_close is None
    assert out.returns == {5: None, 10: None}
    assert out.max_drawdown is None


def test_drawdown_window_and_floor():
    closes = {d: 100.0 + d for d in range(1, 20)}
    closes[15] = 50.0  # outside the 11-row window
    out = compute_outcome(series(closes), on(1))
    assert out.max_drawdown == 0.0
    assert compute_outcome(series({1: 100.0}), on(1)).max_drawdown is None


def test_drawdown_uses_lowest_close_in_window():
    closes = {1: 100.0, 2: 97.0, 3: 92.5, 4: 99.0}
    assert compute_outcome(series(closes), on(1)).max_drawdown == -7.5
