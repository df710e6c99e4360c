import asyncio
import dataclasses
import datetime as dt

from narrative_engine.db.models import Watchlist
from narrative_engine.services.outcomes import OutcomeBatch, normalize_symbols

from tests.factories import NOW, points, ramp, seed, snapshot, snapshot_row, sqlite_store

SCENARIO = [40, 35, 30, 5, 5]


def _rows(symbol="TEST", values=SCENARIO, **kw):
    return [snapshot_row(i + 1, {"x": v}, symbol=symbol, **kw) for i, v in enumerate(values)]


def _run(tmp_path, snapshots=(), prices=None, symbols=("TEST",), extra=None):
    async def scenario():
        engine, store = await sqlite_store(tmp_path)
        try:
            await seed(engine, snapshots, prices)
            if extra:
                await extra(engine)
            summary = await OutcomeBatch(store).run(list(symbols), now=NOW)
            rows = {s: await store.latest_snapshot_row(s) for s in ("TEST", "BAD", "MSFT")}
        finally:
            await engine.dispose()
        return summary, rows

    return asyncio.run(scenario())


def test_normalize_symbols():
    assert normalize_symbols([" aapl", "AAPL", "", "msft "]) == ["AAPL", "MSFT"]


def test_end_to_end_persists_outcomes(tmp_path):
    summary, rows = _run(tmp_path, _rows(), ramp(), symbols=["test"])
    assert summary.processed == 1
    assert summary.successful == 1
    assert summary.total_outcomes == 1
    assert summary.results[0].model_dump(exclude_none=True) == {"symbol": "TEST", "success": True, "outcomes_count": 1}

    (stored,) = rows["TEST"].narrative_outcomes
    assert stored["narrative_id"] == "x"
    assert stored["historical_outcomes"]["episode_count"] == 1
    assert stored["historical_outcomes"]["avg_price_move_5d"] == 6.0
    assert stored["historical_outcomes"]["avg_price_move_10d"] == 12.0
    assert stored["confidence_label"] == "experimental"


def test_rerun_is_identical(tmp_path):
    rows = _rows() + _rows(values=[0, 0, 0, 0, 0, 50, 45, 10, 10, 30, 35])
    for r in rows[5:]:
        r["snapshot_start"] += dt.timedelta(days=5)

    async def scenario():
        engine, store = await sqlite_store(tmp_path)
        stored = []
        try:
            await seed(engine, rows, ramp(days=25))
            for _ in range(2):
                summary = await OutcomeBatch(store).run(["TEST"], now=NOW)
                stored.append((summary, (await store.latest_snapshot_row("TEST")).narrative_outcomes))
        finally:
            await engine.dispose()
        return stored

    (s1, first), (s2, second) = asyncio.run(scenario())
    assert s1 == s2
    assert first == second
    assert first[0]["historical_outcomes"]["episode_count"] == 2


def test_no_snapshots_is_success(tmp_path):
    summary, _ = _run(tmp_path, [], ramp())
    assert summary.results[0].success is True
    assert summary.results[0].outcomes_count == 0


def test_no_prices_is_isolated_failure(tmp_path):
    summary, rows = _run(tmp_path, _rows(), None)
    res = summary.results[0]
    assert res.success is False
    assert res.error == "No price history"
    assert rows["TEST"].narrative_outcomes == []


def test_latest_without_narratives_is_success(tmp_path):
    snaps = _rows() + [snapshot_row(6, {})]
    summary, _ = _run(tmp_path, snaps, ramp())
    assert summary.results[0].success is True
    assert summary.total_outcomes == 0


def test_malformed_symbol_does_not_abort_batch(tmp_path):
    bad = snapshot_row(1, {"x": 40}, symbol="BAD")
    bad["observed_state"] = {"narratives": "garbled"}

    async def bad_prices(engine):
        await seed(engine, prices={1: 10.0}, symbol="BAD")

    summary, rows = _run(tmp_path, _rows() + [bad], ramp(), symbols=["BAD", "TEST"], extra=bad_prices)
    assert [r.symbol for r in summary.results] == ["BAD", "TEST"]
    assert summary.results[0].success is False
    assert "narratives must be a list" in summary.results[0].error
    assert summary.results[1].success is True
    assert summary.successful == 1


def test_snapshots_outside_window_or_period_are_ignored(tmp_path):
    old = snapshot_row(1, {"x": 99})
    old["snapshot_start"] = NOW - dt.timedelta(days=400)
    weekly = snapshot_row(6, {"x": 99}, period_type="weekly")
    summary, rows = _run(tmp_path, [old] + _rows() + [weekly], ramp())
    assert summary.results[0].outcomes_count == 1
    # the weekly row is newer but not part of the working window
    assert rows["TEST"].period_type == "weekly"
    assert rows["TEST"].narrative_outcomes == []


def test_watchlist_fallback(tmp_path):
    async def watchlists(engine):
        from sqlalchemy.ext.asyncio import async_sessionmaker

        async with async_sessionmaker(engine)() as s:
            s.add_all([Watchlist(name="a", symbols=["test", "msft"]), Watchlist(name="b", symbols=["TEST"])])
            await s.commit()

    summary, _ = _run(tmp_path, _rows(), ramp(), symbols=(), extra=watchlists)
    assert [r.symbol for r in summary.results] == ["TEST", "MSFT"]
    assert summary.results[1].outcomes_count == 0


def test_empty_universe(tmp_path):
    summary, _ = _run(tmp_path, symbols=())
    assert summary.processed == 0
    assert summary.message == "No symbols to process"


class FakeStore:
    def __init__(self, fail_write=False):
        self.active = 0
        self.peak = 0
        self.fail_write = fail_write
        self.writes = {}

    async def load_snapshots(self, symbol, since, period_types):
        self.active += 1
        self.peak = max(self.peak, self.active)
        await asyncio.sleep(0.01)
        self.active -= 1
        snaps = [snapshot(i + 1, {"x": v}, symbol=symbol) for i, v in enumerate(SCENARIO)]
        return [dataclasses.replace(s, snapshot_id=i) for i, s in enumerate(snaps)]

    async def load_prices(self, symbol):
        return points(ramp())

    async def write_outcomes(self, snapshot_id, outcomes):
        if self.fail_write:
            raise RuntimeError("write refused")
        self.writes[snapshot_id] = outcomes

    async def watchlist_symbols(self):
        return []


def test_concurrency_is_bounded():
    store = FakeStore()
    summary = asyncio.run(OutcomeBatch(store, concurrency=2).run([f"S{i}" for i in range(6)], now=NOW))
    assert summary.successful == 6
    assert store.peak == 2


def test_write_failure_keeps_computed_count():
    summary = asyncio.run(OutcomeBatch(FakeStore(fail_write=True)).run(["TEST"], now=NOW))
    res = summary.results[0]
    assert res.success is False
    assert res.error == "write refused"
    assert res.outcomes_count == 1
