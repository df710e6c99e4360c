from __future__ import annotations

import asyncio
import datetime as dt
from typing import Iterable, List, Optional, Sequence

from narrative_engine import config
from narrative_engine.engine.pipeline import compute_symbol_outcomes
from narrative_engine.engine.prices import PriceSeries
from narrative_engine.obs import log_event, new_run_id
from narrative_engine.schemas.outcomes import BatchSummary, SymbolResult
from narrative_engine.services.store import SnapshotStore


def _now_utc() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def normalize_symbols(symbols: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for raw in symbols:
        sym = (raw or "").strip().upper()
        if sym and sym not in seen:
            seen.add(sym)
            out.append(sym)
    return out


class OutcomeBatch:
    """Compute and persist narrative outcomes for a set of symbols.

    Symbols are independent: each one loads its own data, runs the pure
    pipeline and writes a single row. Failures are recorded per symbol and
    never abort the batch.
    """

    def __init__(
        self,
        store: SnapshotStore,
        concurrency: int = config.OUTCOMES_CONCURRENCY,
        lookback_days: int = config.LOOKBACK_DAYS,
        period_types: Sequence[str] = config.SNAPSHOT_PERIOD_TYPES,
        top_n: int = config.TOP_N_NARRATIVES,
    ):
        self.store = store
        self.concurrency = max(1, int(concurrency))
        self.lookback_days = lookback_days
        self.period_types = tuple(period_types)
        self.top_n = top_n

    async def run(self, symbols: Optional[Sequence[str]] = None, now: Optional[dt.datetime] = None) -> BatchSummary:
        new_run_id()
        universe = normalize_symbols(symbols or [])
        if not universe:
            universe = normalize_symbols(await self.store.watchlist_symbols())
        if not universe:
            log_event("outcomes.batch_empty")
            return BatchSummary(message="No symbols to process")

        now = now or _now_utc()
        log_event("outcomes.batch_start", symbols=universe, concurrency=self.concurrency)

        sem = asyncio.Semaphore(self.concurrency)

        async def _guarded(symbol: str) -> SymbolResult:
            async with sem:
                return await self._process_symbol(symbol, now)

        results = list(await asyncio.gather(*(_guarded(s) for s in universe)))
        summary = BatchSummary(
            processed=len(results),
            successful=sum(1 for r in results if r.success),
            total_outcomes=sum(r.outcomes_count for r in results),
            results=results,
        )
        log_event(
            "outcomes.batch_done",
            processed=summary.processed,
            successful=summary.successful,
            total_outcomes=summary.total_outcomes,
        )
        return summary

    async def _process_symbol(self, symbol: str, now: dt.datetime) -> SymbolResult:
        computed = 0
        try:
            since = now - dt.timedelta(days=self.lookback_days)
            snapshots = await self.store.load_snapshots(symbol, since, self.period_types)
            if not snapshots:
                log_event("outcomes.symbol_no_snapshots", symbol=symbol)
                return SymbolResult(symbol=symbol, success=True, outcomes_count=0)

            points = await self.store.load_prices(symbol)
            if not points:
                log_event("outcomes.symbol_no_prices", symbol=symbol)
                return SymbolResult(symbol=symbol, success=False, outcomes_count=0, error="No price history")

            latest = snapshots[-1]
            if not latest.narratives:
                log_event("outcomes.symbol_no_narratives", symbol=symbol)
                return SymbolResult(symbol=symbol, success=True, outcomes_count=0)

            outcomes = compute_symbol_outcomes(snapshots, PriceSeries(points), now, top_n=self.top_n)
            computed = len(outcomes)
            await self.store.write_outcomes(
                latest.snapshot_id,
                [o.model_dump(mode="json") for o in outcomes],
            )
            log_event("outcomes.symbol_done", symbol=symbol, outcomes=computed, snapshots=len(snapshots))
            return SymbolResult(symbol=symbol, success=True, outcomes_count=computed)
        except Exception as exc:
            log_event("outcomes.symbol_failed", level="error", symbol=symbol, error=str(exc), kind=type(exc).__name__)
            return SymbolResult(symbol=symbol, success=False, outcomes_count=computed, error=str(exc) or type(exc).__name__)
