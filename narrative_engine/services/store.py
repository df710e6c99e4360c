from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from narrative_engine.db.models import PriceHistory, PsychologySnapshot, Watchlist
from narrative_engine.engine.prices import PricePoint
from narrative_engine.engine.snapshot import Snapshot, normalize_snapshot


class SnapshotNotFound(LookupError):
    pass


class SnapshotStore:
    """Reads snapshots/prices and writes narrative outcomes.

    Each call opens its own session so concurrent symbols never share one.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]):
        self._sessionmaker = sessionmaker

    async def load_snapshots(
        self,
        symbol: str,
        since: dt.datetime,
        period_types: Optional[Sequence[str]] = None,
    ) -> List[Snapshot]:
        stmt = (
            select(PsychologySnapshot)
            .where(PsychologySnapshot.symbol == symbol)
            .where(PsychologySnapshot.snapshot_start >= since)
            .order_by(PsychologySnapshot.snapshot_start.asc(), PsychologySnapshot.id.asc())
        )
        if period_types:
            stmt = stmt.where(PsychologySnapshot.period_type.in_(list(period_types)))
        async with self._sessionmaker() as s:
            rows = (await s.execute(stmt)).scalars().all()
        return [normalize_snapshot(r) for r in rows]

    async def load_prices(self, symbol: str) -> List[PricePoint]:
        stmt = (
            select(PriceHistory.date, PriceHistory.close)
            .where(PriceHistory.symbol == symbol)
            .order_by(PriceHistory.date.asc())
        )
        async with self._sessionmaker() as s:
            rows = (await s.execute(stmt)).all()
        return [PricePoint(date=d, close=float(c)) for d, c in rows]

    async def write_outcomes(self, snapshot_id: int, outcomes: List[Dict[str, Any]]) -> None:
        stmt = (
            update(PsychologySnapshot)
            .where(PsychologySnapshot.id == snapshot_id)
            .values(narrative_outcomes=outcomes)
        )
        async with self._sessionmaker() as s:
            res = await s.execute(stmt)
            if res.rowcount == 0:
                await s.rollback()
                raise SnapshotNotFound(f"Snapshot {snapshot_id} not found")
            await s.commit()

    async def latest_snapshot_row(self, symbol: str) -> Optional[PsychologySnapshot]:
        stmt = (
            select(PsychologySnapshot)
            .where(PsychologySnapshot.symbol == symbol)
            .order_by(PsychologySnapshot.snapshot_start.desc(), PsychologySnapshot.id.desc())
            .limit(1)
        )
        async with self._sessionmaker() as s:
            return (await s.execute(stmt)).scalars().first()

    async def latest_outcomes(self, symbol: str) -> Optional[PsychologySnapshot]:
        """Newest snapshot carrying computed outcomes, else the newest snapshot.

        Outcomes live on the latest daily/hourly row of the working window, so
        a newer row of another period type must not hide them.
        """
        stmt = (
            select(PsychologySnapshot)
            .where(PsychologySnapshot.symbol == symbol)
            .where(func.json_array_length(PsychologySnapshot.narrative_outcomes) > 0)
            .order_by(PsychologySnapshot.snapshot_start.desc(), PsychologySnapshot.id.desc())
            .limit(1)
        )
        async with self._sessionmaker() as s:
            row = (await s.execute(stmt)).scalars().first()
        if row is not None:
            return row
        return await self.latest_snapshot_row(symbol)

    async def watchlist_symbols(self) -> List[str]:
        async with self._sessionmaker() as s:
            rows = (await s.execute(select(Watchlist.symbols))).scalars().all()
        out: List[str] = []
        for symbols in rows:
            out.extend(str(sym) for sym in (symbols or []))
        return out
