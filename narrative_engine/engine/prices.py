from __future__ import annotations

import bisect
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class PricePoint:
    date: date
    close: float

    def __post_init__(self) -> None:
        # datetime is a date subclass but does not compare with date anchors
        if not isinstance(self.date, date) or isinstance(self.date, datetime):
            raise ValueError(f"PricePoint.date must be a date, got {type(self.date).__name__}")
        if not self.close or self.close <= 0:
            raise ValueError(f"close must be positive ({self.date.isoformat()}: {self.close})")


class PriceSeries:
    """Daily closes for one symbol, indexed by available date.

    Offsets count rows present in the series, not market sessions: a gap in
    the stored history stretches an "N-day" window in calendar time.
    """

    def __init__(self, points: Iterable[PricePoint]):
        by_date: Dict[date, float] = {}
        for p in points:
            by_date[p.date] = float(p.close)  # later duplicates win
        self._dates: List[date] = sorted(by_date)
        self._closes: List[float] = [by_date[d] for d in self._dates]

    def __len__(self) -> int:
        return len(self._dates)

    def _start(self, anchor_date: date) -> int:
        return bisect.bisect_left(self._dates, anchor_date)

    def first_close_on_or_after(self, anchor_date: date) -> Optional[Tuple[date, float]]:
        i = self._start(anchor_date)
        if i >= len(self._dates):
            return None
        return self._dates[i], self._closes[i]

    def close_at_forward_offset(self, anchor_date: date, n: int) -> Optional[float]:
        if n < 0:
            raise ValueError("offset must be >= 0")
        i = self._start(anchor_date) + n
        if i >= len(self._closes):
            return None
        return self._closes[i]

    def closes_from(self, anchor_date: date, count: int) -> List[float]:
        """Up to ``count`` closes starting at the first date on/after ``anchor_date``."""
        i = self._start(anchor_date)
        return self._closes[i : i + max(0, count)]
