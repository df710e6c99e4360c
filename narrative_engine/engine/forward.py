from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, Optional, Sequence

from narrative_engine import config
from narrative_engine.engine.prices import PriceSeries
from narrative_engine.utils.timebox import round_half_up


def _pct(later: float, base: float) -> float:
    return round_half_up((later - base) / base * 100.0, 2)


@dataclass(frozen=True)
class EpisodeOutcome:
    episode_start: Optional[datetime]
    anchor_date: date
    anchor_close: Optional[float]
    returns: Dict[int, Optional[float]] = field(default_factory=dict)
    max_drawdown: Optional[float] = None

    @property
    def return_5d(self) -> Optional[float]:
        return self.returns.get(5)

    @property
    def return_10d(self) -> Optional[float]:
        return self.returns.get(10)

    @property
    def max_drawdown_10d(self) -> Optional[float]:
        return self.max_drawdown

    @property
    def usable(self) -> bool:
        return any(r is not None for r in self.returns.values())


def compute_outcome(
    prices: PriceSeries,
    anchor_date: date,
    horizons: Sequence[int] = config.RETURN_HORIZONS,
    drawdown_window: int = config.DRAWDOWN_WINDOW,
    episode_start: Optional[datetime] = None,
) -> EpisodeOutcome:
    """Forward returns and max drawdown measured from the anchor close.

    Returns are in percent, two decimals. The drawdown is the lowest close in
    the first ``drawdown_window + 1`` rows (anchor included) relative to the
    anchor, so it is never positive.
    """
    anchor_close = prices.close_at_forward_offset(anchor_date, 0)
    if anchor_close is None:
        return EpisodeOutcome(
            episode_start=episode_start,
            anchor_date=anchor_date,
            anchor_close=None,
            returns={h: None for h in horizons},
        )

    returns: Dict[int, Optional[float]] = {}
    for h in horizons:
        future = prices.close_at_forward_offset(anchor_date, h)
        returns[h] = _pct(future, anchor_close) if future is not None else None

    window = prices.closes_from(anchor_date, drawdown_window + 1)
    drawdown = _pct(min(window), anchor_close) if len(window) >= 2 else None

    return EpisodeOutcome(
        episode_start=episode_start,
        anchor_date=anchor_date,
        anchor_close=anchor_close,
        returns=returns,
        max_drawdown=drawdown,
    )
