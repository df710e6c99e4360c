from __future__ import annotations

import math
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from narrative_engine import config
from narrative_engine.engine.forward import EpisodeOutcome
from narrative_engine.engine.ranking import RankedNarrative
from narrative_engine.schemas.outcomes import HistoricalOutcomes, NarrativeOutcome
from narrative_engine.utils.timebox import days_since, round_half_up

_LN2 = math.log(2.0)


def recency_weight(start: datetime, now: datetime, half_life_days: float = config.RECENCY_HALF_LIFE_DAYS) -> float:
    return math.exp(-_LN2 * days_since(start, now) / half_life_days)


def weighted_mean(pairs: Sequence[Tuple[datetime, float]], now: datetime) -> Optional[float]:
    """Recency-weighted mean of (episode start, return) pairs; None when empty."""
    total_w = 0.0
    acc = 0.0
    for start, value in pairs:
        w = recency_weight(start, now)
        acc += value * w
        total_w += w
    if not pairs or total_w <= 0:
        return None
    return round_half_up(acc / total_w, 2)


def percentiles(values: Sequence[float]) -> Tuple[Optional[float], Optional[float], Optional[float]]:
    """(median, p25, p75) over the unweighted values, nearest-rank for the quartiles."""
    if not values:
        return None, None, None
    xs = sorted(values)
    n = len(xs)
    if n % 2:
        median = xs[n // 2]
    else:
        median = (xs[n // 2 - 1] + xs[n // 2]) / 2
    p25 = xs[int(math.floor(n * 0.25))]
    p75 = xs[int(math.floor(n * 0.75))]
    return round_half_up(median, 2), round_half_up(p25, 2), round_half_up(p75, 2)


def win_rate(values: Sequence[float]) -> Optional[int]:
    if not values:
        return None
    wins = sum(1 for v in values if v > 0)
    return int(round_half_up(100.0 * wins / len(values)))


def confidence_label(count: int) -> str:
    if count < 5:
        return "experimental"
    if count < 10:
        return "moderate"
    return "high"


def confidence_score(count: int, p25: Optional[float], p75: Optional[float]) -> float:
    sample = 0.2 if count < 5 else 0.5 if count < 10 else 0.8
    iqr = (p75 - p25) if (p25 is not None and p75 is not None) else 0.0
    penalty = min(abs(iqr) / 40.0, 0.3)
    return max(0.1, round_half_up(sample - penalty, 2))


def aggregate(ranked: RankedNarrative, outcomes: Sequence[EpisodeOutcome], now: datetime) -> NarrativeOutcome:
    """Reduce a narrative's usable episode outcomes to its persisted summary."""
    usable = [o for o in outcomes if o.usable]
    r5: List[Tuple[datetime, float]] = []
    r10: List[Tuple[datetime, float]] = []
    for o in usable:
        start = o.episode_start or datetime.combine(o.anchor_date, datetime.min.time())
        if o.return_5d is not None:
            r5.append((start, o.return_5d))
        if o.return_10d is not None:
            r10.append((start, o.return_10d))
    drawdowns = [o.max_drawdown_10d for o in usable if o.max_drawdown_10d is not None]

    ten_day = [v for _, v in r10]
    median, p25, p75 = percentiles(ten_day)
    count = len(usable)

    stats = HistoricalOutcomes(
        episode_count=count,
        avg_price_move_5d=weighted_mean(r5, now),
        avg_price_move_10d=weighted_mean(r10, now),
        median_price_move_10d=median,
        p25_price_move_10d=p25,
        p75_price_move_10d=p75,
        win_rate_5d=win_rate([v for _, v in r5]),
        win_rate_10d=win_rate(ten_day),
        max_drawdown_avg=round_half_up(sum(drawdowns) / len(drawdowns), 2) if drawdowns else None,
    )
    n = ranked.narrative
    return NarrativeOutcome(
        narrative_id=n.narrative_id,
        label=n.label,
        current_prevalence_pct=n.prevalence_pct,
        dominant_emotion=n.dominant_emotion,
        persistence=ranked.persistence.value,
        historical_outcomes=stats,
        confidence=confidence_score(count, p25, p75),
        confidence_label=confidence_label(count),
    )
