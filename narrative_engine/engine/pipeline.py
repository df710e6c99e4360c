from __future__ import annotations

from datetime import datetime
from typing import Sequence, Tuple

from narrative_engine import config
from narrative_engine.engine.aggregate import aggregate
from narrative_engine.engine.episodes import detect_episodes
from narrative_engine.engine.forward import compute_outcome
from narrative_engine.engine.prices import PriceSeries
from narrative_engine.engine.ranking import rank_narratives
from narrative_engine.engine.snapshot import Snapshot
from narrative_engine.schemas.outcomes import NarrativeOutcome


def compute_symbol_outcomes(
    snapshots: Sequence[Snapshot],
    prices: PriceSeries,
    now: datetime,
    top_n: int = config.TOP_N_NARRATIVES,
) -> Tuple[NarrativeOutcome, ...]:
    """One outcome per ranked narrative of the latest snapshot.

    Narratives without closed episodes are still reported (zero count,
    experimental confidence).
    """
    if not snapshots:
        return ()
    ordered = sorted(snapshots, key=lambda s: s.observed_at)
    latest = ordered[-1]

    results = []
    for ranked in rank_narratives(latest, top_n=top_n):
        episodes = detect_episodes(ordered, ranked.narrative.narrative_id)
        outcomes = [
            compute_outcome(prices, ep.start_date, episode_start=ep.started_at)
            for ep in episodes
        ]
        results.append(aggregate(ranked, [o for o in outcomes if o.usable], now))
    return tuple(results)
