from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

from narrative_engine import config
from narrative_engine.engine.snapshot import Snapshot


@dataclass(frozen=True)
class Episode:
    narrative_id: str
    started_at: datetime
    start_date: date  # anchor: first threshold crossing
    end_date: date  # last snapshot still at/above threshold
    peak_prevalence: float
    snapshot_count: int


def detect_episodes(
    snapshots: Sequence[Snapshot],
    narrative_id: str,
    threshold: float = config.PREVALENCE_THRESHOLD,
    exit_after: int = config.CONSECUTIVE_BELOW_TO_END,
) -> Tuple[Episode, ...]:
    """Closed dominance episodes for one narrative.

    Two states: inactive until prevalence reaches ``threshold``; active until
    ``exit_after`` consecutive snapshots fall below it. A shorter dip keeps the
    episode open. An episode still open at the end of the sequence is dropped,
    since it has no forward outcome yet.
    """
    ordered = sorted(snapshots, key=lambda s: s.observed_at)
    closed: List[Episode] = []
    current: Optional[Episode] = None
    below = 0

    for snap in ordered:
        prevalence = snap.prevalence(narrative_id)
        if prevalence >= threshold:
            below = 0
            if current is None:
                current = Episode(
                    narrative_id=narrative_id,
                    started_at=snap.observed_at,
                    start_date=snap.observed_on,
                    end_date=snap.observed_on,
                    peak_prevalence=prevalence,
                    snapshot_count=1,
                )
            else:
                current = replace(
                    current,
                    end_date=snap.observed_on,
                    peak_prevalence=max(current.peak_prevalence, prevalence),
                    snapshot_count=current.snapshot_count + 1,
                )
            continue

        if current is None:
            continue
        below += 1
        if below >= exit_after:
            closed.append(current)
            current = None
            below = 0

    return tuple(closed)
