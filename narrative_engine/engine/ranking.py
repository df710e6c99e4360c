from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from narrative_engine import config
from narrative_engine.engine.snapshot import Narrative, Persistence, Snapshot

# Unrecognized classifications rank like emerging ones
_WEIGHTS = {
    Persistence.STRUCTURAL: config.PERSISTENCE_WEIGHTS["structural"],
    Persistence.EVENT_DRIVEN: config.PERSISTENCE_WEIGHTS["event-driven"],
    Persistence.EMERGING: config.PERSISTENCE_WEIGHTS["emerging"],
    Persistence.UNKNOWN: config.PERSISTENCE_WEIGHTS["emerging"],
}


@dataclass(frozen=True)
class RankedNarrative:
    narrative: Narrative
    persistence: Persistence
    score: float


def rank_narratives(
    snapshot: Snapshot,
    persistence_by_id: Optional[Mapping[str, Persistence]] = None,
    top_n: int = config.TOP_N_NARRATIVES,
) -> Tuple[RankedNarrative, ...]:
    """Narratives of ``snapshot`` ordered by prevalence x persistence weight, capped at ``top_n``."""
    classes = snapshot.persistence if persistence_by_id is None else persistence_by_id
    scored = []
    for n in snapshot.narratives:
        persistence = classes.get(n.narrative_id, Persistence.EMERGING)
        scored.append(RankedNarrative(n, persistence, n.prevalence_pct * _WEIGHTS[persistence]))
    # sorted() is stable: ties keep snapshot order
    scored = sorted(scored, key=lambda r: r.score, reverse=True)
    return tuple(scored[: max(0, top_n)])
