"""Pure computation for narrative episodes and their price outcomes.

Nothing in this package touches the database; the batch service feeds it
normalized snapshots and price points.
"""

from .aggregate import aggregate
from .episodes import Episode, detect_episodes
from .forward import EpisodeOutcome, compute_outcome
from .pipeline import compute_symbol_outcomes
from .prices import PricePoint, PriceSeries
from .ranking import RankedNarrative, rank_narratives
from .snapshot import Narrative, Persistence, Snapshot, SnapshotFormatError, normalize_snapshot

__all__ = [
    "aggregate",
    "compute_outcome",
    "compute_symbol_outcomes",
    "detect_episodes",
    "normalize_snapshot",
    "rank_narratives",
    "Episode",
    "EpisodeOutcome",
    "Narrative",
    "Persistence",
    "PricePoint",
    "PriceSeries",
    "RankedNarrative",
    "Snapshot",
    "SnapshotFormatError",
]
