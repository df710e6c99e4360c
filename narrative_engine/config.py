import os


def _csv(name: str, default: str) -> tuple:
    raw = os.getenv(name, default)
    return tuple(p.strip() for p in raw.split(",") if p.strip())


# ----- Episode detection -----
# Prevalence (%) at or above which a narrative is considered dominant
PREVALENCE_THRESHOLD = float(os.getenv("PREVALENCE_THRESHOLD", "25"))
# Consecutive sub-threshold snapshots required to close an episode
CONSECUTIVE_BELOW_TO_END = int(os.getenv("CONSECUTIVE_BELOW_TO_END", "2"))

# ----- Working window -----
LOOKBACK_DAYS = int(os.getenv("LOOKBACK_DAYS", "180"))
SNAPSHOT_PERIOD_TYPES = _csv("SNAPSHOT_PERIOD_TYPES", "daily,hourly")

# ----- Ranking -----
TOP_N_NARRATIVES = int(os.getenv("TOP_N_NARRATIVES", "8"))
PERSISTENCE_WEIGHTS = {
    "structural": 1.0,
    "event-driven": 0.7,
    "emerging": 0.5,
}

# ----- Forward outcomes (in available price rows, not calendar days) -----
RETURN_HORIZONS = tuple(int(h) for h in _csv("RETURN_HORIZONS", "5,10"))
DRAWDOWN_WINDOW = int(os.getenv("DRAWDOWN_WINDOW", "10"))

# ----- Aggregation -----
RECENCY_HALF_LIFE_DAYS = float(os.getenv("RECENCY_HALF_LIFE_DAYS", "45"))

# ----- Batch -----
# Max symbols processed at once; keeps DB load bounded
OUTCOMES_CONCURRENCY = int(os.getenv("OUTCOMES_CONCURRENCY", "4"))
