from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

ConfidenceLabel = Literal["experimental", "moderate", "high"]


class HistoricalOutcomes(BaseModel):
    episode_count: int = 0
    avg_price_move_5d: Optional[float] = None
    avg_price_move_10d: Optional[float] = None
    median_price_move_10d: Optional[float] = None
    p25_price_move_10d: Optional[float] = None
    p75_price_move_10d: Optional[float] = None
    win_rate_5d: Optional[int] = None
    win_rate_10d: Optional[int] = None
    max_drawdown_avg: Optional[float] = None


class NarrativeOutcome(BaseModel):
    narrative_id: str
    label: str
    current_prevalence_pct: float
    dominant_emotion: str
    persistence: str  # structural | event-driven | emerging | unknown
    historical_outcomes: HistoricalOutcomes
    confidence: float = Field(..., ge=0.0, le=1.0)
    confidence_label: ConfidenceLabel


class SymbolResult(BaseModel):
    symbol: str
    success: bool
    outcomes_count: int = 0
    error: Optional[str] = None


class BatchSummary(BaseModel):
    success: bool = True
    processed: int = 0
    successful: int = 0
    total_outcomes: int = 0
    results: List[SymbolResult] = Field(default_factory=list)
    message: Optional[str] = None


class ComputeRequest(BaseModel):
    symbol: Optional[str] = Field(None, min_length=1, max_length=16)
    symbols: Optional[List[str]] = None

    def requested(self) -> List[str]:
        if self.symbol:
            return [self.symbol]
        return list(self.symbols or [])


class OutcomeListEnvelope(BaseModel):
    ok: bool = True
    symbol: str
    snapshot_id: int
    outcomes: List[NarrativeOutcome]
