from __future__ import annotations

import datetime as dt
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from narrative_engine.db.session import SessionLocal
from narrative_engine.schemas.outcomes import BatchSummary, ComputeRequest, NarrativeOutcome, OutcomeListEnvelope
from narrative_engine.security import require_api_key
from narrative_engine.services.outcomes import OutcomeBatch
from narrative_engine.services.store import SnapshotStore

router = APIRouter(prefix="/api/v1/narrative-outcomes", tags=["narrative-outcomes"])


def get_store() -> SnapshotStore:
    return SnapshotStore(SessionLocal)


def get_now() -> Optional[dt.datetime]:
    """Batch clock; None lets the batch read the wall clock."""
    return None


@router.post("/compute", response_model=BatchSummary, dependencies=[Depends(require_api_key)])
async def compute(
    body: ComputeRequest | None = None,
    store: SnapshotStore = Depends(get_store),
    now: Optional[dt.datetime] = Depends(get_now),
) -> BatchSummary:
    requested = body.requested() if body else []
    return await OutcomeBatch(store).run(requested, now=now)


@router.get("/{symbol}", response_model=OutcomeListEnvelope)
async def latest_outcomes(
    symbol: str,
    store: SnapshotStore = Depends(get_store),
) -> OutcomeListEnvelope:
    sym = symbol.strip().upper()
    row = await store.latest_outcomes(sym)
    if row is None:
        raise HTTPException(status_code=404, detail="No snapshots for symbol")
    outcomes = [NarrativeOutcome.model_validate(o) for o in (row.narrative_outcomes or [])]
    return OutcomeListEnvelope(symbol=sym, snapshot_id=row.id, outcomes=outcomes)
