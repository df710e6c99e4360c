from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, BigInteger, Date, DateTime, Float, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class PsychologySnapshot(Base):
    __tablename__ = "psychology_snapshots"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    symbol: Mapped[str] = mapped_column(String(16), index=True)
    period_type: Mapped[str] = mapped_column(String(16), index=True)  # hourly|daily|weekly|monthly
    snapshot_start: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), index=True)
    snapshot_end: Mapped[Optional[dt.datetime]] = mapped_column(DateTime(timezone=True))
    # { narratives: [{id, label, prevalence_pct, dominant_emotions}], ... }
    observed_state: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    # { narrative_persistence: [{narrative_id, classification}], ... }
    interpretation: Mapped[Dict[str, Any]] = mapped_column(JSON, default=dict)
    # overwritten wholesale by each outcomes run
    narrative_outcomes: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, default=list)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class PriceHistory(Base):
    __tablename__ = "price_history"
    __table_args__ = (UniqueConstraint("symbol", "date", name="uq_price_history_symbol_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    symbol: Mapped[str] = mapped_column(String(16), index=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    close: Mapped[float] = mapped_column(Float)
    open: Mapped[Optional[float]] = mapped_column(Float)
    high: Mapped[Optional[float]] = mapped_column(Float)
    low: Mapped[Optional[float]] = mapped_column(Float)
    volume: Mapped[Optional[int]] = mapped_column(BigInteger)
    source: Mapped[Optional[str]] = mapped_column(String(32), default="yahoo")


class Watchlist(Base):
    __tablename__ = "watchlists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64))
    symbols: Mapped[List[str]] = mapped_column(JSON, default=list)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
