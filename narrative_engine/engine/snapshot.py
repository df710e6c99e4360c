from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from narrative_engine.obs import log_event
from narrative_engine.utils.timebox import as_utc, trading_date


class SnapshotFormatError(ValueError):
    """Raised when a stored snapshot payload does not have the expected shape."""


class Persistence(str, enum.Enum):
    STRUCTURAL = "structural"
    EVENT_DRIVEN = "event-driven"
    EMERGING = "emerging"
    UNKNOWN = "unknown"  # classification present but not recognized

    @classmethod
    def parse(cls, raw: Any) -> "Persistence":
        try:
            value = cls(str(raw).strip().lower())
        except ValueError:
            return cls.UNKNOWN
        return value


@dataclass(frozen=True)
class Narrative:
    narrative_id: str
    label: str
    prevalence_pct: float
    dominant_emotions: Tuple[str, ...] = ()

    @property
    def dominant_emotion(self) -> str:
        return self.dominant_emotions[0] if self.dominant_emotions else "Unknown"


@dataclass(frozen=True)
class Snapshot:
    symbol: str
    observed_at: datetime
    narratives: Tuple[Narrative, ...] = ()
    persistence: Mapping[str, Persistence] = field(default_factory=dict)
    snapshot_id: Optional[int] = None
    period_type: Optional[str] = None

    @property
    def observed_on(self) -> date:
        return trading_date(self.observed_at)

    def prevalence(self, narrative_id: str) -> float:
        for n in self.narratives:
            if n.narrative_id == narrative_id:
                return n.prevalence_pct
        return 0.0


def _field(row: Any, name: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(name, default)
    return getattr(row, name, default)


def _as_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise SnapshotFormatError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _as_list(value: Any, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise SnapshotFormatError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _narrative(raw: Any) -> Narrative:
    if not isinstance(raw, Mapping):
        raise SnapshotFormatError("narrative entry must be an object")
    nid = raw.get("id")
    if nid is None or str(nid).strip() == "":
        raise SnapshotFormatError("narrative entry is missing an id")
    nid = str(nid)
    try:
        prevalence = float(raw.get("prevalence_pct") or 0.0)
    except (TypeError, ValueError) as exc:
        raise SnapshotFormatError(f"narrative {nid} has non-numeric prevalence_pct") from exc
    emotions = raw.get("dominant_emotions") or []
    if not isinstance(emotions, list):
        emotions = [emotions]
    return Narrative(
        narrative_id=nid,
        label=str(raw.get("label") or nid),
        prevalence_pct=prevalence,
        dominant_emotions=tuple(str(e) for e in emotions),
    )


def normalize_snapshot(row: Any) -> Snapshot:
    """Build a strict ``Snapshot`` from a stored row or a plain dict.

    The row needs ``symbol``, ``snapshot_start``, ``observed_state`` and
    ``interpretation``; ``id`` and ``period_type`` are carried along when
    present. Missing JSON sections become empty, malformed ones raise
    ``SnapshotFormatError``.
    """
    symbol = str(_field(row, "symbol") or "").upper()
    started = _field(row, "snapshot_start")
    if not isinstance(started, datetime):
        raise SnapshotFormatError(f"{symbol or '?'}: snapshot_start must be a datetime")

    observed = _as_mapping(_field(row, "observed_state"), "observed_state")
    interpretation = _as_mapping(_field(row, "interpretation"), "interpretation")

    narratives = tuple(_narrative(n) for n in _as_list(observed.get("narratives"), "observed_state.narratives"))

    persistence: Dict[str, Persistence] = {}
    for entry in _as_list(interpretation.get("narrative_persistence"), "interpretation.narrative_persistence"):
        if not isinstance(entry, Mapping) or entry.get("narrative_id") is None:
            raise SnapshotFormatError("narrative_persistence entry must carry a narrative_id")
        raw_cls = entry.get("classification")
        if raw_cls is None:
            continue
        parsed = Persistence.parse(raw_cls)
        if parsed is Persistence.UNKNOWN:
            log_event(
                "snapshot.unknown_persistence",
                level="warning",
                symbol=symbol,
                narrative_id=str(entry["narrative_id"]),
                classification=str(raw_cls),
            )
        persistence[str(entry["narrative_id"])] = parsed

    return Snapshot(
        symbol=symbol,
        observed_at=as_utc(started),
        narratives=narratives,
        persistence=persistence,
        snapshot_id=_field(row, "id"),
        period_type=_field(row, "period_type"),
    )
