from __future__ import annotations

import json
import logging
import time
import uuid
from contextvars import ContextVar
from typing import Any, Dict, Optional

_logger = logging.getLogger("obs")

# Per-batch correlation id
_run_var: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def new_run_id() -> str:
    rid = uuid.uuid4().hex[:16]
    _run_var.set(rid)
    return rid


def get_run_id() -> Optional[str]:
    return _run_var.get()


def log_event(event: str, level: str = "info", **fields: Any) -> None:
    """Emit a one-line JSON log with standard fields.

    Fields: ts (ms), level, event, run_id, and any extra provided fields.
    """
    payload: Dict[str, Any] = {
        "ts": int(time.time() * 1000),
        "level": level,
        "event": event,
    }
    rid = get_run_id()
    if rid:
        payload["run_id"] = rid
    for k, v in fields.items():
        if v is not None:
            payload[k] = v

    line = json.dumps(payload, ensure_ascii=False, default=str)
    if level == "error":
        _logger.error(line)
    elif level == "warning":
        _logger.warning(line)
    else:
        _logger.info(line)
