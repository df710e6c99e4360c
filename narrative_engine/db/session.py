from __future__ import annotations

import os
import ssl
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from .models import Base


def _build_ssl_connect_args(mode: Optional[str], root_path: Optional[str]) -> Dict[str, Any]:
    mode_norm = (mode or "").strip().lower()
    if mode_norm == "disable":
        return {"ssl": False}
    if mode_norm in ("", "allow", "prefer"):
        return {}

    ctx = ssl.create_default_context(cafile=root_path) if root_path else ssl.create_default_context()
    if mode_norm == "require" and not root_path:
        # libpq "require": encrypt but do not verify
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    elif mode_norm == "verify-ca":
        ctx.check_hostname = False
    return {"ssl": ctx}


def _normalize_url(url: str) -> Tuple[str, Dict[str, Any]]:
    parsed = urlparse(url)
    if not parsed.scheme.lower().startswith("postgres"):
        return url, {}

    params = parse_qsl(parsed.query, keep_blank_values=True)
    ssl_params = {k.lower(): v for k, v in params if k.lower() in ("sslmode", "sslrootcert")}
    kept = [(k, v) for k, v in params if k.lower() not in ("sslmode", "sslrootcert")]
    normalized = urlunparse(parsed._replace(scheme="postgresql+asyncpg", query=urlencode(kept, doseq=True)))
    return normalized, _build_ssl_connect_args(ssl_params.get("sslmode"), ssl_params.get("sslrootcert"))


def _database_config() -> Tuple[str, Dict[str, Any]]:
    explicit = os.getenv("DATABASE_URL")
    if explicit:
        return _normalize_url(explicit)
    # Local fallback for quick experiments
    return "sqlite+aiosqlite:///./local.db", {}


def make_engine(url: str, connect_args: Optional[Dict[str, Any]] = None) -> AsyncEngine:
    return create_async_engine(url, future=True, pool_pre_ping=True, connect_args=connect_args or {})


DATABASE_URL, _CONNECT_ARGS = _database_config()

engine: AsyncEngine = make_engine(DATABASE_URL, _CONNECT_ARGS)

SessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def init_db(target: Optional[AsyncEngine] = None) -> None:
    """Create tables on startup."""

    async with (target or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

