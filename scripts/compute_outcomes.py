#!/usr/bin/env python3
"""Run one narrative-outcomes batch and print the summary as JSON.

Local mode talks to DATABASE_URL directly; ``--remote`` posts to a running
service instead (needs API_KEY).
"""
import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import httpx

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from narrative_engine import config  # noqa: E402


def parse_args(argv=None):
    p = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    p.add_argument("--symbols", default="", help="comma-separated symbols; default: all watchlist symbols")
    p.add_argument("--concurrency", type=int, default=config.OUTCOMES_CONCURRENCY)
    p.add_argument("--remote", default=None, help="base URL of a running service, e.g. http://localhost:8000")
    return p.parse_args(argv)


async def run_local(symbols, concurrency):
    from narrative_engine.db.session import SessionLocal, init_db
    from narrative_engine.services.outcomes import OutcomeBatch
    from narrative_engine.services.store import SnapshotStore

    await init_db()
    summary = await OutcomeBatch(SnapshotStore(SessionLocal), concurrency=concurrency).run(symbols)
    return summary.model_dump(mode="json")


def run_remote(base_url, symbols):
    url = base_url.rstrip("/") + "/api/v1/narrative-outcomes/compute"
    headers = {"X-API-Key": os.getenv("API_KEY", "")}
    r = httpx.post(url, json={"symbols": symbols}, headers=headers, timeout=300.0)
    r.raise_for_status()
    return r.json()


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = parse_args(argv)
    symbols = [s for s in args.symbols.split(",") if s.strip()]
    if args.remote:
        out = run_remote(args.remote, symbols)
    else:
        out = asyncio.run(run_local(symbols, args.concurrency))
    print(json.dumps(out, indent=2))
    return 0 if out.get("success", False) else 1


if __name__ == "__main__":
    sys.exit(main())
