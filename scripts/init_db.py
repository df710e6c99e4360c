import asyncio
import sys
from pathlib import Path

# ensure repo root on sys.path so "narrative_engine.*" works without install
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from sqlalchemy import inspect  # noqa: E402

from narrative_engine.db.session import DATABASE_URL, engine, init_db  # noqa: E402


async def main() -> None:
    await init_db()
    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    print("Database:", DATABASE_URL.split("@")[-1])
    print("Tables:", tables)


if __name__ == "__main__":
    asyncio.run(main())
