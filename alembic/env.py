from __future__ import annotations

import os
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Alembic runs synchronously; strip async drivers from DATABASE_URL
db_url = os.getenv("DATABASE_URL")
if db_url:
    sync_url = db_url.replace("+asyncpg", "+psycopg").replace("+aiosqlite", "")
    if sync_url.startswith("postgres://"):
        sync_url = "postgresql+psycopg://" + sync_url[len("postgres://"):]
    config.set_main_option("sqlalchemy.url", sync_url)

from narrative_engine.db.models import Base  # noqa: E402

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, target_metadata=target_metadata)

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
