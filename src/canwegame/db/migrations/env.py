"""Alembic environment for the CanWeGame schema.

Learn: Migrations connect with the app's own build_engine(), so they use
the same CANWEGAME_DATABASE_URL as the server, and SQLite connections get
foreign keys switched on exactly as they do at runtime. alembic.ini holds
only logging and the script location.

    alembic upgrade head                       # apply
    alembic revision --autogenerate -m "..."   # diff models.py vs the DB
"""

import asyncio
from logging.config import fileConfig

from alembic import context

from canwegame.config import settings
from canwegame.db.engine import build_engine
from canwegame.db.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
DATABASE_URL = settings.database_url


def _configure(**kwargs) -> None:
    # SQLite cannot ALTER constraints in place; batch mode copies the table.
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=DATABASE_URL.startswith("sqlite"),
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL to stdout instead of running it."""
    _configure(
        url=DATABASE_URL,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = build_engine(DATABASE_URL)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
