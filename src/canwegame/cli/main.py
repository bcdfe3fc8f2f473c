"""CanWeGame CLI — run the API and manage its local setup.

Usage:
    canwegame gen-secret                 # Print a fresh CANWEGAME_JWT_SECRET
    canwegame init-db                    # Create tables from the models (dev/SQLite)
    canwegame serve --port 8000          # Run the API with uvicorn

gen-secret works without any configuration. The other commands import
the app settings, so the CANWEGAME_JWT_* variables must be set first.
"""

from __future__ import annotations

import asyncio
import secrets

import click


@click.group()
@click.version_option(package_name="canwegame")
def cli():
    """CanWeGame API management."""


@cli.command("gen-secret")
@click.option("--bytes", "nbytes", default=48, show_default=True, help="Random bytes before encoding.")
def gen_secret(nbytes: int):
    """Print a random signing secret for CANWEGAME_JWT_SECRET.

    Changing the secret invalidates every token issued with the old one.
    """
    click.echo(secrets.token_urlsafe(nbytes))


@cli.command("init-db")
@click.option("--drop", is_flag=True, help="Drop all tables first (destroys data).")
def init_db(drop: bool):
    """Create all tables directly from the ORM models.

    Production databases should be migrated with `alembic upgrade head`.
    """
    from canwegame.db.engine import engine
    from canwegame.db.models import Base

    async def _create():
        async with engine.begin() as conn:
            if drop:
                await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    asyncio.run(_create())
    click.secho(f"Created tables: {', '.join(sorted(Base.metadata.tables))}", fg="green")


@cli.command()
@click.option("--host", default=None, help="Bind address (default: CANWEGAME_HOST).")
@click.option("--port", default=None, type=int, help="Port (default: CANWEGAME_PORT).")
@click.option("--reload", is_flag=True, help="Restart on code changes (development).")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the API server."""
    import uvicorn

    from canwegame.config import settings

    uvicorn.run(
        "canwegame.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    cli()
