"""Reusable migration runner."""

import asyncio

from alembic import command
from alembic.config import Config


def run_migrations_sync(revision: str = "head", config_path: str = "alembic.ini") -> None:
    """Run Alembic migrations synchronously up to ``revision``."""
    alembic_cfg = Config(config_path)
    command.upgrade(alembic_cfg, revision)


async def run_migrations_async(revision: str = "head", config_path: str = "alembic.ini") -> None:
    """Run Alembic migrations from async context.

    Alembic's env.py drives its own sync engine, so it runs in a worker thread.
    """
    await asyncio.to_thread(run_migrations_sync, revision, config_path)
