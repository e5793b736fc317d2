"""
corgiquest.database.engine — Engine, Sessions & the Async Bridge
=================================================================

Every service function in :mod:`corgiquest.services` is **synchronous**:
it opens one session through :func:`get_session`, runs its steps in order
and commits once.  That single commit is what makes a multi-step mutation
such as ``log_activity`` all-or-nothing.

Async callers (FastAPI routes, the scheduler worker) must not block the
event loop on those calls, so they go through :func:`run_db`, which runs
the sync function on the default thread pool.

Usage::

    from corgiquest.database.engine import create_db_engine, init_db, run_db

    engine = create_db_engine()                      # DATABASE_URL from .env
    init_db(engine)                                  # tables + item catalogue
    result = await run_db(reset_daily_goals, engine) # from async code
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, ParamSpec, TypeVar

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session

from corgiquest.database.models import Base

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")

# A household app sees a handful of concurrent writers at most
_POOL_OPTIONS: dict[str, Any] = {
    "pool_size": 5,
    "max_overflow": 10,
    "pool_timeout": 10,
    "pool_recycle": 3600,
}


def create_db_engine(url: str | None = None) -> Engine:
    """Build the engine for *url*, defaulting to ``DATABASE_URL``.

    SQLite URLs (local development) skip the connection-pool options.

    Raises
    ------
    RuntimeError
        If no URL is given and ``DATABASE_URL`` is not set.
    """
    url = url or os.getenv("DATABASE_URL")
    if not url:
        raise RuntimeError(
            "DATABASE_URL is not set.  "
            "Copy .env.example → .env and point it at PostgreSQL."
        )

    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        engine = create_engine(url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(url, pool_pre_ping=True, **_POOL_OPTIONS)
    logger.info("Database engine created → %s (%s)", parsed.host or parsed.database, parsed.drivername)
    return engine


def init_db(engine: Engine) -> None:
    """Create missing tables and seed the cosmetic catalogue.

    Idempotent, so it runs on every startup.  Production schemas are owned
    by Alembic (``alembic upgrade head``); ``create_all`` covers dev and test.
    """
    Base.metadata.create_all(engine)
    logger.info("Database tables verified / created.")

    from corgiquest.database.seed import seed_cosmetic_items

    seed_cosmetic_items(engine)


@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    """One unit of work: commit on clean exit, roll back on any exception.

    Objects stay readable after the block (``expire_on_commit=False``) so
    services can serialise them once the transaction has closed.
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


async def run_db(func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
    """Await a synchronous DB function without blocking the event loop."""
    return await asyncio.to_thread(func, *args, **kwargs)
