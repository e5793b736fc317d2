"""
corgiquest.worker.__main__ — Entry point for ``python -m corgiquest.worker``
============================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Initialise Sentry if ``SENTRY_DSN`` is set.
4. Create the SQLAlchemy engine and ensure tables exist.
5. Run the daily reset loop (blocking).

Flags::

    --once   run the reset immediately and exit
    --seed   create the demo household and exit
    --admin-token NAME   print a 12-hour admin JWT and exit
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from dotenv import load_dotenv

from corgiquest.config import load_config
from corgiquest.database.engine import create_db_engine, init_db
from corgiquest.database.seed import seed_demo_data
from corgiquest.monitoring import init_sentry
from corgiquest.worker.tasks import DailyResetScheduler

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("corgiquest")


def main() -> None:
    """Bootstrap and run the scheduler worker."""
    parser = argparse.ArgumentParser(prog="corgiquest.worker")
    parser.add_argument("--once", action="store_true", help="run the daily reset now and exit")
    parser.add_argument("--seed", action="store_true", help="seed demo data and exit")
    parser.add_argument("--admin-token", metavar="NAME", help="print an admin JWT for NAME and exit")
    args = parser.parse_args()

    # 1. Environment variables (secrets).
    load_dotenv()

    if args.admin_token:
        from corgiquest.api.deps import create_admin_token

        print(create_admin_token(args.admin_token))
        return

    # 2. Soft configuration.
    cfg = load_config()
    logger.info(
        "Config loaded — %s, reset at %02d:%02d UTC",
        cfg.app_name, cfg.daily_reset_hour, cfg.daily_reset_minute,
    )

    # 3. Monitoring.
    init_sentry()

    # 4. Database.
    engine = create_db_engine()
    init_db(engine)

    if args.seed:
        result = seed_demo_data(engine)
        logger.info("Demo data seeded: dog %d", result["dog_id"])
        return

    scheduler = DailyResetScheduler(engine, cfg)

    # 5. Run (blocks until Ctrl+C or SIGTERM).
    try:
        if args.once:
            asyncio.run(scheduler.run_once())
        else:
            asyncio.run(scheduler.run_forever())
    except KeyboardInterrupt:
        logger.info("Worker stopped")


if __name__ == "__main__":
    main()
