"""Worker process for scheduled TOIL balance reconciliation.

Rebuilds every user's balance snapshot from their approved entries on a
fixed interval so that a snapshot missed by an approval does not drift.

Run with:  python -m app.worker
"""

from __future__ import annotations

import asyncio
import logging

from app.config import get_settings
from app.db import get_session_factory

logger = logging.getLogger(__name__)


async def run_reconcile_once() -> None:
    """Run one reconciliation pass, logging the outcome."""
    from app.services.balance import run_balance_reconciliation

    session_factory = get_session_factory()
    try:
        async with session_factory() as session:
            result = await run_balance_reconciliation(session)
        logger.info(
            "Balance reconciliation complete: processed=%d changed=%d errors=%d",
            result.processed,
            result.changed,
            result.errors,
        )
    except Exception:
        logger.exception("Balance reconciliation run failed")


async def run_reconcile_loop() -> None:
    """Main worker loop."""
    interval = get_settings().balance_reconcile_interval_seconds
    logger.info("Balance worker started, interval=%ds", interval)
    while True:
        await run_reconcile_once()
        await asyncio.sleep(interval)


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    asyncio.run(run_reconcile_loop())


if __name__ == "__main__":
    main()
