"""Background scheduler for daily rank rewards."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..core.config import get_settings
from ..core.database import SessionLocal
from ..services.issuance_service import issue_daily_rewards
from ..utils.datetime import quiz_day

logger = logging.getLogger(__name__)

_scheduler = AsyncIOScheduler(timezone="UTC")


async def _execute_daily_rewards() -> None:
    session = SessionLocal()
    now = datetime.now(timezone.utc)
    try:
        summary = issue_daily_rewards(
            session,
            quiz_day(now),
            now=now,
            validity_days=get_settings().voucher_validity_days,
        )
        session.commit()
        logger.info("daily rewards completed: %s", summary)
    except Exception:  # pragma: no cover - safeguard for background job
        session.rollback()
        logger.exception("daily rewards job failed")
        raise
    finally:
        session.close()


# Results are released at 20:30 IST, i.e. 15:00 UTC.
@_scheduler.scheduled_job("cron", hour=15, minute=0, id="daily_rewards", misfire_grace_time=3600)
async def _scheduled_job() -> None:
    await _execute_daily_rewards()


def start_scheduler() -> None:
    if not _scheduler.running:
        _scheduler.start()
        logger.info("daily rewards scheduler started")


def shutdown_scheduler() -> None:
    if _scheduler.running:
        _scheduler.shutdown(wait=False)
        logger.info("daily rewards scheduler stopped")


def run_rewards_once(day: Optional[date] = None, now: Optional[datetime] = None) -> dict[str, int]:
    """Run the reward pass synchronously, e.g. from a shell or a test."""

    now = now or datetime.now(timezone.utc)
    session = SessionLocal()
    try:
        summary = issue_daily_rewards(
            session,
            day or quiz_day(now),
            now=now,
            validity_days=get_settings().voucher_validity_days,
        )
        session.commit()
        return summary
    finally:
        session.close()
