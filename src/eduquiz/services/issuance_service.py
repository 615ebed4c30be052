"""Rank-based voucher issuance."""

from __future__ import annotations

import logging
import secrets
import string
from datetime import date, datetime, timedelta
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import Voucher
from ..utils.datetime import as_naive_utc, utcnow
from . import ranking_service

logger = logging.getLogger(__name__)

CODE_PREFIX = "EQ-"
CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 10

# (last rank of tier, discount percent); ranks past the final tier earn nothing.
RANK_TIERS = (
    (1, 50),
    (3, 30),
    (10, 20),
    (100, 10),
)


def discount_for_rank(rank: int) -> Optional[int]:
    """Discount percent a rank earns, or ``None`` when it is not eligible."""

    if rank < 1:
        return None
    for last_rank, percent in RANK_TIERS:
        if rank <= last_rank:
            return percent
    return None


def generate_voucher_code() -> str:
    return CODE_PREFIX + "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def _unused_code(session: Session) -> str:
    while True:
        code = generate_voucher_code()
        taken = session.execute(select(Voucher.voucher_id).where(Voucher.voucher_code == code)).first()
        if taken is None:
            return code


def issue_for_rank(
    session: Session,
    *,
    student_id: str,
    rank: int,
    now: Optional[datetime] = None,
    validity_days: int = 30,
    reward_date: Optional[date] = None,
) -> Optional[Voucher]:
    """Create the voucher ``rank`` earns. ``validity_days=0`` means no expiry."""

    percent = discount_for_rank(rank)
    if percent is None:
        return None

    now = as_naive_utc(now) if now else utcnow()
    voucher = Voucher(
        voucher_code=_unused_code(session),
        student_id=student_id,
        discount_percent=percent,
        rank_at_issue=rank,
        reward_date=reward_date,
        generated_date=now,
        expiry_date=now + timedelta(days=validity_days) if validity_days > 0 else None,
    )
    session.add(voucher)
    session.flush()
    return voucher


def issue_daily_rewards(
    session: Session,
    day: date,
    *,
    now: Optional[datetime] = None,
    validity_days: int = 30,
) -> Dict[str, int]:
    """Rank ``day`` and issue vouchers to every eligible student.

    Safe to rerun: students already rewarded for ``day`` are skipped.
    """

    now = as_naive_utc(now) if now else utcnow()
    summary = {"results_ranked": 0, "vouchers_issued": 0, "already_rewarded": 0}

    ranked = ranking_service.rank_day(session, day, now=now)
    summary["results_ranked"] = len(ranked)

    rewarded = set(
        session.execute(select(Voucher.student_id).where(Voucher.reward_date == day)).scalars().all()
    )

    for result in ranked:
        if discount_for_rank(result.rank) is None:
            break
        if result.student_id in rewarded:
            summary["already_rewarded"] += 1
            continue
        issue_for_rank(
            session,
            student_id=result.student_id,
            rank=result.rank,
            now=now,
            validity_days=validity_days,
            reward_date=day,
        )
        rewarded.add(result.student_id)
        summary["vouchers_issued"] += 1

    logger.info("daily rewards for %s: %s", day.isoformat(), summary)
    return summary
