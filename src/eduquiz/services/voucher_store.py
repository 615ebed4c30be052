"""Voucher persistence and status rules.

Redemption state changes only through ``try_redeem``, which issues a single
conditional ``UPDATE ... RETURNING``. Two concurrent callers for the same code
can therefore never both see the voucher as unredeemed; the database row lock
decides which update matches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from ..models import Voucher, VoucherStatus
from ..utils.datetime import as_naive_utc, utcnow
from .errors import RedemptionErrorCode

logger = logging.getLogger(__name__)


def derive_status_from(
    is_redeemed: bool,
    expiry_date: Optional[datetime],
    now: datetime,
) -> VoucherStatus:
    """Status from the stored fields alone. A missing expiry never expires."""

    if is_redeemed:
        return VoucherStatus.REDEEMED
    if expiry_date is not None and as_naive_utc(expiry_date) <= as_naive_utc(now):
        return VoucherStatus.EXPIRED
    return VoucherStatus.ACTIVE


def derive_status(voucher: Voucher, now: datetime) -> VoucherStatus:
    return derive_status_from(bool(voucher.is_redeemed), voucher.expiry_date, now)


def _redeemable(now: datetime):
    """SQL twin of ``derive_status(...) == ACTIVE``."""

    return (
        Voucher.is_redeemed.is_(False),
        or_(Voucher.expiry_date.is_(None), Voucher.expiry_date > now),
    )


def get_voucher(session: Session, code: str) -> Optional[Voucher]:
    stmt = select(Voucher).where(Voucher.voucher_code == code)
    return session.execute(stmt).scalar_one_or_none()


def find_active_vouchers(
    session: Session,
    student_id: str,
    now: Optional[datetime] = None,
) -> Sequence[Voucher]:
    """Vouchers of ``student_id`` that can still be redeemed, newest first."""

    now = as_naive_utc(now) if now else utcnow()
    stmt = (
        select(Voucher)
        .where(Voucher.student_id == student_id, *_redeemable(now))
        .order_by(Voucher.generated_date.desc())
    )
    return session.execute(stmt).scalars().all()


@dataclass
class VoucherListing:
    """Every voucher of a student with its derived status."""

    entries: List[Tuple[Voucher, VoucherStatus]] = field(default_factory=list)

    def count(self, status: VoucherStatus) -> int:
        return sum(1 for _, entry_status in self.entries if entry_status == status)


def list_student_vouchers(
    session: Session,
    student_id: str,
    now: Optional[datetime] = None,
) -> VoucherListing:
    now = as_naive_utc(now) if now else utcnow()
    stmt = (
        select(Voucher)
        .where(Voucher.student_id == student_id)
        .order_by(Voucher.generated_date.desc())
    )
    vouchers = session.execute(stmt).scalars().all()
    return VoucherListing(entries=[(voucher, derive_status(voucher, now)) for voucher in vouchers])


def try_redeem(
    session: Session,
    code: str,
    product_id: str,
    now: Optional[datetime] = None,
) -> Optional[Voucher]:
    """Atomically flip an active voucher to redeemed.

    Returns the updated voucher, or ``None`` when no unredeemed, unexpired
    voucher carries ``code``. The caller owns the transaction and must commit
    for the redemption to become visible to other sessions.
    """

    now = as_naive_utc(now) if now else utcnow()
    stmt = (
        update(Voucher)
        .where(Voucher.voucher_code == code, *_redeemable(now))
        .values(is_redeemed=True, redeemed_at=now, redeemed_product_id=product_id)
        .returning(Voucher)
    )
    result = session.scalars(stmt, execution_options={"synchronize_session": "fetch"})
    return result.one_or_none()


def classify_failure(
    session: Session,
    code: str,
    now: Optional[datetime] = None,
) -> RedemptionErrorCode:
    """Explain a failed ``try_redeem`` from a plain read of the voucher.

    The read is not guarded, so the answer is diagnostic only. A voucher that
    still looks redeemable at ``now`` is logged and reported as expired.
    """

    now = as_naive_utc(now) if now else utcnow()
    stmt = select(Voucher).where(Voucher.voucher_code == code).execution_options(populate_existing=True)
    existing = session.execute(stmt).scalar_one_or_none()
    if existing is None:
        return RedemptionErrorCode.VOUCHER_NOT_FOUND
    status = derive_status(existing, now)
    if status == VoucherStatus.REDEEMED:
        return RedemptionErrorCode.VOUCHER_ALREADY_REDEEMED
    if status == VoucherStatus.ACTIVE:
        logger.warning("voucher %s rejected by the redemption guard but active at %s", code, now.isoformat())
    return RedemptionErrorCode.VOUCHER_EXPIRED
