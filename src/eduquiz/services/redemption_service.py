"""Domain logic for voucher redemptions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ..utils.datetime import as_naive_utc, utcnow
from . import product_service, voucher_store
from .errors import RedemptionError, RedemptionErrorCode

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


@dataclass(frozen=True)
class RedemptionSuccess:
    """Receipt for a completed redemption."""

    voucher_code: str
    discount_percent: int
    redeemed_at: datetime
    product_id: str
    product_name: str
    original_price: Decimal
    discounted_price: Decimal


def discounted_price(original_price, discount_percent: int) -> Decimal:
    """``original_price * (1 - discount_percent / 100)`` rounded to cents."""

    if not 0 <= discount_percent <= 100:
        raise ValueError(f"discount_percent must be within 0..100, got {discount_percent}")
    price = Decimal(str(original_price))
    return (price * (100 - discount_percent) / 100).quantize(CENT, rounding=ROUND_HALF_UP)


def _require_text(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise RedemptionError(RedemptionErrorCode.INVALID_REQUEST)
    return value.strip()


def redeem(
    session: Session,
    *,
    voucher_code: str,
    product_id: str,
    now: Optional[datetime] = None,
) -> RedemptionSuccess:
    """Consume ``voucher_code`` against ``product_id`` and price the product.

    The voucher transition is committed as soon as it succeeds. A missing or
    inactive product is reported afterwards and leaves the voucher redeemed.
    Database errors are not translated and propagate to the caller.
    """

    code = _require_text(voucher_code)
    product_ref = _require_text(product_id)
    now = as_naive_utc(now) if now else utcnow()

    voucher = voucher_store.try_redeem(session, code, product_ref, now)
    if voucher is None:
        reason = voucher_store.classify_failure(session, code, now)
        logger.info("redemption rejected code=%s reason=%s", code, reason.value)
        raise RedemptionError(reason)
    session.commit()

    product = product_service.get_product(session, product_ref)
    if product is None:
        logger.warning("voucher %s consumed but product %s does not exist", code, product_ref)
        raise RedemptionError(RedemptionErrorCode.PRODUCT_NOT_FOUND)
    if not product.is_active:
        logger.warning("voucher %s consumed but product %s is inactive", code, product_ref)
        raise RedemptionError(RedemptionErrorCode.PRODUCT_UNAVAILABLE)

    original = Decimal(product.original_price)
    receipt = RedemptionSuccess(
        voucher_code=voucher.voucher_code,
        discount_percent=voucher.discount_percent,
        redeemed_at=voucher.redeemed_at,
        product_id=product.product_id,
        product_name=product.product_name,
        original_price=original.quantize(CENT),
        discounted_price=discounted_price(original, voucher.discount_percent),
    )
    logger.info(
        "voucher %s redeemed for %s (%s%% off, %s -> %s)",
        receipt.voucher_code,
        receipt.product_name,
        receipt.discount_percent,
        receipt.original_price,
        receipt.discounted_price,
    )
    return receipt
