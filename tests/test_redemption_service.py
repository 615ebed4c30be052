"""Redemption coordinator: outcomes, pricing and the at-most-one guarantee."""
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from eduquiz.core.database import SessionLocal
from eduquiz.services import redemption_service, voucher_store
from eduquiz.services.errors import RedemptionError, RedemptionErrorCode

NOW = datetime(2026, 10, 19, 12, 0, 0)


def _redeem(session, code, product_id, now=NOW):
    return redemption_service.redeem(session, voucher_code=code, product_id=product_id, now=now)


def test_redeem_prices_product_with_discount(db_session, make_voucher, make_product):
    make_voucher("V100", discount_percent=20)
    product_id = make_product(price="500")

    receipt = _redeem(db_session, "V100", product_id)

    assert receipt.voucher_code == "V100"
    assert receipt.discount_percent == 20
    assert receipt.redeemed_at == NOW
    assert receipt.product_name == "Geometry Box"
    assert receipt.original_price == Decimal("500.00")
    assert receipt.discounted_price == Decimal("400.00")


def test_second_redeem_is_rejected_as_already_redeemed(db_session, make_voucher, make_product):
    make_voucher("V100")
    product_id = make_product()
    _redeem(db_session, "V100", product_id)

    with pytest.raises(RedemptionError) as exc_info:
        _redeem(db_session, "V100", product_id, now=NOW + timedelta(seconds=1))

    assert exc_info.value.code == RedemptionErrorCode.VOUCHER_ALREADY_REDEEMED
    assert exc_info.value.status_code == 409


def test_expired_voucher_is_reported(db_session, make_voucher, make_product):
    make_voucher("V200", expires_in=timedelta(days=-1))

    with pytest.raises(RedemptionError) as exc_info:
        _redeem(db_session, "V200", make_product())

    assert exc_info.value.code == RedemptionErrorCode.VOUCHER_EXPIRED


def test_unknown_code_is_reported(db_session, make_product):
    with pytest.raises(RedemptionError) as exc_info:
        _redeem(db_session, "V999", make_product())

    assert exc_info.value.code == RedemptionErrorCode.VOUCHER_NOT_FOUND
    assert exc_info.value.status_code == 404


@pytest.mark.parametrize(
    "code, product_id",
    [("", "p1"), ("V100", ""), ("   ", "p1"), (None, "p1"), ("V100", None)],
)
def test_blank_arguments_are_invalid_requests(db_session, make_voucher, code, product_id):
    make_voucher("V100")

    with pytest.raises(RedemptionError) as exc_info:
        _redeem(db_session, code, product_id)

    assert exc_info.value.code == RedemptionErrorCode.INVALID_REQUEST
    db_session.rollback()
    assert voucher_store.get_voucher(db_session, "V100").is_redeemed is False


def test_missing_product_leaves_voucher_spent(db_session, make_voucher):
    make_voucher("V100")

    with pytest.raises(RedemptionError) as exc_info:
        _redeem(db_session, "V100", "no-such-product")
    db_session.rollback()

    assert exc_info.value.code == RedemptionErrorCode.PRODUCT_NOT_FOUND
    voucher = voucher_store.get_voucher(db_session, "V100")
    assert voucher.is_redeemed is True
    assert voucher.redeemed_product_id == "no-such-product"


def test_inactive_product_leaves_voucher_spent(db_session, make_voucher, make_product):
    make_voucher("V100")
    product_id = make_product(is_active=False)

    with pytest.raises(RedemptionError) as exc_info:
        _redeem(db_session, "V100", product_id)
    db_session.rollback()

    assert exc_info.value.code == RedemptionErrorCode.PRODUCT_UNAVAILABLE
    assert voucher_store.get_voucher(db_session, "V100").is_redeemed is True


@pytest.mark.parametrize(
    "price, percent, expected",
    [
        ("500", 0, "500.00"),
        ("500", 100, "0.00"),
        ("500", 20, "400.00"),
        ("199.99", 15, "169.99"),
        ("0.10", 50, "0.05"),
        ("0.05", 50, "0.03"),
        ("1234.56", 33, "827.16"),
    ],
)
def test_discounted_price(price, percent, expected):
    assert redemption_service.discounted_price(Decimal(price), percent) == Decimal(expected)


def test_discounted_price_rejects_out_of_range_percent():
    with pytest.raises(ValueError):
        redemption_service.discounted_price(Decimal("10"), 101)


def test_concurrent_redemptions_succeed_exactly_once(make_voucher, make_product):
    make_voucher("FRESH", discount_percent=10)
    product_id = make_product(price="250")
    attempts = 50
    barrier = threading.Barrier(attempts)

    def attempt(_):
        session = SessionLocal()
        try:
            barrier.wait()
            _redeem(session, "FRESH", product_id)
            return "SUCCESS"
        except RedemptionError as exc:
            session.rollback()
            return exc.code.value
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=attempts) as pool:
        outcomes = Counter(pool.map(attempt, range(attempts)))

    assert outcomes == Counter(
        {"SUCCESS": 1, RedemptionErrorCode.VOUCHER_ALREADY_REDEEMED.value: attempts - 1}
    )
