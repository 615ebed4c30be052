"""Redemption failure taxonomy."""

from __future__ import annotations

import enum


class RedemptionErrorCode(str, enum.Enum):
    """Stable identifiers callers can branch on."""

    INVALID_REQUEST = "INVALID_REQUEST"
    VOUCHER_NOT_FOUND = "VOUCHER_NOT_FOUND"
    VOUCHER_ALREADY_REDEEMED = "VOUCHER_ALREADY_REDEEMED"
    VOUCHER_EXPIRED = "VOUCHER_EXPIRED"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRODUCT_UNAVAILABLE = "PRODUCT_UNAVAILABLE"


_DEFAULTS = {
    RedemptionErrorCode.INVALID_REQUEST: ("Voucher code and product ID are required.", 400),
    RedemptionErrorCode.VOUCHER_NOT_FOUND: ("Invalid voucher code.", 404),
    RedemptionErrorCode.VOUCHER_ALREADY_REDEEMED: ("Voucher has already been redeemed.", 409),
    RedemptionErrorCode.VOUCHER_EXPIRED: ("Voucher has expired.", 400),
    RedemptionErrorCode.PRODUCT_NOT_FOUND: ("Product not found.", 404),
    RedemptionErrorCode.PRODUCT_UNAVAILABLE: ("Product is not available.", 400),
}


class RedemptionError(Exception):
    """Raised when a redemption request cannot be honoured."""

    def __init__(self, code: RedemptionErrorCode, detail: str | None = None, status_code: int | None = None) -> None:
        default_detail, default_status = _DEFAULTS[code]
        self.code = code
        self.detail = detail or default_detail
        self.status_code = status_code or default_status
        super().__init__(self.detail)
