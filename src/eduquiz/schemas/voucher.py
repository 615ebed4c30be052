"""Pydantic schemas for voucher listing and redemption."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class VoucherRead(BaseModel):
    """Voucher with its derived status."""

    model_config = ConfigDict(from_attributes=True)

    voucher_code: str
    student_id: str
    discount_percent: int
    rank_at_issue: int
    reward_date: Optional[date] = None
    generated_date: datetime
    expiry_date: Optional[datetime] = None
    is_redeemed: bool
    redeemed_at: Optional[datetime] = None
    redeemed_product_id: Optional[str] = None
    status: str


class VoucherList(BaseModel):
    vouchers: List[VoucherRead]
    count: int
    active_count: int
    redeemed_count: int
    expired_count: int


class RedemptionRequest(BaseModel):
    """Redemption payload.

    Fields are optional so that blank or missing values reach the service
    check. Payloads that fail validation outright are answered with
    ``INVALID_REQUEST`` by the application's validation handler.
    """

    voucher_code: Optional[str] = None
    product_id: Optional[str] = None


class RedeemedVoucher(BaseModel):
    voucher_code: str
    discount_percent: int
    redeemed_at: datetime


class RedeemedProduct(BaseModel):
    product_id: str
    name: str
    original_price: Decimal
    discounted_price: Decimal


class RedemptionReceipt(BaseModel):
    """Response returned after a successful redemption."""

    message: str = "Voucher redeemed successfully!"
    voucher: RedeemedVoucher
    product: RedeemedProduct


class RedemptionErrorBody(BaseModel):
    """``detail`` payload of a rejected redemption."""

    error: str
    message: str


class RedemptionErrorResponse(BaseModel):
    detail: RedemptionErrorBody
