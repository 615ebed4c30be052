"""Endpoints for student vouchers and their redemption."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from ...core.database import get_db
from ...core.rate_limit import limiter, redeem_limit
from ...models import Voucher, VoucherStatus
from ...schemas import (
    RedeemedProduct,
    RedeemedVoucher,
    RedemptionErrorBody,
    RedemptionErrorResponse,
    RedemptionReceipt,
    RedemptionRequest,
    VoucherList,
    VoucherRead,
)
from ...services import redemption_service, voucher_store
from ...services.errors import RedemptionError

router = APIRouter(prefix="/vouchers", tags=["vouchers"])

REDEEM_ROUTE_NAME = "redeem_voucher"


def _voucher_read(voucher: Voucher, status: VoucherStatus) -> VoucherRead:
    return VoucherRead(
        voucher_code=voucher.voucher_code,
        student_id=voucher.student_id,
        discount_percent=voucher.discount_percent,
        rank_at_issue=voucher.rank_at_issue,
        reward_date=voucher.reward_date,
        generated_date=voucher.generated_date,
        expiry_date=voucher.expiry_date,
        is_redeemed=voucher.is_redeemed,
        redeemed_at=voucher.redeemed_at,
        redeemed_product_id=voucher.redeemed_product_id,
        status=status.value,
    )


@router.get(
    "",
    response_model=VoucherList,
    summary="List a student's vouchers",
    responses={
        200: {
            "description": "All vouchers of the student with derived status",
            "content": {
                "application/json": {
                    "example": {
                        "vouchers": [
                            {
                                "voucher_code": "EQ-7K2M9QX4LD",
                                "student_id": "S1002",
                                "discount_percent": 30,
                                "rank_at_issue": 2,
                                "reward_date": "2026-10-18",
                                "generated_date": "2026-10-18T15:00:00",
                                "expiry_date": "2026-11-17T15:00:00",
                                "is_redeemed": False,
                                "redeemed_at": None,
                                "redeemed_product_id": None,
                                "status": "active",
                            }
                        ],
                        "count": 1,
                        "active_count": 1,
                        "redeemed_count": 0,
                        "expired_count": 0,
                    }
                }
            },
        }
    },
)
def list_vouchers(
    *,
    student_id: str = Query(..., min_length=1, description="Student ID number"),
    status: Optional[VoucherStatus] = Query(None, description="Only return vouchers in this state"),
    db: Session = Depends(get_db),
) -> VoucherList:
    """Return every voucher of a student, newest first, with counts per status."""

    listing = voucher_store.list_student_vouchers(db, student_id)
    entries = [
        _voucher_read(voucher, voucher_status)
        for voucher, voucher_status in listing.entries
        if status is None or voucher_status == status
    ]
    return VoucherList(
        vouchers=entries,
        count=len(entries),
        active_count=listing.count(VoucherStatus.ACTIVE),
        redeemed_count=listing.count(VoucherStatus.REDEEMED),
        expired_count=listing.count(VoucherStatus.EXPIRED),
    )


@router.get("/active", response_model=List[VoucherRead], summary="Redeemable vouchers of a student")
def list_active_vouchers(
    student_id: str = Query(..., min_length=1, description="Student ID number"),
    db: Session = Depends(get_db),
) -> List[VoucherRead]:
    vouchers = voucher_store.find_active_vouchers(db, student_id)
    return [_voucher_read(voucher, VoucherStatus.ACTIVE) for voucher in vouchers]


@router.post(
    "/redeem",
    response_model=RedemptionReceipt,
    name=REDEEM_ROUTE_NAME,
    summary="Redeem a voucher against a product",
    responses={
        200: {
            "description": "Voucher consumed and product priced",
            "content": {
                "application/json": {
                    "example": {
                        "message": "Voucher redeemed successfully!",
                        "voucher": {
                            "voucher_code": "EQ-7K2M9QX4LD",
                            "discount_percent": 20,
                            "redeemed_at": "2026-10-19T09:12:44",
                        },
                        "product": {
                            "product_id": "0c6f7f8e-3f0b-4d55-9a55-4c1b0e0b7a11",
                            "name": "Geometry Box",
                            "original_price": "500.00",
                            "discounted_price": "400.00",
                        },
                    }
                }
            },
        },
        400: {
            "model": RedemptionErrorResponse,
            "description": "INVALID_REQUEST, VOUCHER_EXPIRED or PRODUCT_UNAVAILABLE",
        },
        404: {"model": RedemptionErrorResponse, "description": "VOUCHER_NOT_FOUND or PRODUCT_NOT_FOUND"},
        409: {"model": RedemptionErrorResponse, "description": "VOUCHER_ALREADY_REDEEMED"},
        429: {"description": "Too many redemption attempts from this client"},
    },
)
@limiter.limit(redeem_limit)
def redeem_voucher(
    request: Request,
    payload: RedemptionRequest,
    db: Session = Depends(get_db),
) -> RedemptionReceipt:
    """Consume a voucher once and return the discounted price.

    Example request body::

        {
            "voucher_code": "EQ-7K2M9QX4LD",
            "product_id": "0c6f7f8e-3f0b-4d55-9a55-4c1b0e0b7a11"
        }
    """

    try:
        receipt = redemption_service.redeem(
            db,
            voucher_code=payload.voucher_code,
            product_id=payload.product_id,
        )
    except RedemptionError as exc:
        db.rollback()
        raise HTTPException(
            status_code=exc.status_code,
            detail=RedemptionErrorBody(error=exc.code.value, message=exc.detail).model_dump(),
        ) from exc

    return RedemptionReceipt(
        voucher=RedeemedVoucher(
            voucher_code=receipt.voucher_code,
            discount_percent=receipt.discount_percent,
            redeemed_at=receipt.redeemed_at,
        ),
        product=RedeemedProduct(
            product_id=receipt.product_id,
            name=receipt.product_name,
            original_price=receipt.original_price,
            discounted_price=receipt.discounted_price,
        ),
    )
