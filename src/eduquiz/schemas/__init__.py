"""Public schema exports."""

from .product import ProductCreate, ProductList, ProductRead
from .quiz import LeaderboardEntry, QuizResultCreate, QuizResultRead
from .voucher import (
    RedeemedProduct,
    RedeemedVoucher,
    RedemptionErrorBody,
    RedemptionErrorResponse,
    RedemptionReceipt,
    RedemptionRequest,
    VoucherList,
    VoucherRead,
)

__all__ = [
    "LeaderboardEntry",
    "ProductCreate",
    "ProductList",
    "ProductRead",
    "QuizResultCreate",
    "QuizResultRead",
    "RedeemedProduct",
    "RedeemedVoucher",
    "RedemptionErrorBody",
    "RedemptionErrorResponse",
    "RedemptionReceipt",
    "RedemptionRequest",
    "VoucherList",
    "VoucherRead",
]
