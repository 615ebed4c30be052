"""Service layer exports."""

from . import (
    issuance_service,
    product_service,
    ranking_service,
    redemption_service,
    voucher_store,
)

__all__ = [
    "issuance_service",
    "product_service",
    "ranking_service",
    "redemption_service",
    "voucher_store",
]
