"""Reward catalogue endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ...core.cache import CacheBackend, get_cache
from ...core.database import get_db
from ...schemas import ProductCreate, ProductList, ProductRead
from ...services import product_service
from ...services.product_service import ProductRuleViolation

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductList, summary="List redeemable products")
def list_products(
    category: Optional[str] = Query(None, description="Only products of this category"),
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache),
) -> ProductList:
    """Active products a voucher can be redeemed against, newest first."""

    products = product_service.list_active_products(db, cache, category=category)
    return ProductList(
        products=[ProductRead.model_validate(product) for product in products],
        count=len(products),
    )


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add a product",
    responses={400: {"description": "Invalid product"}},
)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache),
) -> ProductRead:
    """Add a catalogue product.

    Example request body::

        {
            "product_name": "Geometry Box",
            "original_price": "500.00",
            "category": "stationery"
        }
    """

    try:
        product = product_service.create_product(
            db,
            cache,
            product_name=payload.product_name,
            original_price=payload.original_price,
            category=payload.category,
            is_active=payload.is_active,
        )
        db.commit()
        db.refresh(product)
        return ProductRead.model_validate(product)
    except ProductRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
