"""Reward catalogue reads and writes."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.cache import CacheBackend, CacheKeys
from ..core.config import get_settings
from ..models import Product


class ProductRuleViolation(Exception):
    """Raised when a product payload is rejected."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


def get_product(session: Session, product_id: str) -> Optional[Product]:
    return session.get(Product, product_id)


def _query_active(session: Session, category: Optional[str] = None) -> List[Product]:
    stmt = select(Product).where(Product.is_active.is_(True)).order_by(Product.created_at.desc())
    if category:
        stmt = stmt.where(Product.category == category)
    products = session.execute(stmt).scalars().all()
    # Cached lists outlive the session, so hand out detached, fully loaded rows.
    for product in products:
        session.expunge(product)
    return list(products)


def list_active_products(
    session: Session,
    cache: CacheBackend,
    *,
    category: Optional[str] = None,
) -> List[Product]:
    """Active products, newest first.

    Only the unfiltered catalogue is cached; category queries always hit the
    database.
    """

    if category:
        return _query_active(session, category)
    return cache.get_or_set(
        CacheKeys.PRODUCTS_ALL,
        get_settings().products_cache_ttl,
        lambda: _query_active(session),
    )


def create_product(
    session: Session,
    cache: CacheBackend,
    *,
    product_name: str,
    original_price: Decimal,
    category: Optional[str] = None,
    is_active: bool = True,
) -> Product:
    """Insert a product and drop the cached catalogue."""

    if not product_name or not product_name.strip():
        raise ProductRuleViolation("Product name is required.")
    if original_price < 0:
        raise ProductRuleViolation("Price cannot be negative.")

    product = Product(
        product_name=product_name.strip(),
        original_price=original_price,
        category=category,
        is_active=is_active,
    )
    session.add(product)
    session.flush()
    cache.delete(CacheKeys.PRODUCTS_ALL)
    return product
