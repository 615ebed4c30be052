"""Reward catalogue product model."""

import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Numeric, String

from ..core.database import Base
from ..utils.datetime import utcnow


class Product(Base):
    """Item a voucher discount can be applied to."""

    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("original_price >= 0", name="products_price_non_negative"),
    )

    product_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    product_name = Column(String, nullable=False)
    original_price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    category = Column(String, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
