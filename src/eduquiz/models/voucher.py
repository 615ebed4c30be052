"""Reward voucher model."""

import enum
import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow

class VoucherStatus(str, enum.Enum):
    """Derived voucher state; computed on read, never stored."""

    ACTIVE = "active"
    REDEEMED = "redeemed"
    EXPIRED = "expired"

class Voucher(Base):
    """Single-use discount earned by a ranked student."""

    __tablename__ = "vouchers"
    __table_args__ = (
        CheckConstraint("discount_percent >= 0 AND discount_percent <= 100", name="vouchers_discount_range"),
        UniqueConstraint("student_id", "reward_date", name="vouchers_one_reward_per_day"),
    )

    voucher_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    voucher_code = Column(String(32), nullable=False, unique=True, index=True)
    student_id = Column(String(64), ForeignKey("students.student_id", ondelete="RESTRICT"), nullable=False, index=True)
    discount_percent = Column(Integer, nullable=False)
    rank_at_issue = Column(Integer, nullable=False)
    reward_date = Column(Date)
    generated_date = Column(DateTime, default=utcnow, nullable=False)
    expiry_date = Column(DateTime)
    is_redeemed = Column(Boolean, nullable=False, default=False)
    redeemed_at = Column(DateTime)
    # Not a foreign key: the reference is recorded before the product is validated.
    redeemed_product_id = Column(String(36))

    student = relationship("Student", back_populates="vouchers")
