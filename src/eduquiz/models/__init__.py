"""SQLAlchemy models for EduQuiz rewards."""

from .product import Product
from .quiz_result import QuizResult
from .student import Student
from .voucher import Voucher, VoucherStatus

__all__ = [
    "Product",
    "QuizResult",
    "Student",
    "Voucher",
    "VoucherStatus",
]
