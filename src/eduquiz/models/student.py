"""Student domain model."""

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow

class Student(Base):
    """A quiz participant, keyed by the school-issued ID number."""

    __tablename__ = "students"

    student_id = Column(String(64), primary_key=True)
    display_name = Column(String, nullable=False)
    school_name = Column(String)
    email = Column(String)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    quiz_results = relationship("QuizResult", back_populates="student")
    vouchers = relationship("Voucher", back_populates="student")
