"""Daily quiz attempt model."""

import uuid

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from ..core.database import Base
from ..utils.datetime import utcnow

class QuizResult(Base):
    """One student's attempt at the quiz of a given day."""

    __tablename__ = "quiz_results"
    __table_args__ = (
        CheckConstraint("score >= 0", name="quiz_results_score_non_negative"),
        CheckConstraint("score <= total_questions", name="quiz_results_score_bounded"),
        Index("ix_quiz_results_day_score", "attempt_date", "score", "time_taken"),
    )

    result_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(64), ForeignKey("students.student_id", ondelete="RESTRICT"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    level = Column(String, nullable=False)
    time_taken = Column(Integer, nullable=False, default=0)
    attempt_date = Column(Date, nullable=False)
    submitted_at = Column(DateTime, default=utcnow, nullable=False)
    rank = Column(Integer, index=True)
    rank_calculated_at = Column(DateTime)

    student = relationship("Student", back_populates="quiz_results")
