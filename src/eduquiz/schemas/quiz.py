"""Pydantic schemas for quiz submissions and the leaderboard."""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class QuizResultCreate(BaseModel):
    """Request body for submitting a quiz attempt."""

    student_id: str = Field(..., min_length=1, max_length=64)
    score: int = Field(..., ge=0)
    total_questions: int = Field(..., gt=0)
    level: str = Field(..., min_length=1, max_length=50)
    time_taken: int = Field(0, ge=0, description="Seconds spent on the quiz.")
    attempt_date: Optional[date] = None


class QuizResultRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    result_id: str
    student_id: str
    score: int
    total_questions: int
    level: str
    time_taken: int
    attempt_date: date
    submitted_at: datetime
    rank: Optional[int] = None


class LeaderboardEntry(BaseModel):
    """One ranked attempt of the day."""

    model_config = ConfigDict(from_attributes=True)

    rank: int = Field(..., ge=1)
    student_id: str
    display_name: str
    school_name: Optional[str]
    score: int = Field(..., ge=0)
    total_questions: int
    time_taken: int
