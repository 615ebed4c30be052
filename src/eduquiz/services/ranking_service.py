"""Quiz result intake and daily ranking."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from ..core.cache import CacheBackend, CacheKeys
from ..core.config import get_settings
from ..models import QuizResult, Student
from ..utils.datetime import as_naive_utc, quiz_day, utcnow


class QuizRuleViolation(Exception):
    """Raised when a quiz submission breaks intake rules."""

    def __init__(self, detail: str, status_code: int = 400) -> None:
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


@dataclass(frozen=True)
class RankedEntry:
    """Leaderboard row; detached from the session so it can be cached."""

    rank: int
    student_id: str
    display_name: str
    school_name: Optional[str]
    score: int
    total_questions: int
    time_taken: int


def _ensure_student(session: Session, student_id: str) -> Student:
    student = session.get(Student, student_id)
    if student is None:
        raise QuizRuleViolation(f"Student {student_id} not found", status_code=404)
    return student


def submit_result(
    session: Session,
    cache: CacheBackend,
    *,
    student_id: str,
    score: int,
    total_questions: int,
    level: str,
    time_taken: int = 0,
    attempt_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> QuizResult:
    """Record a quiz attempt and drop cached leaderboards."""

    if score > total_questions:
        raise QuizRuleViolation("Score cannot exceed the number of questions.")

    now = as_naive_utc(now) if now else utcnow()
    student = _ensure_student(session, student_id)

    result = QuizResult(
        student=student,
        score=score,
        total_questions=total_questions,
        level=level,
        time_taken=time_taken,
        attempt_date=attempt_date or quiz_day(now),
        submitted_at=now,
    )
    session.add(result)
    session.flush()
    cache.delete_by_prefix(CacheKeys.TOP_RANKERS)
    return result


def _ordered_day(day: date):
    return (
        select(QuizResult)
        .where(QuizResult.attempt_date == day)
        .order_by(
            QuizResult.score.desc(),
            QuizResult.time_taken.asc(),
            QuizResult.submitted_at.asc(),
            QuizResult.result_id.asc(),
        )
    )


def rank_day(session: Session, day: date, *, now: Optional[datetime] = None) -> List[QuizResult]:
    """Assign ranks 1..n to the day's results.

    Higher score wins; ties go to the faster attempt, then the earlier
    submission.
    """

    now = as_naive_utc(now) if now else utcnow()
    results = session.execute(_ordered_day(day)).scalars().all()
    for position, result in enumerate(results, start=1):
        result.rank = position
        result.rank_calculated_at = now
    session.flush()
    return list(results)


def _load_top(session: Session, day: date, limit: int) -> List[RankedEntry]:
    stmt = _ordered_day(day).options(joinedload(QuizResult.student)).limit(limit)
    rows = session.execute(stmt).scalars().all()
    return [
        RankedEntry(
            rank=position,
            student_id=result.student_id,
            display_name=result.student.display_name,
            school_name=result.student.school_name,
            score=result.score,
            total_questions=result.total_questions,
            time_taken=result.time_taken,
        )
        for position, result in enumerate(rows, start=1)
    ]


def top_rankers(
    session: Session,
    cache: CacheBackend,
    *,
    day: date,
    limit: int = 10,
) -> List[RankedEntry]:
    """Best results of ``day`` in rank order."""

    limit = max(1, min(limit, 100))
    return cache.get_or_set(
        CacheKeys.rankers(day, limit),
        get_settings().rankers_cache_ttl,
        lambda: _load_top(session, day, limit),
    )
