"""Quiz submission and daily leaderboard endpoints."""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from ...core.cache import CacheBackend, get_cache
from ...core.database import get_db
from ...core.rate_limit import limiter, quiz_submit_limit
from ...schemas import LeaderboardEntry, QuizResultCreate, QuizResultRead
from ...services import ranking_service
from ...services.ranking_service import QuizRuleViolation
from ...utils.datetime import quiz_day

router = APIRouter(tags=["quiz"])


@router.post(
    "/quiz-results",
    response_model=QuizResultRead,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a quiz attempt",
    responses={
        400: {"description": "Business rule violation"},
        404: {"description": "Student not found"},
        429: {"description": "Too many submissions from this client"},
    },
)
@limiter.limit(quiz_submit_limit)
def submit_quiz_result(
    request: Request,
    payload: QuizResultCreate,
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache),
) -> QuizResultRead:
    """Record a quiz attempt.

    Example request body::

        {
            "student_id": "S1002",
            "score": 18,
            "total_questions": 20,
            "level": "senior",
            "time_taken": 312
        }
    """

    try:
        result = ranking_service.submit_result(
            db,
            cache,
            student_id=payload.student_id,
            score=payload.score,
            total_questions=payload.total_questions,
            level=payload.level,
            time_taken=payload.time_taken,
            attempt_date=payload.attempt_date,
        )
        db.commit()
        db.refresh(result)
        return QuizResultRead.model_validate(result)
    except QuizRuleViolation as exc:
        db.rollback()
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


@router.get(
    "/leaderboard",
    response_model=List[LeaderboardEntry],
    summary="Top rankers of a day",
    responses={
        200: {
            "description": "Attempts ordered by score, then time taken",
            "content": {
                "application/json": {
                    "example": [
                        {
                            "rank": 1,
                            "student_id": "S1002",
                            "display_name": "Bianca Liu",
                            "school_name": "Green Valley High",
                            "score": 19,
                            "total_questions": 20,
                            "time_taken": 280,
                        }
                    ]
                }
            },
        }
    },
)
def get_leaderboard(
    day: Optional[date] = Query(None, description="Quiz day, defaults to today (UTC)"),
    limit: int = Query(10, ge=1, le=100, description="Number of rankers to return"),
    db: Session = Depends(get_db),
    cache: CacheBackend = Depends(get_cache),
) -> List[LeaderboardEntry]:
    """Return the day's best attempts in rank order."""

    entries = ranking_service.top_rankers(db, cache, day=day or quiz_day(), limit=limit)
    return [LeaderboardEntry.model_validate(entry) for entry in entries]
