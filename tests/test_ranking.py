"""Quiz intake, daily ranking and the cached leaderboard."""
from datetime import date, datetime, timedelta

import pytest

from eduquiz.core.cache import CacheKeys
from eduquiz.services import ranking_service
from eduquiz.services.ranking_service import QuizRuleViolation

NOW = datetime(2026, 10, 19, 12, 0, 0)
DAY = date(2026, 10, 19)


def _submit(db_session, cache, student_id, score, time_taken, minutes_ago=0, total=20):
    result = ranking_service.submit_result(
        db_session,
        cache,
        student_id=student_id,
        score=score,
        total_questions=total,
        level="senior",
        time_taken=time_taken,
        now=NOW - timedelta(minutes=minutes_ago),
    )
    db_session.commit()
    return result


def test_rank_day_orders_by_score_then_time_then_submission(db_session, cache, make_student):
    for student_id in ("A", "B", "C", "D"):
        make_student(student_id, display_name=f"Student {student_id}")
    _submit(db_session, cache, "A", score=15, time_taken=100)
    _submit(db_session, cache, "B", score=18, time_taken=300)
    _submit(db_session, cache, "C", score=18, time_taken=200, minutes_ago=1)
    _submit(db_session, cache, "D", score=18, time_taken=200, minutes_ago=5)

    ranked = ranking_service.rank_day(db_session, DAY, now=NOW)

    assert [(result.student_id, result.rank) for result in ranked] == [("D", 1), ("C", 2), ("B", 3), ("A", 4)]
    assert all(result.rank_calculated_at == NOW for result in ranked)


def test_submit_rejects_score_above_total(db_session, cache, make_student):
    make_student("A")
    with pytest.raises(QuizRuleViolation):
        ranking_service.submit_result(
            db_session, cache, student_id="A", score=21, total_questions=20, level="senior", now=NOW
        )


def test_submit_for_unknown_student_is_not_found(db_session, cache):
    with pytest.raises(QuizRuleViolation) as exc_info:
        ranking_service.submit_result(
            db_session, cache, student_id="ghost", score=1, total_questions=20, level="senior", now=NOW
        )
    assert exc_info.value.status_code == 404


def test_top_rankers_is_cached_until_a_new_submission(db_session, cache, make_student):
    make_student("A", display_name="Alex Rao")
    make_student("B", display_name="Bianca Liu")
    _submit(db_session, cache, "A", score=10, time_taken=100)

    first = ranking_service.top_rankers(db_session, cache, day=DAY, limit=5)
    assert [entry.student_id for entry in first] == ["A"]
    assert cache.get(CacheKeys.rankers(DAY, 5)) == first

    _submit(db_session, cache, "B", score=12, time_taken=100)
    assert cache.get(CacheKeys.rankers(DAY, 5)) is None

    second = ranking_service.top_rankers(db_session, cache, day=DAY, limit=5)
    assert [(entry.rank, entry.display_name) for entry in second] == [(1, "Bianca Liu"), (2, "Alex Rao")]
