"""Pytest fixtures: temporary SQLite database, sessions, cache and test client."""
import os
import tempfile
from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

# A file database (not :memory:) so concurrent sessions see each other's commits.
# Must be set before the app is imported.
_DB_DIR = tempfile.mkdtemp(prefix="eduquiz-tests-")
os.environ.setdefault("EDUQUIZ_DATABASE_URL", f"sqlite:///{os.path.join(_DB_DIR, 'eduquiz.db')}")
os.environ.setdefault("EDUQUIZ_ENABLE_SCHEDULER", "false")
os.environ.setdefault("EDUQUIZ_LOG_LEVEL", "WARNING")

from eduquiz import models  # noqa: E402
from eduquiz.core.cache import InMemoryCache  # noqa: E402
from eduquiz.core.database import Base, SessionLocal, engine  # noqa: E402
from eduquiz.core.rate_limit import limiter  # noqa: E402
from eduquiz.main import app  # noqa: E402

NOW = datetime(2026, 10, 19, 12, 0, 0)


@pytest.fixture(autouse=True)
def _fresh_state():
    """Empty tables, limiter counters and app cache for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    limiter.reset()
    app.state.cache.clear()
    yield


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def cache():
    return InMemoryCache()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_student(db_session):
    def _make(student_id="S1001", display_name="Alex Rao", school_name="Green Valley High"):
        student = models.Student(student_id=student_id, display_name=display_name, school_name=school_name)
        db_session.add(student)
        db_session.commit()
        return student

    return _make


@pytest.fixture
def make_product(db_session):
    def _make(name="Geometry Box", price="500.00", is_active=True, category="stationery"):
        product = models.Product(
            product_name=name,
            original_price=Decimal(price),
            is_active=is_active,
            category=category,
        )
        db_session.add(product)
        db_session.commit()
        return product.product_id

    return _make


@pytest.fixture
def make_voucher(db_session):
    """Insert a voucher; ``expires_in`` is a timedelta from ``NOW`` or None for no expiry."""

    def _make(code, student_id="S1001", discount_percent=20, expires_in=None, is_redeemed=False, rank=5, generated=None):
        if db_session.get(models.Student, student_id) is None:
            db_session.add(models.Student(student_id=student_id, display_name=f"Student {student_id}"))
        voucher = models.Voucher(
            voucher_code=code,
            student_id=student_id,
            discount_percent=discount_percent,
            rank_at_issue=rank,
            generated_date=generated or NOW - timedelta(days=1),
            expiry_date=NOW + expires_in if expires_in is not None else None,
            is_redeemed=is_redeemed,
            redeemed_at=NOW - timedelta(hours=1) if is_redeemed else None,
        )
        db_session.add(voucher)
        db_session.commit()
        return code

    return _make
