"""Pytest fixtures for testing"""

import os

# Point the app at SQLite before khata.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from khata.api.main import create_app
from khata.infrastructure.database.models import Base
from khata.infrastructure.database.session import get_db
from khata.domain.models import Transaction


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

BASE_TIME = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def make_txn() -> Callable[..., Transaction]:
    """Build domain transactions: make_txn(1, "credit", 15000, day=0)"""

    def _make(id: int, type: str, amount_cents, day: float = 0, customer_id: str = "cust-1", **kwargs) -> Transaction:
        return Transaction(
            id=id,
            customer_id=customer_id,
            type=type,
            amount_cents=amount_cents,
            created_at=BASE_TIME + timedelta(days=day),
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_transactions(make_txn) -> list[Transaction]:
    """Sale, part payment, second sale on consecutive days"""
    return [
        make_txn(1, "credit", 15000, day=1),
        make_txn(2, "debit", 8000, day=2),
        make_txn(3, "credit", 12000, day=3),
    ]
