"""Pytest fixtures for testing"""

import os

# Point settings at sqlite before the application modules are imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SEED_DEMO_DATA", "false")

import uuid
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from fundo_loans.api.main import create_app
from fundo_loans.domain.models import Loan
from fundo_loans.infrastructure.database.models import Base
from fundo_loans.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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
def make_loan():
    """Factory for rehydrated loans with arbitrary balances"""

    def _make_loan(amount: str = "10000.00", current_balance: str | None = None, name: str = "John Doe", age_days: int = 0) -> Loan:
        created_at = datetime.now(timezone.utc) - timedelta(days=age_days)
        return Loan(
            id=uuid.uuid4(),
            amount=Decimal(amount),
            current_balance=Decimal(current_balance if current_balance is not None else amount),
            applicant_name=name,
            created_at=created_at,
            updated_at=created_at,
        )

    return _make_loan
