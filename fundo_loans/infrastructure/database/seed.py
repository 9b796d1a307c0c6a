"""Demo loans for local development"""

import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from fundo_loans.domain.models import Loan
from fundo_loans.infrastructure.database.models import LoanRecord
from fundo_loans.infrastructure.database.repositories import SqlAlchemyLoanRepository


def _utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


# Static ids and dates so reseeding produces identical rows
DEMO_LOANS = [
    Loan(
        id=uuid.UUID("11111111-1111-1111-1111-111111111111"),
        amount=Decimal("25000.00"),
        current_balance=Decimal("18750.00"),
        applicant_name="John Doe",
        created_at=_utc(2025, 7, 1),
        updated_at=_utc(2025, 12, 1),
    ),
    Loan(
        id=uuid.UUID("22222222-2222-2222-2222-222222222222"),
        amount=Decimal("15000.00"),
        current_balance=Decimal("0.00"),
        applicant_name="Jane Smith",
        created_at=_utc(2025, 1, 1),
        updated_at=_utc(2025, 11, 1),
    ),
    Loan(
        id=uuid.UUID("33333333-3333-3333-3333-333333333333"),
        amount=Decimal("50000.00"),
        current_balance=Decimal("32500.00"),
        applicant_name="Robert Johnson",
        created_at=_utc(2025, 5, 1),
        updated_at=_utc(2025, 12, 17),
    ),
    Loan(
        id=uuid.UUID("44444444-4444-4444-4444-444444444444"),
        amount=Decimal("10000.00"),
        current_balance=Decimal("0.00"),
        applicant_name="Emily Williams",
        created_at=_utc(2024, 7, 1),
        updated_at=_utc(2025, 9, 1),
    ),
    Loan(
        id=uuid.UUID("55555555-5555-5555-5555-555555555555"),
        amount=Decimal("75000.00"),
        current_balance=Decimal("72000.00"),
        applicant_name="Michael Brown",
        created_at=_utc(2025, 10, 1),
        updated_at=_utc(2026, 1, 2),
    ),
]


def seed_demo_loans(db: Session) -> int:
    """
    Insert demo loans into an empty table and commit.

    Returns:
        Number of loans inserted (0 when the table already has rows)
    """
    if db.query(LoanRecord.id).first() is not None:
        return 0

    repository = SqlAlchemyLoanRepository(db)
    for loan in DEMO_LOANS:
        repository.insert(loan)
    db.commit()

    logging.info("Seeded demo loans", extra={"step": "seed", "loan_count": len(DEMO_LOANS)})
    return len(DEMO_LOANS)
