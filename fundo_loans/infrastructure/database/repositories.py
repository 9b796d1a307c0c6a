"""Data access layer for loans"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.orm import Session
from fundo_loans.infrastructure.database.models import LoanRecord
from fundo_loans.domain.exceptions import ConcurrencyConflictError, NotFoundError
from fundo_loans.domain.models import Loan
from fundo_loans.domain.repository import LoanRepository


def _as_utc(value: datetime) -> datetime:
    # sqlite drops tzinfo; stored values are always UTC
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def to_domain(record: LoanRecord) -> Loan:
    """Rehydrate a Loan entity from its row"""
    return Loan(
        id=record.id,
        amount=record.amount,
        current_balance=record.current_balance,
        applicant_name=record.applicant_name,
        created_at=_as_utc(record.created_at),
        updated_at=_as_utc(record.updated_at),
        version=record.version,
    )


class SqlAlchemyLoanRepository(LoanRepository):
    """
    Loan repository backed by a SQLAlchemy session.

    Writes are flushed, not committed: the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, loan_id: uuid.UUID) -> Optional[Loan]:
        """Fetch loan by primary key"""
        record = (
            self.db.query(LoanRecord)
            .filter(LoanRecord.id == loan_id)
            .first()
        )
        return to_domain(record) if record else None

    def get_all(self) -> List[Loan]:
        """Fetch all loans, newest first"""
        records = (
            self.db.query(LoanRecord)
            .order_by(LoanRecord.created_at.desc())
            .all()
        )
        return [to_domain(r) for r in records]

    def insert(self, loan: Loan) -> Loan:
        """Persist new loan to database"""
        record = LoanRecord(
            id=loan.id,
            amount=loan.amount,
            current_balance=loan.current_balance,
            applicant_name=loan.applicant_name,
            status=loan.status.value,
            created_at=loan.created_at,
            updated_at=loan.updated_at,
            version=loan.version,
        )
        self.db.add(record)
        self.db.flush()  # Apply defaults without committing
        return to_domain(record)

    def update(self, loan: Loan) -> None:
        """
        Write balance, status and timestamp guarded by the version column.

        A stale version means another request updated the row after this
        loan was read.
        """
        updated_rows = (
            self.db.query(LoanRecord)
            .filter(LoanRecord.id == loan.id, LoanRecord.version == loan.version)
            .update(
                {
                    LoanRecord.current_balance: loan.current_balance,
                    LoanRecord.status: loan.status.value,
                    LoanRecord.updated_at: loan.updated_at,
                    LoanRecord.version: loan.version + 1,
                },
                synchronize_session="evaluate",
            )
        )

        if updated_rows == 0:
            exists = (
                self.db.query(LoanRecord.id)
                .filter(LoanRecord.id == loan.id)
                .first()
            )
            if exists is None:
                raise NotFoundError(loan.id)
            raise ConcurrencyConflictError(loan.id)

        loan.version += 1

    def delete(self, loan_id: uuid.UUID) -> None:
        """Delete loan by primary key"""
        deleted_rows = (
            self.db.query(LoanRecord)
            .filter(LoanRecord.id == loan_id)
            .delete(synchronize_session="evaluate")
        )
        if deleted_rows == 0:
            raise NotFoundError(loan_id)
