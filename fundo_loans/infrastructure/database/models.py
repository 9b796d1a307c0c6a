"""SQLAlchemy ORM models for loan storage"""

import uuid
from sqlalchemy import Column, String, Numeric, DateTime, Integer, Uuid, Index
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from fundo_loans.domain.models import LoanStatus

Base = declarative_base()


class LoanRecord(Base):
    """Persisted loan row"""

    __tablename__ = "loans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    amount = Column(Numeric(18, 2), nullable=False)
    current_balance = Column(Numeric(18, 2), nullable=False)
    applicant_name = Column(String(100), nullable=False)
    status = Column(String(15), nullable=False, default=LoanStatus.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    # Optimistic concurrency token, bumped on every update
    version = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        Index("ix_loans_status", "status"),
        Index("ix_loans_applicant_name", "applicant_name"),
        Index("ix_loans_created_at", "created_at"),
    )
