"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session
from fundo_loans.domain.repository import LoanRepository
from fundo_loans.infrastructure.database.repositories import SqlAlchemyLoanRepository
from fundo_loans.infrastructure.database.session import get_db
from fundo_loans.services.loan_service import LoanService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_loan_repository(db: Session = Depends(get_db)) -> LoanRepository:
    """Provide a repository bound to the request's session"""
    return SqlAlchemyLoanRepository(db)


def get_loan_service(repository: LoanRepository = Depends(get_loan_repository)) -> LoanService:
    """Provide the loan service for one request"""
    return LoanService(repository)
