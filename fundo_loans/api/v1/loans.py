"""/api/loans - create, list, fetch and pay loans"""

import uuid
from typing import List
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from fundo_loans.api.v1.schemas import CreateLoanRequest, ErrorResponse, LoanResponse, PaymentRequest
from fundo_loans.api.dependencies import get_loan_service
from fundo_loans.infrastructure.database.session import get_db
from fundo_loans.services.loan_service import LoanService
from fundo_loans.domain.exceptions import DomainException, NotFoundError
from fundo_loans.domain.models import LoanStatus
from fundo_loans.infrastructure.observability.metrics import loan_created_counter, record_payment

router = APIRouter()


def parse_loan_id(loan_id: str) -> uuid.UUID:
    """Malformed ids never match a loan, so they are reported as not found"""
    try:
        return uuid.UUID(loan_id)
    except ValueError:
        raise NotFoundError(loan_id)


@router.get("/loans", response_model=List[LoanResponse])
def list_loans(service: LoanService = Depends(get_loan_service)):
    """
    Retrieve all loans.

    Returns:
        Loans ordered by creation date, newest first
    """
    return [LoanResponse.from_view(view) for view in service.list_loans()]


@router.get(
    "/loans/{loan_id}",
    response_model=LoanResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_loan(loan_id: str, service: LoanService = Depends(get_loan_service)):
    """Retrieve a single loan by its UUID"""
    loan_uuid = parse_loan_id(loan_id)
    view = service.get_loan(loan_uuid)

    if view is None:
        raise NotFoundError(loan_uuid)

    return LoanResponse.from_view(view)


@router.post(
    "/loans",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def create_loan(
    request_body: CreateLoanRequest,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    service: LoanService = Depends(get_loan_service),
):
    """
    Create a loan whose balance starts at the full amount.

    Sample request:
        {"amount": 25000.00, "applicantName": "John Doe"}
    """
    try:
        view = service.create_loan(request_body.amount, request_body.applicant_name)
        db.commit()
    except DomainException:
        db.rollback()
        raise

    loan_created_counter.inc()
    response.headers["Location"] = str(request.url_for("get_loan", loan_id=str(view.id)))
    return LoanResponse.from_view(view)


@router.post(
    "/loans/{loan_id}/payment",
    response_model=LoanResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
def process_payment(
    loan_id: str,
    request_body: PaymentRequest,
    db: Session = Depends(get_db),
    service: LoanService = Depends(get_loan_service),
):
    """
    Apply a payment, reducing the current balance.

    When the payment brings the balance to zero the loan status becomes "paid".
    """
    loan_uuid = parse_loan_id(loan_id)

    try:
        view = service.process_payment(loan_uuid, request_body.amount)
        db.commit()
    except DomainException:
        db.rollback()
        record_payment(applied=False)
        raise

    record_payment(applied=True, paid_off=view.status == LoanStatus.PAID)
    return LoanResponse.from_view(view)
