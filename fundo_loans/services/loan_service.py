"""Loan service - orchestrates the Loan entity and its repository"""

import logging
import uuid
from typing import List, Optional

from fundo_loans.domain.exceptions import NotFoundError
from fundo_loans.domain.models import Loan, LoanView
from fundo_loans.domain.repository import LoanRepository


class LoanService:
    """
    Application service for loan operations.

    Domain errors raised by the entity propagate unchanged; the service only
    adds NotFoundError for payments against unknown loans. Mapping errors to
    transport responses is left to the caller.
    """

    def __init__(self, repository: LoanRepository):
        self.repository = repository

    def create_loan(self, amount, applicant_name: str) -> LoanView:
        """Create and persist a new active loan"""
        logging.info(
            "Creating loan",
            extra={"step": "loan_create", "applicant_name": applicant_name, "amount": str(amount)},
        )

        loan = Loan.create(amount, applicant_name)
        created = self.repository.insert(loan)

        logging.info(
            "Loan created",
            extra={"step": "loan_created", "loan_id": str(created.id), "amount": str(created.amount)},
        )
        return LoanView.from_loan(created)

    def get_loan(self, loan_id: uuid.UUID) -> Optional[LoanView]:
        """Return the loan view, or None when the loan does not exist"""
        loan = self.repository.get_by_id(loan_id)
        if loan is None:
            logging.warning("Loan not found", extra={"step": "loan_get", "loan_id": str(loan_id)})
            return None
        return LoanView.from_loan(loan)

    def list_loans(self) -> List[LoanView]:
        """All loans, newest first"""
        loans = sorted(self.repository.get_all(), key=lambda loan: loan.created_at, reverse=True)
        logging.info("Retrieved loans", extra={"step": "loan_list", "loan_count": len(loans)})
        return [LoanView.from_loan(loan) for loan in loans]

    def process_payment(self, loan_id: uuid.UUID, amount) -> LoanView:
        """
        Apply a payment to a loan and persist the new balance.

        Flow:
        1. Fetch loan (NotFoundError when absent)
        2. Apply payment on the entity; failures leave storage untouched
        3. Persist through repository.update
        4. Return the updated view

        Raises:
            NotFoundError: loan does not exist
            ValidationError: payment is not a positive amount
            BalanceExceededError: payment exceeds current balance
        """
        logging.info(
            "Processing payment",
            extra={"step": "payment_start", "loan_id": str(loan_id), "payment_amount": str(amount)},
        )

        loan = self.repository.get_by_id(loan_id)
        if loan is None:
            logging.warning("Payment failed: loan not found", extra={"step": "payment_not_found", "loan_id": str(loan_id)})
            raise NotFoundError(loan_id)

        previous_balance = loan.current_balance
        previous_status = loan.status

        loan.apply_payment(amount)
        self.repository.update(loan)

        logging.info(
            "Payment processed",
            extra={
                "step": "payment_complete",
                "loan_id": str(loan_id),
                "previous_balance": str(previous_balance),
                "new_balance": str(loan.current_balance),
                "previous_status": previous_status.value,
                "new_status": loan.status.value,
            },
        )
        return LoanView.from_loan(loan)
