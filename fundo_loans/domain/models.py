"""Domain models - the Loan aggregate and its read-only projection"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum

from fundo_loans.domain.exceptions import (
    BalanceExceededError,
    InvariantViolationError,
    ValidationError,
)

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100


class LoanStatus(str, Enum):
    """Valid loan status values"""

    ACTIVE = "active"
    PAID = "paid"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_money(value, field: str = "amount") -> Decimal:
    """
    Coerce a monetary input to Decimal.

    Floats go through str() so 0.1 stays 0.1. More than two decimal places
    is rejected since balances are stored as fixed-point cents.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number.", field=field)
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number.", field=field)

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number.", field=field)
    if amount.normalize().as_tuple().exponent < -2:
        raise ValidationError(f"{field} cannot have more than two decimal places.", field=field)
    return amount


class Loan:
    """
    Loan aggregate root.

    Write-once fields (id, amount, applicant_name, created_at) are exposed as
    read-only properties. The balance only moves through apply_payment, and
    status is always derived from it.

    The constructor rehydrates a loan from stored state and does not
    validate; new loans go through Loan.create().
    """

    def __init__(
        self,
        id: uuid.UUID,
        amount: Decimal,
        current_balance: Decimal,
        applicant_name: str,
        created_at: datetime,
        updated_at: datetime,
        version: int = 1,
    ):
        self._id = id
        self._amount = Decimal(amount)
        self._current_balance = Decimal(current_balance)
        self._applicant_name = applicant_name
        self._created_at = created_at
        self._updated_at = updated_at
        # Optimistic concurrency token, maintained by the repository
        self.version = version

    @classmethod
    def create(cls, amount, applicant_name: str) -> "Loan":
        """
        Create a new active loan whose balance equals the principal.

        Raises:
            ValidationError: non-positive amount or invalid applicant name
        """
        principal = to_money(amount)
        if principal <= 0:
            raise ValidationError("Loan amount must be greater than zero.", field="amount")

        if not isinstance(applicant_name, str) or not applicant_name.strip():
            raise ValidationError("Applicant name is required.", field="applicant_name")
        name = applicant_name.strip()
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            raise ValidationError(
                f"Applicant name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters.",
                field="applicant_name",
            )

        now = utc_now()
        return cls(
            id=uuid.uuid4(),
            amount=principal,
            current_balance=principal,
            applicant_name=name,
            created_at=now,
            updated_at=now,
        )

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def amount(self) -> Decimal:
        return self._amount

    @property
    def current_balance(self) -> Decimal:
        return self._current_balance

    @property
    def applicant_name(self) -> str:
        return self._applicant_name

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def status(self) -> LoanStatus:
        return LoanStatus.PAID if self._current_balance <= 0 else LoanStatus.ACTIVE

    def apply_payment(self, amount) -> None:
        """
        Debit a payment from the current balance.

        A paid loan has a zero balance, so any positive payment against it is
        rejected as exceeding the balance.

        Raises:
            ValidationError: payment is not a positive amount
            BalanceExceededError: payment is larger than the current balance
            InvariantViolationError: balance left the [0, amount] range
        """
        payment = to_money(amount)
        if payment <= 0:
            raise ValidationError("Payment amount must be greater than zero.", field="amount")
        if payment > self._current_balance:
            raise BalanceExceededError(payment, self._current_balance)

        previous_balance, previous_updated_at = self._current_balance, self._updated_at
        self._current_balance = self._current_balance - payment
        self._updated_at = utc_now()

        if not self.is_valid():
            self._current_balance, self._updated_at = previous_balance, previous_updated_at
            raise InvariantViolationError(f"Loan {self._id} entered an invalid state after payment.")

    def is_valid(self) -> bool:
        """Balance stays within [0, amount]"""
        return Decimal(0) <= self._current_balance <= self._amount

    def __repr__(self) -> str:
        return (
            f"Loan(id={self._id!s}, amount={self._amount}, current_balance={self._current_balance}, "
            f"status={self.status.value})"
        )


@dataclass(frozen=True)
class LoanView:
    """External projection of a loan"""

    id: uuid.UUID
    amount: Decimal
    current_balance: Decimal
    applicant_name: str
    status: LoanStatus

    @classmethod
    def from_loan(cls, loan: Loan) -> "LoanView":
        return cls(
            id=loan.id,
            amount=loan.amount,
            current_balance=loan.current_balance,
            applicant_name=loan.applicant_name,
            status=loan.status,
        )
