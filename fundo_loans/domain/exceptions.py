"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Caller-supplied input violates a precondition"""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class BalanceExceededError(DomainException):
    """Payment amount is larger than the outstanding balance"""

    def __init__(self, amount, current_balance):
        super().__init__(
            f"Payment amount ({amount:.2f}) cannot exceed current balance ({current_balance:.2f})."
        )
        self.amount = amount
        self.current_balance = current_balance


class NotFoundError(DomainException):
    """Referenced loan does not exist"""

    def __init__(self, loan_id):
        super().__init__(f"Loan with ID {loan_id} not found")
        self.loan_id = loan_id


class ConcurrencyConflictError(DomainException):
    """Loan was modified by another request since it was read"""

    def __init__(self, loan_id):
        super().__init__(f"Loan with ID {loan_id} was modified concurrently, retry the request")
        self.loan_id = loan_id


class InvariantViolationError(DomainException):
    """Loan reached an inconsistent state; indicates a programming error"""

    pass
