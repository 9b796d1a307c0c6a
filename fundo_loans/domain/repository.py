"""Persistence contract for the Loan aggregate"""

import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from fundo_loans.domain.models import Loan


class LoanRepository(ABC):
    """
    Storage capability set required by the loan service.

    Every operation is atomic with respect to a single loan. Implementations
    hold no business rules.
    """

    @abstractmethod
    def get_by_id(self, loan_id: uuid.UUID) -> Optional[Loan]:
        """Fetch one loan, None when absent"""

    @abstractmethod
    def get_all(self) -> List[Loan]:
        """Fetch all loans, newest created first"""

    @abstractmethod
    def insert(self, loan: Loan) -> Loan:
        """Persist a new loan and return the stored representation"""

    @abstractmethod
    def update(self, loan: Loan) -> None:
        """
        Persist the mutable state of an existing loan.

        Raises:
            NotFoundError: loan no longer exists
            ConcurrencyConflictError: stored version differs from loan.version
        """

    @abstractmethod
    def delete(self, loan_id: uuid.UUID) -> None:
        """
        Remove a loan.

        Raises:
            NotFoundError: loan does not exist
        """
