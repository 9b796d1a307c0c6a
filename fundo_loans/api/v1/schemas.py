"""Pydantic schemas for API request/response validation"""

import uuid
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from fundo_loans.domain.models import LoanView

# A loan never exceeds this, so no valid payment does either
MAX_AMOUNT = Decimal("1000000")


def require_json_number(value):
    """Reject strings and booleans that lax Decimal parsing would coerce"""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise ValueError("Input should be a number")
    return value


# Request amounts must arrive as JSON numbers
JsonAmount = Annotated[Decimal, BeforeValidator(require_json_number)]

# Decimal amounts travel as JSON numbers
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Request model with exact-match lowerCamelCase field names"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=False)


class CreateLoanRequest(CamelModel):
    """Request body for POST /api/loans"""

    amount: JsonAmount = Field(
        ..., gt=0, le=MAX_AMOUNT, decimal_places=2, description="Loan principal, up to 1,000,000"
    )
    applicant_name: str = Field(..., min_length=2, max_length=100, description="Applicant full name")


class PaymentRequest(CamelModel):
    """Request body for POST /api/loans/{id}/payment"""

    amount: JsonAmount = Field(..., gt=0, le=MAX_AMOUNT, decimal_places=2, description="Payment amount")


class LoanResponse(BaseModel):
    """Loan representation returned by every loan endpoint"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: uuid.UUID
    amount: Money
    current_balance: Money
    applicant_name: str
    status: str

    @classmethod
    def from_view(cls, view: LoanView) -> "LoanResponse":
        return cls(
            id=view.id,
            amount=view.amount,
            current_balance=view.current_balance,
            applicant_name=view.applicant_name,
            status=view.status.value,
        )


class ErrorResponse(BaseModel):
    """Error envelope for 4xx/5xx responses"""

    message: str
