"""Cash card schemas."""

import math
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class CashCardAmountBody(BaseModel):
    """Request body carrying a card amount.

    ``id`` and ``owner`` may be present in the body but are ignored: the
    store assigns the id and the owner is the authenticated principal.
    """

    model_config = ConfigDict(extra="ignore")

    amount: Decimal = Field(..., allow_inf_nan=False, description="Card balance")

    @field_validator("amount")
    @classmethod
    def validate_amount_range(cls, v: Decimal) -> Decimal:
        """Amounts are rendered as JSON numbers, so they must fit a float."""
        if math.isinf(float(v)):
            raise ValueError("amount is out of range")
        return v


class CashCardCreate(CashCardAmountBody):
    """Schema for creating a cash card."""


class CashCardUpdate(CashCardAmountBody):
    """Schema for replacing the amount of a cash card."""


class CashCardResponse(BaseModel):
    """Response schema for a cash card."""

    id: int
    amount: Decimal
    owner: str

    @field_serializer("amount")
    def serialize_amount(self, amount: Decimal) -> float:
        # Clients read the amount as a JSON number, not a string
        return float(amount)
