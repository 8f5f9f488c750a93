"""Schemas package for request/response models."""

from app.schemas.cash_card import (
    CashCardCreate,
    CashCardResponse,
    CashCardUpdate,
)

__all__ = [
    "CashCardCreate",
    "CashCardUpdate",
    "CashCardResponse",
]
