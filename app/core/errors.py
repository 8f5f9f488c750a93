"""
Domain-specific exceptions for the Cash Card API.

These exceptions represent request failures and are mapped
to appropriate HTTP status codes in the API layer.
"""

from typing import Any


class CashCardServiceError(Exception):
    """Base exception for all cash card domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(CashCardServiceError):
    """
    Raised when request data fails validation beyond schema checks.

    Examples:
    - Unknown sort field
    - Unknown sort direction

    HTTP Status: 400 Bad Request
    """

    pass


class NotFoundError(CashCardServiceError):
    """
    Raised when a cash card is absent or belongs to another principal.

    Both cases must look the same to the caller, so the HTTP layer
    renders this error with an empty body.

    HTTP Status: 404 Not Found
    """

    pass


class UnauthorizedError(CashCardServiceError):
    """
    Raised when the request carries no valid credentials.

    Examples:
    - Missing bearer token
    - Invalid signature
    - Token expired

    HTTP Status: 401 Unauthorized
    """

    pass


class ForbiddenError(CashCardServiceError):
    """
    Raised when the principal may not use the cash card collection at all.

    Examples:
    - Principal lacks the CARD_OWNER role

    HTTP Status: 403 Forbidden
    """

    pass


ERROR_STATUS_MAP = {
    ValidationError: 400,
    NotFoundError: 404,
    UnauthorizedError: 401,
    ForbiddenError: 403,
}


def get_status_code(error: Exception) -> int:
    """
    Get the HTTP status code for a given exception.

    Args:
        error: The exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)
