"""Ownership authorization for cash cards.

A single decision function answers "may this principal perform this
operation on this card?" without touching HTTP objects, so it can be
exercised directly in unit tests.

Three outcomes are possible:

- ``ALLOW``: the principal owns the card (or the operation targets the
  collection and the principal may use it).
- ``HIDDEN``: the card does not exist, or belongs to someone else. The
  two cases are indistinguishable to the caller.
- ``FORBIDDEN``: the principal may not use the cash card collection at
  all. Decided from the principal alone, before the record is consulted.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from app.core.auth import CARD_OWNER, AuthenticatedUser
from app.core.config import get_settings
from app.core.errors import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

CARD_NOT_FOUND_MSG = "Cash card not found"


class CardOperation(str, Enum):
    CREATE = "create"
    READ = "read"
    LIST = "list"
    UPDATE = "update"
    DELETE = "delete"


class AccessDecision(str, Enum):
    ALLOW = "allow"
    HIDDEN = "hidden"
    FORBIDDEN = "forbidden"


COLLECTION_OPERATIONS = frozenset({CardOperation.CREATE, CardOperation.LIST})


def decide(
    principal: AuthenticatedUser,
    card: Mapping[str, Any] | None,
    operation: CardOperation,
) -> AccessDecision:
    """Decide whether ``principal`` may perform ``operation`` on ``card``."""
    if not principal.is_card_owner:
        return AccessDecision.FORBIDDEN

    if operation in COLLECTION_OPERATIONS:
        return AccessDecision.ALLOW

    if card is None or card.get("owner") != principal.user_id:
        return AccessDecision.HIDDEN

    return AccessDecision.ALLOW


def enforce(
    decision: AccessDecision,
    principal: AuthenticatedUser,
    operation: CardOperation,
    card_id: int | None = None,
) -> None:
    """Raise the outward error for a non-ALLOW decision.

    The log line for HIDDEN is identical whether the card is absent or
    foreign.
    """
    if decision is AccessDecision.ALLOW:
        return

    if decision is AccessDecision.FORBIDDEN:
        logger.warning(
            "Cash card access forbidden",
            extra={"user_id": principal.user_id, "operation": operation.value},
        )
        if get_settings().security.sanitize_errors:
            raise ForbiddenError("Insufficient permissions")
        raise ForbiddenError(
            "Insufficient permissions",
            details={"required_role": CARD_OWNER, "user_roles": principal.roles},
        )

    logger.warning(
        "Cash card hidden from principal",
        extra={"user_id": principal.user_id, "operation": operation.value, "card_id": card_id},
    )
    raise NotFoundError(CARD_NOT_FOUND_MSG)


def authorize(
    principal: AuthenticatedUser,
    card: Mapping[str, Any] | None,
    operation: CardOperation,
    card_id: int | None = None,
) -> None:
    """``decide`` then ``enforce``."""
    enforce(decide(principal, card, operation), principal, operation, card_id)
