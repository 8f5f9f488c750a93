"""Base types for the repository layer."""

from decimal import Decimal
from typing import Any, Protocol

from app.domain.paging import PageRequest

CashCardRecord = dict[str, Any]


class CashCardStore(Protocol):
    """Keyed storage of cash cards.

    Records are plain dicts with ``id``, ``amount`` and ``owner``. The
    store does not enforce ownership on id-addressed operations; callers do.
    Each operation is atomic with respect to concurrent operations.
    """

    async def create(self, amount: Decimal, owner: str) -> CashCardRecord: ...

    async def get_by_id(self, card_id: int) -> CashCardRecord | None: ...

    async def get_page(self, owner: str, page_request: PageRequest) -> list[CashCardRecord]: ...

    async def update(self, card_id: int, amount: Decimal) -> CashCardRecord | None: ...

    async def delete(self, card_id: int) -> bool: ...

    async def ping(self) -> bool: ...


def to_record(card_id: int, amount: Decimal, owner: str) -> CashCardRecord:
    return {"id": card_id, "amount": amount, "owner": owner}
