"""Cash card repository using SQLAlchemy 2.0 async on PostgreSQL.

Table: cash_cards (see app/persistence/schema.py)
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.paging import SORTABLE_FIELDS, PageRequest
from app.persistence.base import CashCardRecord

logger = logging.getLogger(__name__)

CASH_CARDS_TABLE = "cash_cards"

# Only whitelisted identifiers ever reach ORDER BY
_SORT_COLUMNS = {name: name for name in SORTABLE_FIELDS}


class CashCardRepository:
    """Repository for cash_cards data access."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, amount: Decimal, owner: str) -> CashCardRecord:
        """Insert a card; the identity column assigns the id."""
        result = await self.session.execute(
            text("""
                INSERT INTO cash_cards (amount, owner)
                VALUES (:amount, :owner)
                RETURNING id, amount, owner
            """),
            {"amount": amount, "owner": owner},
        )
        return self._row_to_dict(result.one())

    async def get_by_id(self, card_id: int) -> CashCardRecord | None:
        """Get card by ID, regardless of owner."""
        result = await self.session.execute(
            text("SELECT id, amount, owner FROM cash_cards WHERE id = :card_id"),
            {"card_id": card_id},
        )
        row = result.fetchone()
        if row is None:
            return None
        return self._row_to_dict(row)

    async def get_page(self, owner: str, page_request: PageRequest) -> list[CashCardRecord]:
        """List one page of an owner's cards."""
        if page_request.is_past_end:
            return []

        order_clause = ", ".join(
            f"{_SORT_COLUMNS[order.field]} {'DESC' if order.descending else 'ASC'}"
            for order in page_request.order_by
        )
        params: dict[str, Any] = {"owner": owner, "offset": page_request.offset}
        limit_clause = ""
        if page_request.size is not None:
            limit_clause = "LIMIT :limit"
            params["limit"] = page_request.size

        result = await self.session.execute(
            text(f"""
                SELECT id, amount, owner
                FROM cash_cards
                WHERE owner = :owner
                ORDER BY {order_clause}
                {limit_clause}
                OFFSET :offset
            """),
            params,
        )
        return [self._row_to_dict(row) for row in result.fetchall()]

    async def update(self, card_id: int, amount: Decimal) -> CashCardRecord | None:
        """Replace the amount of an existing card."""
        result = await self.session.execute(
            text("""
                UPDATE cash_cards
                SET amount = :amount
                WHERE id = :card_id
                RETURNING id, amount, owner
            """),
            {"card_id": card_id, "amount": amount},
        )
        row = result.fetchone()
        if row is None:
            return None
        return self._row_to_dict(row)

    async def delete(self, card_id: int) -> bool:
        """Delete a card."""
        result = await self.session.execute(
            text("DELETE FROM cash_cards WHERE id = :card_id RETURNING id"),
            {"card_id": card_id},
        )
        return result.fetchone() is not None

    async def ping(self) -> bool:
        result = await self.session.execute(text("SELECT 1"))
        return result.scalar_one() == 1

    def _row_to_dict(self, row) -> CashCardRecord:
        """Convert a database row to a dictionary."""
        return {
            "id": row[0],
            "amount": Decimal(str(row[1])),
            "owner": row[2],
        }
