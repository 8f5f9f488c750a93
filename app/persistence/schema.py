"""PostgreSQL schema for the cash_cards table.

Statements are idempotent so they can run on every startup.
"""

import logging
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS cash_cards (
        id BIGINT GENERATED ALWAYS AS IDENTITY PRIMARY KEY,
        amount NUMERIC NOT NULL,
        owner TEXT NOT NULL
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_cash_cards_owner_amount_id
        ON cash_cards (owner, amount, id)
    """,
)

# Lucy2 owns a card but is not granted the card-owner role in demo tokens
DEMO_CARDS = (
    (Decimal("123.45"), "LeudiX1"),
    (Decimal("100.50"), "Sarah"),
    (Decimal("325.33"), "Lucy2"),
)

DEMO_SEED_STATEMENT = "INSERT INTO cash_cards (amount, owner) VALUES (%s, %s)"


async def create_schema(engine: AsyncEngine) -> None:
    """Create the cash_cards table and its owner index if missing."""
    async with engine.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            await conn.execute(text(statement))
    logger.info("Cash card schema ensured")
