"""Cash card service: ownership-scoped access to the record store."""

from decimal import Decimal

from app.core.auth import AuthenticatedUser
from app.core.errors import NotFoundError
from app.core.logging import LoggerMixin
from app.domain.authorization import CARD_NOT_FOUND_MSG, CardOperation, authorize
from app.domain.paging import PageRequest
from app.persistence.base import CashCardRecord, CashCardStore


class CashCardService(LoggerMixin):
    """Service for cash card operations.

    The owner of every card is the authenticated principal; request bodies
    never choose it. Id-addressed operations fetch, decide, then mutate.
    """

    def __init__(self, store: CashCardStore):
        self.store = store

    async def create_card(self, principal: AuthenticatedUser, amount: Decimal) -> CashCardRecord:
        """Create a card owned by ``principal``."""
        authorize(principal, None, CardOperation.CREATE)
        card = await self.store.create(amount=amount, owner=principal.user_id)
        self.logger.info("cash_card_created", card_id=card["id"], owner=card["owner"])
        return card

    async def get_card(self, principal: AuthenticatedUser, card_id: int) -> CashCardRecord:
        """Get one of the principal's cards."""
        card = await self.store.get_by_id(card_id)
        authorize(principal, card, CardOperation.READ, card_id)
        return card

    async def list_cards(
        self,
        principal: AuthenticatedUser,
        page_request: PageRequest | None = None,
    ) -> list[CashCardRecord]:
        """List one page of the principal's cards."""
        authorize(principal, None, CardOperation.LIST)
        return await self.store.get_page(principal.user_id, page_request or PageRequest())

    async def update_card(
        self,
        principal: AuthenticatedUser,
        card_id: int,
        amount: Decimal,
    ) -> CashCardRecord:
        """Replace the amount of one of the principal's cards."""
        current = await self.store.get_by_id(card_id)
        authorize(principal, current, CardOperation.UPDATE, card_id)

        updated = await self.store.update(card_id, amount)
        if updated is None:
            # Deleted between fetch and update
            raise NotFoundError(CARD_NOT_FOUND_MSG)

        self.logger.info("cash_card_updated", card_id=card_id, owner=principal.user_id)
        return updated

    async def delete_card(self, principal: AuthenticatedUser, card_id: int) -> None:
        """Delete one of the principal's cards."""
        current = await self.store.get_by_id(card_id)
        authorize(principal, current, CardOperation.DELETE, card_id)

        if not await self.store.delete(card_id):
            raise NotFoundError(CARD_NOT_FOUND_MSG)

        self.logger.info("cash_card_deleted", card_id=card_id, owner=principal.user_id)
