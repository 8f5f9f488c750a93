"""
FastAPI dependency injection utilities.

Provides reusable dependencies for the cash card store, the service
built on it, and the authenticated principal.
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends

from app.core.auth import AuthenticatedUser, get_current_user
from app.core.config import StorageBackend, get_settings
from app.core.database import get_session
from app.persistence.base import CashCardStore
from app.persistence.cash_card_repository import CashCardRepository
from app.persistence.memory_store import get_memory_store
from app.services.cash_card_service import CashCardService


def get_current_user_dep(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
    """
    Re-export of get_current_user from the auth module.

    Extracts and verifies the current user from the JWT token. Role
    checks happen in the authorization policy, not here.

    Usage:
        @router.get("/me")
        def me(user: CurrentUser):
            return {"user_id": user.user_id}
    """
    return user


CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user_dep)]


async def get_cash_card_store() -> AsyncGenerator[CashCardStore, None]:
    """Yield the store for the configured backend.

    The postgres backend gets a request-scoped session that commits when
    the request succeeds.
    """
    settings = get_settings()
    if settings.database.backend == StorageBackend.MEMORY:
        yield get_memory_store()
        return

    async for session in get_session():
        yield CashCardRepository(session)


Store = Annotated[CashCardStore, Depends(get_cash_card_store)]


def get_cash_card_service(store: Store) -> CashCardService:
    """Get cash card service instance."""
    return CashCardService(store)


CashCardServiceDep = Annotated[CashCardService, Depends(get_cash_card_service)]
