"""API routes package."""

from fastapi import APIRouter

from app.api.routes.cashcards import router as cashcards_router

# Create API router with all sub-routers
api_router = APIRouter()

api_router.include_router(cashcards_router)


__all__ = [
    "api_router",
    "cashcards_router",
]
