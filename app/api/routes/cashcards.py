"""API routes for cash cards."""

from fastapi import APIRouter, Query, Request, Response

from app.core.dependencies import CashCardServiceDep, CurrentUser
from app.domain.paging import MAX_PAGE_SIZE, PageRequest, parse_sort
from app.schemas.cash_card import CashCardCreate, CashCardResponse, CashCardUpdate

router = APIRouter(prefix="/cashcards", tags=["cashcards"])


@router.post(
    "",
    status_code=201,
    response_class=Response,
    responses={201: {"description": "Created; Location points at the new card"}},
)
async def create_cash_card(
    body: CashCardCreate,
    request: Request,
    current_user: CurrentUser,
    service: CashCardServiceDep,
) -> Response:
    """Create a cash card owned by the caller."""
    card = await service.create_card(current_user, body.amount)
    location = str(request.url_for("get_cash_card", card_id=card["id"]))
    return Response(status_code=201, headers={"Location": location})


@router.get("/{card_id}", response_model=CashCardResponse, name="get_cash_card")
async def get_cash_card(
    card_id: int,
    current_user: CurrentUser,
    service: CashCardServiceDep,
) -> dict:
    """Get one of the caller's cash cards.

    Cards that do not exist and cards owned by someone else both give 404.
    """
    return await service.get_card(current_user, card_id)


@router.get("", response_model=list[CashCardResponse])
async def list_cash_cards(
    current_user: CurrentUser,
    service: CashCardServiceDep,
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: int | None = Query(
        None,
        ge=1,
        le=MAX_PAGE_SIZE,
        description="Page size; all of the caller's cards when omitted",
    ),
    sort: list[str] = Query(
        default=[],
        description="Sort key as field[,asc|desc]; repeatable. Defaults to amount,asc",
    ),
) -> list[dict]:
    """List the caller's cash cards, one page at a time."""
    page_request = PageRequest(page=page, size=size, sort=parse_sort(sort))
    return await service.list_cards(current_user, page_request)


@router.put("/{card_id}", status_code=204, response_class=Response)
async def update_cash_card(
    card_id: int,
    body: CashCardUpdate,
    current_user: CurrentUser,
    service: CashCardServiceDep,
) -> Response:
    """Replace the amount of one of the caller's cash cards."""
    await service.update_card(current_user, card_id, body.amount)
    return Response(status_code=204)


@router.delete("/{card_id}", status_code=204, response_class=Response)
async def delete_cash_card(
    card_id: int,
    current_user: CurrentUser,
    service: CashCardServiceDep,
) -> Response:
    """Delete one of the caller's cash cards."""
    await service.delete_card(current_user, card_id)
    return Response(status_code=204)
