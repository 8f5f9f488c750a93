"""Page and sort requests for owner-scoped cash card listings."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from app.core.errors import ValidationError

SORTABLE_FIELDS = ("id", "amount")
DEFAULT_SORT_FIELD = "amount"
MAX_PAGE_SIZE = 2000
# Largest OFFSET PostgreSQL accepts (BIGINT)
MAX_OFFSET = 2**63 - 1


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class SortOrder:
    field: str
    direction: SortDirection = SortDirection.ASC

    @property
    def descending(self) -> bool:
        return self.direction is SortDirection.DESC


DEFAULT_SORT = (SortOrder(DEFAULT_SORT_FIELD, SortDirection.ASC),)


@dataclass(frozen=True)
class PageRequest:
    """A slice ``[page * size, page * size + size)`` of a principal's cards.

    ``size=None`` means unbounded: page 0 holds every card, later pages
    are empty.
    """

    page: int = 0
    size: int | None = None
    sort: tuple[SortOrder, ...] = field(default=DEFAULT_SORT)

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValidationError("Page index must not be negative", details={"page": self.page})
        if self.size is not None and not 1 <= self.size <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"Page size must be between 1 and {MAX_PAGE_SIZE}", details={"size": self.size}
            )
        if not self.sort:
            object.__setattr__(self, "sort", DEFAULT_SORT)

    @property
    def offset(self) -> int:
        if self.size is None:
            return 0
        return self.page * self.size

    @property
    def is_past_end(self) -> bool:
        """True when the page is empty whatever the store holds.

        An unbounded request only has a page 0, and no store holds more
        records than the largest offset.
        """
        if self.size is None:
            return self.page > 0
        return self.offset > MAX_OFFSET

    @property
    def order_by(self) -> tuple[SortOrder, ...]:
        """Requested keys plus an ``id`` tie-breaker for a total, stable order."""
        if any(order.field == "id" for order in self.sort):
            return self.sort
        return (*self.sort, SortOrder("id", SortDirection.ASC))


def parse_sort(values: Iterable[str] | None) -> tuple[SortOrder, ...]:
    """Parse repeated ``sort=field[,direction]`` query values.

    >>> parse_sort(["amount,desc"])
    (SortOrder(field='amount', direction=<SortDirection.DESC: 'desc'>),)
    """
    orders: list[SortOrder] = []
    seen: set[str] = set()
    for raw in values or ():
        raw = raw.strip()
        if not raw:
            continue
        parts = [part.strip() for part in raw.split(",")]
        if len(parts) > 2:
            raise ValidationError("Invalid sort parameter", details={"sort": raw})

        field_name = parts[0]
        if field_name not in SORTABLE_FIELDS:
            raise ValidationError(
                "Unsupported sort field",
                details={"sort": raw, "allowed_fields": list(SORTABLE_FIELDS)},
            )

        direction = SortDirection.ASC
        if len(parts) == 2 and parts[1]:
            try:
                direction = SortDirection(parts[1].lower())
            except ValueError:
                raise ValidationError(
                    "Unsupported sort direction",
                    details={"sort": raw, "allowed_directions": [d.value for d in SortDirection]},
                ) from None

        # First occurrence of a field wins
        if field_name in seen:
            continue
        seen.add(field_name)
        orders.append(SortOrder(field_name, direction))

    return tuple(orders) or DEFAULT_SORT
