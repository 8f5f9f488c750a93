"""Unit tests for the PostgreSQL cash card repository (mocked session)."""

from decimal import Decimal

import pytest

from app.domain.paging import PageRequest, SortDirection, SortOrder
from app.persistence.cash_card_repository import CashCardRepository

pytestmark = pytest.mark.unit


def executed_sql(mock_session) -> str:
    statement = mock_session.execute.call_args.args[0]
    return " ".join(str(statement).split())


def executed_params(mock_session) -> dict:
    return mock_session.execute.call_args.args[1]


class TestCreate:
    async def test_insert_returning(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory([(1, 123.45, "LeudiX1")])
        repo = CashCardRepository(mock_session)

        card = await repo.create(Decimal("123.45"), "LeudiX1")

        assert card == {"id": 1, "amount": Decimal("123.45"), "owner": "LeudiX1"}
        sql = executed_sql(mock_session)
        assert "INSERT INTO cash_cards (amount, owner)" in sql
        assert "RETURNING id, amount, owner" in sql
        assert executed_params(mock_session) == {"amount": Decimal("123.45"), "owner": "LeudiX1"}


class TestGetById:
    async def test_found(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory([(5, Decimal("1.50"), "Sarah")])
        card = await CashCardRepository(mock_session).get_by_id(5)
        assert card == {"id": 5, "amount": Decimal("1.50"), "owner": "Sarah"}
        assert executed_params(mock_session) == {"card_id": 5}

    async def test_missing(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory([])
        assert await CashCardRepository(mock_session).get_by_id(5) is None


class TestGetPage:
    async def test_bounded_page_uses_limit_and_offset(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory([(1, Decimal("2"), "LeudiX1")])
        request = PageRequest(page=2, size=10, sort=(SortOrder("amount", SortDirection.DESC),))

        page = await CashCardRepository(mock_session).get_page("LeudiX1", request)

        assert page == [{"id": 1, "amount": Decimal("2"), "owner": "LeudiX1"}]
        sql = executed_sql(mock_session)
        assert "WHERE owner = :owner" in sql
        assert "ORDER BY amount DESC, id ASC" in sql
        assert "LIMIT :limit" in sql
        assert executed_params(mock_session) == {"owner": "LeudiX1", "offset": 20, "limit": 10}

    async def test_unbounded_page_has_no_limit(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory([])
        await CashCardRepository(mock_session).get_page("LeudiX1", PageRequest())

        sql = executed_sql(mock_session)
        assert "ORDER BY amount ASC, id ASC" in sql
        assert "LIMIT" not in sql
        assert executed_params(mock_session) == {"owner": "LeudiX1", "offset": 0}

    async def test_unbounded_later_page_skips_query(self, mock_session):
        page = await CashCardRepository(mock_session).get_page("LeudiX1", PageRequest(page=1))
        assert page == []
        mock_session.execute.assert_not_called()

    async def test_offset_beyond_bigint_skips_query(self, mock_session):
        page_request = PageRequest(page=10**19, size=1)
        page = await CashCardRepository(mock_session).get_page("LeudiX1", page_request)
        assert page == []
        mock_session.execute.assert_not_called()


class TestUpdateDelete:
    async def test_update_returning(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory([(4, Decimal("500.50"), "Sarah")])
        card = await CashCardRepository(mock_session).update(4, Decimal("500.50"))

        assert card == {"id": 4, "amount": Decimal("500.50"), "owner": "Sarah"}
        sql = executed_sql(mock_session)
        assert "UPDATE cash_cards SET amount = :amount WHERE id = :card_id" in sql
        assert "owner =" not in sql.split("WHERE")[0]

    async def test_update_missing(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory([])
        assert await CashCardRepository(mock_session).update(4, Decimal("1")) is None

    async def test_delete(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory([(4,)])
        assert await CashCardRepository(mock_session).delete(4) is True
        assert "DELETE FROM cash_cards WHERE id = :card_id RETURNING id" in executed_sql(
            mock_session
        )

    async def test_delete_missing(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory([])
        assert await CashCardRepository(mock_session).delete(4) is False

    async def test_ping(self, mock_session, result_factory):
        mock_session.execute.return_value = result_factory(scalar=1)
        assert await CashCardRepository(mock_session).ping() is True
