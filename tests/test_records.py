"""Tests for the row backend and the journal/portfolio repositories."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest
import requests

from wisefolio.errors import ProviderError, ProviderErrorCode
from wisefolio.models.records import Sentiment
from wisefolio.notifications import NotificationLevel
from wisefolio.records import JournalRepository, PortfolioRepository, RowBackend

BASE_URL = "https://example.supabase.co"

ENTRY_ROW = {
    "id": "e1",
    "title": "AAPL thesis",
    "content": "Services growth",
    "stocks": ["AAPL"],
    "sentiment": "bullish",
    "created_at": "2024-01-15T10:00:00Z",
    "updated_at": "2024-01-15T10:00:00Z",
    "ai_feedback": None,
}

STOCK_ROW = {
    "id": "s1",
    "portfolio_id": "p1",
    "symbol": "MSFT",
    "name": "Microsoft",
    "shares": 10,
    "buy_price": 350.5,
}


def _response(status: int = 200, payload=None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp._content = b"" if payload is None else json.dumps(payload).encode()
    return resp


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def backend(session) -> RowBackend:
    return RowBackend(BASE_URL, "anon-key", access_token="user-jwt", session=session)


class TestRowBackend:
    def test_auth_headers(self, backend, session):
        assert session.headers["apikey"] == "anon-key"
        assert session.headers["Authorization"] == "Bearer user-jwt"

    def test_select_params(self, backend, session):
        session.get.return_value = _response(200, [ENTRY_ROW])
        rows = asyncio.run(backend.select(
            "journal_entries", filters={"id": "e1"}, order="created_at", descending=True,
        ))
        assert rows == [ENTRY_ROW]
        args, kwargs = session.get.call_args
        assert args[0] == f"{BASE_URL}/rest/v1/journal_entries"
        assert kwargs["params"] == {"select": "*", "id": "eq.e1", "order": "created_at.desc"}

    def test_insert_returns_row(self, backend, session):
        session.request.return_value = _response(201, [ENTRY_ROW])
        row = asyncio.run(backend.insert("journal_entries", {"title": "x"}))
        assert row == ENTRY_ROW
        args, kwargs = session.request.call_args
        assert args[0] == "POST"
        assert kwargs["json"] == [{"title": "x"}]
        assert kwargs["headers"] == {"Prefer": "return=representation"}

    def test_update_filters_by_id(self, backend, session):
        session.request.return_value = _response(200, [ENTRY_ROW])
        asyncio.run(backend.update("journal_entries", "e1", {"title": "y"}))
        args, kwargs = session.request.call_args
        assert args[0] == "PATCH"
        assert kwargs["params"] == {"id": "eq.e1"}

    def test_update_missing_row(self, backend, session):
        session.request.return_value = _response(200, [])
        with pytest.raises(ProviderError):
            asyncio.run(backend.update("journal_entries", "nope", {"title": "y"}))

    @pytest.mark.parametrize("status,payload", [(201, []), (201, None), (200, {"id": "e1"})])
    def test_insert_without_representation(self, backend, session, status, payload):
        session.request.return_value = _response(status, payload)
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(backend.insert("journal_entries", {"title": "x"}))
        assert exc_info.value.code == ProviderErrorCode.NO_DATA

    def test_update_empty_body(self, backend, session):
        session.request.return_value = _response(204)
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(backend.update("journal_entries", "e1", {"title": "y"}))
        assert exc_info.value.code == ProviderErrorCode.NO_DATA

    def test_delete_empty_body(self, backend, session):
        session.request.return_value = _response(204)
        assert asyncio.run(backend.delete("journal_entries", "e1")) is None

    def test_http_error(self, backend, session):
        session.get.return_value = _response(401, {"message": "JWT expired"})
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(backend.select("portfolios"))
        assert exc_info.value.code == ProviderErrorCode.AUTH_FAILED
        assert exc_info.value.message == "JWT expired"

    def test_network_error(self, backend, session):
        session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(backend.select("portfolios"))
        assert exc_info.value.code == ProviderErrorCode.TRANSPORT
        assert exc_info.value.retryable


class TestJournalRepository:
    def test_list_newest_first(self, backend, session, notifier):
        session.get.return_value = _response(200, [ENTRY_ROW])
        entries = asyncio.run(JournalRepository(backend, notifier).list_entries())
        assert entries[0].sentiment is Sentiment.BULLISH
        assert entries[0].stocks == ("AAPL",)
        assert session.get.call_args.kwargs["params"]["order"] == "created_at.desc"

    def test_create_notifies_success(self, backend, session, notifier):
        session.request.return_value = _response(201, [ENTRY_ROW])
        repo = JournalRepository(backend, notifier)
        entry = asyncio.run(repo.create_entry("AAPL thesis", "Services growth", ["aapl"], Sentiment.BULLISH))
        assert entry.id == "e1"
        assert session.request.call_args.kwargs["json"] == [{
            "title": "AAPL thesis",
            "content": "Services growth",
            "stocks": ["AAPL"],
            "sentiment": "bullish",
        }]
        assert notifier.messages(NotificationLevel.SUCCESS) == ["Journal entry created successfully"]

    def test_create_without_row_notifies_and_raises(self, backend, session, notifier):
        session.request.return_value = _response(201, [])
        with pytest.raises(ProviderError):
            asyncio.run(JournalRepository(backend, notifier).create_entry("t", "c"))
        assert notifier.messages(NotificationLevel.ERROR) == [
            "Error creating journal entry: No row returned from journal_entries",
        ]
        assert notifier.messages(NotificationLevel.SUCCESS) == []

    def test_update_serializes_sentiment(self, backend, session, notifier):
        session.request.return_value = _response(200, [{**ENTRY_ROW, "sentiment": "bearish"}])
        entry = asyncio.run(JournalRepository(backend, notifier).update_entry("e1", sentiment=Sentiment.BEARISH))
        assert entry.sentiment is Sentiment.BEARISH
        assert session.request.call_args.kwargs["json"] == {"sentiment": "bearish"}

    def test_save_feedback(self, backend, session, notifier):
        session.request.return_value = _response(200, [{**ENTRY_ROW, "ai_feedback": "Nice"}])
        entry = asyncio.run(JournalRepository(backend, notifier).save_feedback("e1", "Nice"))
        assert entry.ai_feedback == "Nice"

    def test_failure_notifies_and_raises(self, backend, session, notifier):
        session.request.return_value = _response(500, {"message": "db down"})
        with pytest.raises(ProviderError):
            asyncio.run(JournalRepository(backend, notifier).delete_entry("e1"))
        assert notifier.messages(NotificationLevel.ERROR) == ["Error deleting journal entry: db down"]
        assert notifier.messages(NotificationLevel.SUCCESS) == []


class TestPortfolioRepository:
    def test_create_portfolio_sends_owner(self, backend, session, notifier):
        session.request.return_value = _response(201, [{"id": "p1", "name": "Core", "user_id": "u1"}])
        repo = PortfolioRepository(backend, notifier, user_id="u1")
        portfolio = asyncio.run(repo.create_portfolio("Core"))
        assert portfolio.name == "Core"
        assert portfolio.user_id == "u1"
        assert session.request.call_args.kwargs["json"] == [{"name": "Core", "user_id": "u1"}]

    def test_create_portfolio_explicit_owner(self, backend, session, notifier):
        session.request.return_value = _response(201, [{"id": "p2", "name": "Growth", "user_id": "u2"}])
        asyncio.run(PortfolioRepository(backend, notifier).create_portfolio("Growth", "Tech", user_id="u2"))
        assert session.request.call_args.kwargs["json"] == [
            {"name": "Growth", "user_id": "u2", "description": "Tech"},
        ]

    def test_create_portfolio_requires_user(self, backend, session, notifier):
        with pytest.raises(ValueError):
            asyncio.run(PortfolioRepository(backend, notifier).create_portfolio("Core"))
        session.request.assert_not_called()

    def test_list_stocks_filters_by_portfolio(self, backend, session, notifier):
        session.get.return_value = _response(200, [STOCK_ROW])
        stocks = asyncio.run(PortfolioRepository(backend, notifier).list_stocks("p1"))
        assert stocks[0].cost_basis == pytest.approx(3505.0)
        params = session.get.call_args.kwargs["params"]
        assert params["portfolio_id"] == "eq.p1"
        assert params["order"] == "created_at.asc"

    def test_add_stock(self, backend, session, notifier):
        session.request.return_value = _response(201, [STOCK_ROW])
        stock = asyncio.run(PortfolioRepository(backend, notifier).add_stock("p1", " msft ", "Microsoft", 10, 350.5))
        assert stock.symbol == "MSFT"
        assert session.request.call_args.kwargs["json"][0]["symbol"] == "MSFT"
        assert notifier.messages(NotificationLevel.SUCCESS) == ["Stock added to portfolio"]

    def test_add_stock_rejects_non_positive(self, backend, session, notifier):
        with pytest.raises(ValueError):
            asyncio.run(PortfolioRepository(backend, notifier).add_stock("p1", "MSFT", "Microsoft", 0, 10))
        session.request.assert_not_called()

    def test_remove_stock(self, backend, session, notifier):
        session.request.return_value = _response(204)
        asyncio.run(PortfolioRepository(backend, notifier).remove_stock("s1"))
        assert session.request.call_args.args[0] == "DELETE"
        assert notifier.messages(NotificationLevel.SUCCESS) == ["Stock removed from portfolio"]
