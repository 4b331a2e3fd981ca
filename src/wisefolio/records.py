"""Row-based persistence client for journal entries and portfolios.

The hosted backend exposes tables over a PostgREST-style API at
``{base_url}/rest/v1/{table}``. Rows are translated to and from the record
models; no invariants are enforced locally.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from wisefolio.errors import ProviderError, ProviderErrorCode
from wisefolio.models.records import JournalEntry, Portfolio, PortfolioStock, Sentiment
from wisefolio.notifications import LogNotifier, Notifier
from wisefolio.transport import decode_response, new_session, run_request

logger = logging.getLogger(__name__)

JOURNAL_TABLE = "journal_entries"
PORTFOLIO_TABLE = "portfolios"
PORTFOLIO_STOCK_TABLE = "portfolio_stocks"


class RowBackend:
    """Create/read/update/delete rows by table name."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        access_token: str | None = None,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or new_session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
            "Content-Type": "application/json",
        })

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
    ) -> list[dict[str, Any]]:
        params: dict[str, str] = {"select": "*"}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        return await run_request(table, self.timeout, self._get, table, params)

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        rows = await run_request(table, self.timeout, self._write, "post", table, None, [row])
        if not isinstance(rows, list) or not rows:
            raise ProviderError(f"No row returned from {table}", code=ProviderErrorCode.NO_DATA)
        return rows[0]

    async def update(self, table: str, row_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        rows = await run_request(
            table, self.timeout, self._write, "patch", table, {"id": f"eq.{row_id}"}, updates,
        )
        if not isinstance(rows, list) or not rows:
            raise ProviderError(f"No row {row_id} in {table}", code=ProviderErrorCode.NO_DATA)
        return rows[0]

    async def delete(self, table: str, row_id: str) -> None:
        await run_request(
            table, self.timeout, self._write, "delete", table, {"id": f"eq.{row_id}"}, None,
        )

    def close(self) -> None:
        self.session.close()

    # ---- blocking helpers ----

    def _get(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        resp = self.session.get(self._url(table), params=params, timeout=self.timeout)
        return decode_response(resp, table)

    def _write(
        self,
        method: str,
        table: str,
        params: dict[str, str] | None,
        body: Any,
    ) -> Any:
        resp = self.session.request(
            method.upper(),
            self._url(table),
            params=params,
            json=body,
            headers={"Prefer": "return=representation"},
            timeout=self.timeout,
        )
        return decode_response(resp, table, allow_empty=True)


class _Repository:
    def __init__(self, backend: RowBackend, notifier: Notifier | None = None) -> None:
        self.backend = backend
        self.notifier = notifier or LogNotifier()

    def _fail(self, action: str, exc: ProviderError) -> None:
        logger.error("Error %s: %s", action, exc.message)
        self.notifier.error(f"Error {action}: {exc.message}")


class JournalRepository(_Repository):
    """Journal entries, newest first."""

    async def list_entries(self) -> list[JournalEntry]:
        try:
            rows = await self.backend.select(JOURNAL_TABLE, order="created_at", descending=True)
        except ProviderError as exc:
            self._fail("fetching journal entries", exc)
            raise
        return [JournalEntry.from_row(r) for r in rows]

    async def create_entry(
        self,
        title: str,
        content: str,
        stocks: list[str] | None = None,
        sentiment: Sentiment = Sentiment.NEUTRAL,
    ) -> JournalEntry:
        row = {
            "title": title,
            "content": content,
            "stocks": [s.upper() for s in stocks or []],
            "sentiment": sentiment.value,
        }
        try:
            created = await self.backend.insert(JOURNAL_TABLE, row)
        except ProviderError as exc:
            self._fail("creating journal entry", exc)
            raise
        self.notifier.success("Journal entry created successfully")
        return JournalEntry.from_row(created)

    async def update_entry(self, entry_id: str, **updates: Any) -> JournalEntry:
        if isinstance(updates.get("sentiment"), Sentiment):
            updates["sentiment"] = updates["sentiment"].value
        try:
            updated = await self.backend.update(JOURNAL_TABLE, entry_id, updates)
        except ProviderError as exc:
            self._fail("updating journal entry", exc)
            raise
        self.notifier.success("Journal entry updated successfully")
        return JournalEntry.from_row(updated)

    async def save_feedback(self, entry_id: str, ai_feedback: str) -> JournalEntry:
        return await self.update_entry(entry_id, ai_feedback=ai_feedback)

    async def delete_entry(self, entry_id: str) -> None:
        try:
            await self.backend.delete(JOURNAL_TABLE, entry_id)
        except ProviderError as exc:
            self._fail("deleting journal entry", exc)
            raise
        self.notifier.success("Journal entry deleted successfully")


class PortfolioRepository(_Repository):
    """Portfolios and the stocks held in them.

    New portfolios are owned by ``user_id`` (the signed-in user), which the
    backend's row policies check on insert.
    """

    def __init__(
        self,
        backend: RowBackend,
        notifier: Notifier | None = None,
        user_id: str | None = None,
    ) -> None:
        super().__init__(backend, notifier)
        self.user_id = user_id

    async def list_portfolios(self) -> list[Portfolio]:
        try:
            rows = await self.backend.select(PORTFOLIO_TABLE, order="created_at", descending=True)
        except ProviderError as exc:
            self._fail("fetching portfolios", exc)
            raise
        return [Portfolio.from_row(r) for r in rows]

    async def create_portfolio(
        self,
        name: str,
        description: str | None = None,
        user_id: str | None = None,
    ) -> Portfolio:
        owner = user_id or self.user_id
        if not owner:
            raise ValueError("User must be authenticated to create a portfolio")
        row: dict[str, Any] = {"name": name, "user_id": owner}
        if description:
            row["description"] = description
        try:
            created = await self.backend.insert(PORTFOLIO_TABLE, row)
        except ProviderError as exc:
            self._fail("creating portfolio", exc)
            raise
        self.notifier.success("Portfolio created successfully")
        return Portfolio.from_row(created)

    async def delete_portfolio(self, portfolio_id: str) -> None:
        try:
            await self.backend.delete(PORTFOLIO_TABLE, portfolio_id)
        except ProviderError as exc:
            self._fail("deleting portfolio", exc)
            raise
        self.notifier.success("Portfolio deleted successfully")

    async def list_stocks(self, portfolio_id: str) -> list[PortfolioStock]:
        try:
            rows = await self.backend.select(
                PORTFOLIO_STOCK_TABLE, filters={"portfolio_id": portfolio_id}, order="created_at",
            )
        except ProviderError as exc:
            self._fail("fetching portfolio stocks", exc)
            raise
        return [PortfolioStock.from_row(r) for r in rows]

    async def add_stock(
        self,
        portfolio_id: str,
        symbol: str,
        name: str,
        shares: float,
        buy_price: float,
    ) -> PortfolioStock:
        if shares <= 0 or buy_price <= 0:
            raise ValueError("shares and buy_price must be positive")
        row = {
            "portfolio_id": portfolio_id,
            "symbol": symbol.strip().upper(),
            "name": name,
            "shares": shares,
            "buy_price": buy_price,
        }
        try:
            created = await self.backend.insert(PORTFOLIO_STOCK_TABLE, row)
        except ProviderError as exc:
            self._fail("adding stock", exc)
            raise
        self.notifier.success("Stock added to portfolio")
        return PortfolioStock.from_row(created)

    async def update_stock(self, stock_id: str, **updates: Any) -> PortfolioStock:
        try:
            updated = await self.backend.update(PORTFOLIO_STOCK_TABLE, stock_id, updates)
        except ProviderError as exc:
            self._fail("updating stock", exc)
            raise
        self.notifier.success("Stock updated successfully")
        return PortfolioStock.from_row(updated)

    async def remove_stock(self, stock_id: str) -> None:
        try:
            await self.backend.delete(PORTFOLIO_STOCK_TABLE, stock_id)
        except ProviderError as exc:
            self._fail("removing stock", exc)
            raise
        self.notifier.success("Stock removed from portfolio")
