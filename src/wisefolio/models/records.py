"""Persisted records — journal entries, portfolios, portfolio stocks.

Rows live in the hosted backend; these classes only translate them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Sentiment(Enum):
    """Bullish/neutral/bearish label attached to a journal entry."""

    BULLISH = "bullish"
    NEUTRAL = "neutral"
    BEARISH = "bearish"


@dataclass(frozen=True)
class JournalEntry:
    id: str
    title: str
    content: str
    stocks: tuple[str, ...] = field(default_factory=tuple)
    sentiment: Sentiment = Sentiment.NEUTRAL
    created_at: str | None = None
    updated_at: str | None = None
    ai_feedback: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> JournalEntry:
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            content=row.get("content") or "",
            stocks=tuple(row.get("stocks") or ()),
            sentiment=Sentiment(row.get("sentiment") or "neutral"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
            ai_feedback=row.get("ai_feedback"),
        )


@dataclass(frozen=True)
class Portfolio:
    id: str
    name: str
    description: str | None = None
    user_id: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Portfolio:
        return cls(
            id=str(row["id"]),
            name=row.get("name") or "",
            description=row.get("description"),
            user_id=row.get("user_id"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(frozen=True)
class PortfolioStock:
    id: str
    portfolio_id: str
    symbol: str
    name: str
    shares: float
    buy_price: float
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def cost_basis(self) -> float:
        return self.shares * self.buy_price

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> PortfolioStock:
        return cls(
            id=str(row["id"]),
            portfolio_id=str(row["portfolio_id"]),
            symbol=row.get("symbol") or "",
            name=row.get("name") or "",
            shares=float(row.get("shares") or 0),
            buy_price=float(row.get("buy_price") or 0),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
