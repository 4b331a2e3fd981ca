"""News and news-sentiment models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class SentimentLevel(Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"

    @classmethod
    def from_score(cls, score: float) -> SentimentLevel:
        """Bucket a company news score."""
        if score >= 0.5:
            return cls.POSITIVE
        if score <= -0.3:
            return cls.NEGATIVE
        return cls.NEUTRAL


@dataclass(frozen=True)
class NewsItem:
    """Single news article.

    Attributes:
        id: Upstream article id.
        headline: Article headline.
        summary: Short summary.
        source: Publisher.
        url: Article URL.
        published_at: Publication time.
        category: News category (``company`` or general categories).
        related: Related symbol(s).
        image: Thumbnail URL.
    """

    id: int
    headline: str
    summary: str
    source: str
    url: str
    published_at: datetime | None = None
    category: str | None = None
    related: str | None = None
    image: str | None = None


@dataclass(frozen=True)
class NewsSentiment:
    """Aggregated news sentiment for a symbol."""

    symbol: str
    company_news_score: float
    bullish_percent: float | None = None
    bearish_percent: float | None = None
    sector_average_bullish_percent: float | None = None
    sector_average_news_score: float | None = None
    articles_in_last_week: int | None = None
    buzz: float | None = None
    weekly_average: float | None = None

    @property
    def level(self) -> SentimentLevel:
        return SentimentLevel.from_score(self.company_news_score)
