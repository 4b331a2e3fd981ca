"""Data models."""

from wisefolio.models.analysis import (
    AdvisorContext,
    AnalysisResult,
    AnalysisSummary,
    Bias,
    JournalFeedback,
    StockRecommendation,
)
from wisefolio.models.company import CompanyMetrics, CompanyProfile, SymbolMatch
from wisefolio.models.news import NewsItem, NewsSentiment, SentimentLevel
from wisefolio.models.quote import GlobalQuote, MiniPrice, Quote, QuoteSource
from wisefolio.models.records import JournalEntry, Portfolio, PortfolioStock, Sentiment
from wisefolio.models.series import SeriesFrequency, SeriesKind, TimeRange, TimeSeriesPoint

__all__ = [
    "Quote",
    "GlobalQuote",
    "MiniPrice",
    "QuoteSource",
    "TimeSeriesPoint",
    "SeriesFrequency",
    "SeriesKind",
    "TimeRange",
    "CompanyProfile",
    "CompanyMetrics",
    "SymbolMatch",
    "NewsItem",
    "NewsSentiment",
    "SentimentLevel",
    "JournalEntry",
    "Portfolio",
    "PortfolioStock",
    "Sentiment",
    "AdvisorContext",
    "AnalysisResult",
    "AnalysisSummary",
    "StockRecommendation",
    "Bias",
    "JournalFeedback",
]
