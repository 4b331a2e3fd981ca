"""Normalization of provider payloads into the shared models.

Finnhub sends JSON numbers (sometimes null) and parallel candle arrays.
Alpha Vantage sends numbers as strings inside maps keyed by date. Everything
here is pure: payload in, model out. A value that fails to parse is treated
exactly like a missing one.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any

import pandas as pd

from wisefolio.models.company import CompanyMetrics, CompanyProfile, SymbolMatch
from wisefolio.models.news import NewsItem, NewsSentiment
from wisefolio.models.quote import GlobalQuote, Quote
from wisefolio.models.series import SeriesKind, TimeSeriesPoint

logger = logging.getLogger(__name__)

_OHLCV_FIELDS = ("1. open", "2. high", "3. low", "4. close", "5. volume")


# ---------------------------------------------------------------- scalars


def parse_number(value: Any) -> float | None:
    """Parse a JSON number or numeric string; None when absent or invalid."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_percent(value: Any) -> float | None:
    """Parse ``"1.50%"`` (or a bare number) into ``1.5``."""
    if isinstance(value, str):
        value = value.strip().removesuffix("%")
    return parse_number(value)


def _timestamp(value: Any) -> datetime | None:
    seconds = parse_number(value)
    if not seconds:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


# ----------------------------------------------------------------- quotes


def quote_from_finnhub(symbol: str, payload: dict[str, Any]) -> Quote:
    return Quote(
        symbol=symbol.upper(),
        current_price=parse_number(payload.get("c")),
        change=parse_number(payload.get("d")),
        percent_change=parse_number(payload.get("dp")),
        high=parse_number(payload.get("h")),
        low=parse_number(payload.get("l")),
        open=parse_number(payload.get("o")),
        previous_close=parse_number(payload.get("pc")),
        timestamp=_timestamp(payload.get("t")),
    )


def global_quote_from_payload(symbol: str, payload: dict[str, Any]) -> GlobalQuote | None:
    """Parse ``{"Global Quote": {...}}``; None if the block is missing or empty."""
    block = payload.get("Global Quote")
    if not isinstance(block, dict) or not block:
        return None
    return GlobalQuote(
        symbol=str(block.get("01. symbol") or symbol).upper(),
        open=parse_number(block.get("02. open")),
        high=parse_number(block.get("03. high")),
        low=parse_number(block.get("04. low")),
        price=parse_number(block.get("05. price")),
        volume=parse_number(block.get("06. volume")),
        latest_trading_day=block.get("07. latest trading day"),
        previous_close=parse_number(block.get("08. previous close")),
        change=parse_number(block.get("09. change")),
        percent_change=parse_percent(block.get("10. change percent")),
    )


# ----------------------------------------------------------------- series


def series_from_keyed_map(
    payload: dict[str, Any], kind: SeriesKind,
) -> tuple[TimeSeriesPoint, ...]:
    """Turn a date-keyed Alpha Vantage series into points sorted by date.

    A missing series label yields an empty tuple. Entries with an
    unparseable date or number are skipped.
    """
    raw = payload.get(kind.label)
    if not isinstance(raw, dict):
        return ()

    points: list[TimeSeriesPoint] = []
    skipped = 0
    for date_str, values in raw.items():
        point = _keyed_point(date_str, values)
        if point is None:
            skipped += 1
            continue
        points.append(point)

    if skipped:
        logger.warning("Skipped %d malformed entries in '%s'", skipped, kind.label)
    points.sort(key=lambda p: p.date)
    return tuple(points)


def _keyed_point(date_str: str, values: Any) -> TimeSeriesPoint | None:
    if not isinstance(values, dict):
        return None
    try:
        when = datetime.fromisoformat(date_str)
    except (TypeError, ValueError):
        return None
    numbers = [parse_number(values.get(f)) for f in _OHLCV_FIELDS]
    if any(n is None for n in numbers):
        return None
    o, h, l, c, v = numbers
    return TimeSeriesPoint(date=when, open=o, high=h, low=l, close=c, volume=v)  # type: ignore[arg-type]


def series_from_candles(payload: dict[str, Any]) -> tuple[TimeSeriesPoint, ...]:
    """Turn Finnhub parallel candle arrays into points sorted by date.

    ``s`` other than ``"ok"`` (e.g. ``"no_data"``) yields an empty tuple.
    """
    if payload.get("s") != "ok":
        return ()

    columns = [payload.get(k) or [] for k in ("t", "o", "h", "l", "c", "v")]
    length = min(len(col) for col in columns)
    if any(len(col) != length for col in columns):
        logger.warning("Candle arrays differ in length; truncating to %d", length)

    points: list[TimeSeriesPoint] = []
    for i in range(length):
        when = _timestamp(columns[0][i])
        numbers = [parse_number(col[i]) for col in columns[1:]]
        if when is None or any(n is None for n in numbers):
            continue
        o, h, l, c, v = numbers
        points.append(TimeSeriesPoint(date=when, open=o, high=h, low=l, close=c, volume=v))  # type: ignore[arg-type]

    points.sort(key=lambda p: p.date)
    return tuple(points)


def series_to_frame(points: tuple[TimeSeriesPoint, ...] | list[TimeSeriesPoint]) -> pd.DataFrame:
    """Points as a DataFrame indexed by date (columns: open..volume)."""
    frame = pd.DataFrame(
        [
            {
                "date": p.date,
                "open": p.open,
                "high": p.high,
                "low": p.low,
                "close": p.close,
                "volume": p.volume,
            }
            for p in points
        ],
        columns=["date", "open", "high", "low", "close", "volume"],
    )
    return frame.set_index("date")


def frame_to_series(frame: pd.DataFrame) -> tuple[TimeSeriesPoint, ...]:
    points: list[TimeSeriesPoint] = []
    for when, row in frame.iterrows():
        points.append(TimeSeriesPoint(
            date=pd.Timestamp(when).to_pydatetime(),
            open=float(row["open"]),
            high=float(row["high"]),
            low=float(row["low"]),
            close=float(row["close"]),
            volume=float(row["volume"]),
        ))
    return tuple(points)


# -------------------------------------------------------------- reference


def profile_from_finnhub(symbol: str, payload: dict[str, Any]) -> CompanyProfile | None:
    """None when Finnhub returns ``{}`` for an unknown symbol."""
    if not payload:
        return None
    return CompanyProfile(
        symbol=str(payload.get("ticker") or symbol).upper(),
        name=payload.get("name") or symbol.upper(),
        exchange=payload.get("exchange"),
        industry=payload.get("finnhubIndustry"),
        country=payload.get("country"),
        currency=payload.get("currency"),
        ipo=payload.get("ipo"),
        market_cap=parse_number(payload.get("marketCapitalization")),
        shares_outstanding=parse_number(payload.get("shareOutstanding")),
        logo=payload.get("logo") or None,
        weburl=payload.get("weburl") or None,
        phone=payload.get("phone") or None,
    )


def metrics_from_finnhub(symbol: str, payload: dict[str, Any]) -> CompanyMetrics:
    return CompanyMetrics(
        symbol=symbol.upper(),
        metric=dict(payload.get("metric") or {}),
        metric_type=payload.get("metricType"),
        series=dict(payload.get("series") or {}),
    )


def news_from_finnhub(payload: list[dict[str, Any]]) -> list[NewsItem]:
    items: list[NewsItem] = []
    for raw in payload:
        if not isinstance(raw, dict) or not raw.get("headline"):
            continue
        items.append(NewsItem(
            id=int(parse_number(raw.get("id")) or 0),
            headline=raw["headline"],
            summary=raw.get("summary") or "",
            source=raw.get("source") or "",
            url=raw.get("url") or "",
            published_at=_timestamp(raw.get("datetime")),
            category=raw.get("category") or None,
            related=raw.get("related") or None,
            image=raw.get("image") or None,
        ))
    return items


def sentiment_from_finnhub(symbol: str, payload: dict[str, Any]) -> NewsSentiment | None:
    score = parse_number(payload.get("companyNewsScore"))
    if score is None:
        return None
    buzz = payload.get("buzz")
    if not isinstance(buzz, dict):
        buzz = {}
    sentiment = payload.get("sentiment")
    if not isinstance(sentiment, dict):
        sentiment = {}
    articles = parse_number(buzz.get("articlesInLastWeek"))
    return NewsSentiment(
        symbol=str(payload.get("symbol") or symbol).upper(),
        company_news_score=score,
        bullish_percent=parse_number(sentiment.get("bullishPercent")),
        bearish_percent=parse_number(sentiment.get("bearishPercent")),
        sector_average_bullish_percent=parse_number(payload.get("sectorAverageBullishPercent")),
        sector_average_news_score=parse_number(payload.get("sectorAverageNewsScore")),
        articles_in_last_week=int(articles) if articles is not None else None,
        buzz=parse_number(buzz.get("buzz")),
        weekly_average=parse_number(buzz.get("weeklyAverage")),
    )


def matches_from_search(payload: dict[str, Any]) -> list[SymbolMatch]:
    matches: list[SymbolMatch] = []
    for raw in payload.get("result") or []:
        if not isinstance(raw, dict) or not raw.get("symbol"):
            continue
        matches.append(SymbolMatch(
            symbol=raw["symbol"],
            description=raw.get("description") or "",
            display_symbol=raw.get("displaySymbol"),
            type=raw.get("type") or None,
        ))
    return matches
