"""Tests for data quality validation."""

from datetime import datetime, timedelta, timezone

from wisefolio.models.quote import Quote
from wisefolio.models.series import TimeSeriesPoint
from wisefolio.quality import validate_quote, validate_series

BASE = datetime(2024, 1, 15, tzinfo=timezone.utc)


def _make_point(when: datetime, close: float = 150.0, **kwargs) -> TimeSeriesPoint:
    defaults = dict(
        date=when, open=150.0, high=151.0, low=149.0,
        close=close, volume=10000.0,
    )
    defaults.update(kwargs)
    return TimeSeriesPoint(**defaults)


class TestValidateSeries:
    def test_empty(self):
        result = validate_series(())
        assert not result.passed
        assert result.failed_checks[0].name == "not_empty"

    def test_valid(self, sample_points):
        assert validate_series(sample_points).passed

    def test_nan_detected(self):
        result = validate_series([_make_point(BASE, close=float("nan"))])
        no_nulls = next(c for c in result.checks if c.name == "no_nulls")
        assert not no_nulls.passed

    def test_negative_volume(self):
        result = validate_series([_make_point(BASE, volume=-100.0)])
        vol_check = next(c for c in result.checks if c.name == "volume_sanity")
        assert not vol_check.passed

    def test_duplicate_dates(self):
        result = validate_series([_make_point(BASE), _make_point(BASE)])
        order_check = next(c for c in result.checks if c.name == "date_order")
        assert not order_check.passed

    def test_out_of_order(self):
        points = [_make_point(BASE + timedelta(days=1)), _make_point(BASE)]
        result = validate_series(points)
        assert [c.name for c in result.failed_checks] == ["date_order"]

    def test_ohlc_inconsistency(self):
        point = _make_point(BASE, high=149.0, low=151.0)  # high < low!
        result = validate_series([point])
        ohlc_check = next(c for c in result.checks if c.name == "ohlc_consistency")
        assert not ohlc_check.passed


class TestValidateQuote:
    def test_valid(self):
        quote = Quote(symbol="AAPL", current_price=184.92, percent_change=0.69, high=185.5, low=182.1)
        assert validate_quote(quote)

    def test_missing_price(self):
        assert not validate_quote(Quote(symbol="AAPL", current_price=None))

    def test_zero_price(self):
        assert not validate_quote(Quote(symbol="ZZZZ", current_price=0.0, percent_change=None))

    def test_price_outside_day_range(self):
        quote = Quote(symbol="AAPL", current_price=190.0, high=185.5, low=182.1)
        assert not validate_quote(quote)

    def test_unknown_day_range(self):
        assert validate_quote(Quote(symbol="AAPL", current_price=10.0))
