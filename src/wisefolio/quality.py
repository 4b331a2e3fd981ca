"""Data quality checks for normalized series and quotes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from wisefolio.models.quote import Quote
from wisefolio.models.series import TimeSeriesPoint


@dataclass
class ValidationCheck:
    """Single validation check result."""

    name: str
    passed: bool
    message: str = ""


@dataclass
class ValidationResult:
    """Aggregate validation result."""

    checks: list[ValidationCheck] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)

    @property
    def failed_checks(self) -> list[ValidationCheck]:
        return [c for c in self.checks if not c.passed]


def validate_series(points: tuple[TimeSeriesPoint, ...] | list[TimeSeriesPoint]) -> ValidationResult:
    """Run all quality checks on a normalized series.

    Checks:
        1. Not empty
        2. No NaN/Inf OHLCV
        3. Volume sanity (non-negative)
        4. Date ordering (strictly ascending)
        5. OHLC consistency (high >= low, high >= open/close)
    """
    result = ValidationResult()

    if not points:
        result.checks.append(ValidationCheck("not_empty", False, "No points provided"))
        return result
    result.checks.append(ValidationCheck("not_empty", True, f"{len(points)} points"))

    bad_values = sum(
        1
        for p in points
        for val in (p.open, p.high, p.low, p.close, p.volume)
        if math.isnan(val) or math.isinf(val)
    )
    if bad_values:
        result.checks.append(ValidationCheck("no_nulls", False, f"{bad_values} NaN/Inf values"))
    else:
        result.checks.append(ValidationCheck("no_nulls", True))

    neg_vol = sum(1 for p in points if p.volume < 0)
    if neg_vol:
        result.checks.append(
            ValidationCheck("volume_sanity", False, f"{neg_vol} points with negative volume")
        )
    else:
        result.checks.append(ValidationCheck("volume_sanity", True))

    out_of_order = sum(
        1 for i in range(1, len(points)) if points[i].date <= points[i - 1].date
    )
    if out_of_order:
        result.checks.append(
            ValidationCheck("date_order", False, f"{out_of_order} out of order")
        )
    else:
        result.checks.append(ValidationCheck("date_order", True))

    inconsistent = 0
    for p in points:
        if p.high < p.low:
            inconsistent += 1
        elif p.high < p.open or p.high < p.close:
            inconsistent += 1
        elif p.low > p.open or p.low > p.close:
            inconsistent += 1
    if inconsistent:
        result.checks.append(
            ValidationCheck("ohlc_consistency", False, f"{inconsistent} points with H<L or H<O/C")
        )
    else:
        result.checks.append(ValidationCheck("ohlc_consistency", True))

    return result


def validate_quote(quote: Quote) -> bool:
    """Basic quote sanity check.

    Returns True if the price is positive and, when the day range is known,
    low <= price <= high.
    """
    if quote.current_price is None or quote.current_price <= 0:
        return False
    if quote.high is not None and quote.low is not None:
        if quote.high < quote.low:
            return False
        if not quote.low <= quote.current_price <= quote.high:
            return False
    return True
