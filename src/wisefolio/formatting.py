"""Display formatting for prices and percent changes (USD only)."""

from __future__ import annotations

from wisefolio.models.quote import MiniPrice

UNAVAILABLE = "Data unavailable"


def format_currency(value: float, abbreviate: bool = False) -> str:
    """``1234.5`` -> ``$1,234.50``; with ``abbreviate``, ``$1.2B``/``$3.4M``/``$5.6K``."""
    if abbreviate:
        for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
            if abs(value) >= threshold:
                return f"{_sign(value)}${abs(value) / threshold:.1f}{suffix}"
    return f"{_sign(value)}${abs(value):,.2f}"


def format_number(value: float) -> str:
    for threshold, suffix in ((1e9, "B"), (1e6, "M"), (1e3, "K")):
        if abs(value) >= threshold:
            return f"{value / threshold:.1f}{suffix}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def format_percent_change(value: float) -> str:
    """Signed percent: ``0.69`` -> ``+0.69%``."""
    return f"{value:+.2f}%"


def render_mini_price(result: MiniPrice | None) -> str:
    """Text shown by the mini price widget (e.g. a search-result row)."""
    if result is None:
        return UNAVAILABLE
    return f"{format_currency(result.price)} {format_percent_change(result.percent_change)}"


def _sign(value: float) -> str:
    return "-" if value < 0 else ""
