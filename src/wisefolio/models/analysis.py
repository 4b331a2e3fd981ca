"""AI proxy payload models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

RISK_LEVELS = ("low", "medium", "high")
ACTIONS = ("buy", "hold", "sell")
TIME_FRAMES = ("short", "medium", "long")


@dataclass(frozen=True)
class AdvisorContext:
    """Investor profile sent with advisor questions."""

    risk_tolerance: str | None = None
    investment_horizon: str | None = None
    investment_goals: tuple[str, ...] = ()
    portfolio_size: float | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.risk_tolerance is not None:
            payload["riskTolerance"] = self.risk_tolerance
        if self.investment_horizon is not None:
            payload["investmentHorizon"] = self.investment_horizon
        if self.investment_goals:
            payload["investmentGoals"] = list(self.investment_goals)
        if self.portfolio_size is not None:
            payload["portfolioSize"] = self.portfolio_size
        return payload


@dataclass(frozen=True)
class StockRecommendation:
    """A sanitized recommendation; every enum field holds an allowed value."""

    symbol: str
    name: str
    action: str = "hold"
    risk_level: str = "medium"
    time_frame: str = "medium"
    price: float = 0.0
    allocation: float = 0.0
    potential_return: float = 0.0
    rationale: str = ""
    summary: str = ""


@dataclass(frozen=True)
class AnalysisSummary:
    summary: str
    market_outlook: str
    risk_assessment: str


@dataclass(frozen=True)
class AnalysisResult:
    analysis: AnalysisSummary
    recommendations: tuple[StockRecommendation, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Bias:
    """Cognitive bias flagged in a journal entry."""

    name: str
    description: str


@dataclass(frozen=True)
class JournalFeedback:
    ai_feedback: str
    biases: tuple[Bias, ...] = field(default_factory=tuple)
