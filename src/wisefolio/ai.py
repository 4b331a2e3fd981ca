"""Clients for the AI proxies: advisor chat, stock analyzer, journal feedback.

Unlike the market-data clients these raise after notifying: a failed
question or analysis is an explicit user action, not background polling.
"""

from __future__ import annotations

import logging
from typing import Any

from wisefolio.errors import ProviderError, ProviderErrorCode
from wisefolio.models.analysis import (
    ACTIONS,
    RISK_LEVELS,
    TIME_FRAMES,
    AdvisorContext,
    AnalysisResult,
    AnalysisSummary,
    Bias,
    JournalFeedback,
    StockRecommendation,
)
from wisefolio.models.records import Sentiment
from wisefolio.notifications import LogNotifier, Notifier
from wisefolio.transport import Transport

logger = logging.getLogger(__name__)

ADVISOR_FUNCTION = "financial-advisor"
ANALYZER_FUNCTION = "stock-analyzer"
JOURNAL_FEEDBACK_FUNCTION = "journal-ai-feedback"

MAX_BIASES = 2


class _ProxyFunctionClient:
    label: str

    def __init__(self, transport: Transport, notifier: Notifier | None = None) -> None:
        self.transport = transport
        self.notifier = notifier or LogNotifier()

    async def _invoke(self, function: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            data = await self.transport.invoke(function, body)
            if not isinstance(data, dict):
                raise ProviderError(
                    f"Unexpected response from {function}",
                    code=ProviderErrorCode.UPSTREAM_ERROR,
                )
            if data.get("error"):
                raise ProviderError(str(data["error"]), code=ProviderErrorCode.UPSTREAM_ERROR)
            return data
        except ProviderError as exc:
            self._fail(exc)
            raise

    def _fail(self, exc: ProviderError) -> None:
        logger.error("%s error: %s", self.label, exc.message)
        self.notifier.error(f"{self.label} error: {exc.message}")


# ------------------------------------------------------------------ advisor


class FinancialAdvisor(_ProxyFunctionClient):
    """Ask the AI advisor a free-form question."""

    label = "AI Advisor"

    async def ask(self, query: str, context: AdvisorContext | None = None) -> str:
        if not query or not query.strip():
            raise ValueError("query must be a non-empty string")
        data = await self._invoke(ADVISOR_FUNCTION, {
            "query": query.strip(),
            "userContext": (context or AdvisorContext()).to_payload(),
        })
        response = data.get("response")
        if not isinstance(response, str) or not response:
            exc = ProviderError("Empty response from advisor", code=ProviderErrorCode.NO_DATA)
            self._fail(exc)
            raise exc
        return response


# ----------------------------------------------------------------- analyzer


def _choice(value: Any, allowed: tuple[str, ...], default: str) -> str:
    return value if value in allowed else default


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    return float(value)


def _text(value: Any, default: str) -> str:
    return value if isinstance(value, str) and value else default


def sanitize_recommendation(raw: Any) -> StockRecommendation:
    """Coerce one upstream recommendation onto the allowed values.

    Invalid or missing fields get safe defaults; nothing is rejected.
    """
    if not isinstance(raw, dict):
        raw = {}
    symbol = _text(raw.get("symbol"), "Unknown")
    return StockRecommendation(
        symbol=symbol,
        name=_text(raw.get("name"), "Unknown Company"),
        action=_choice(raw.get("action") or raw.get("recommendation"), ACTIONS, "hold"),
        risk_level=_choice(raw.get("riskLevel"), RISK_LEVELS, "medium"),
        time_frame=_choice(raw.get("timeFrame"), TIME_FRAMES, "medium"),
        price=_number(raw.get("price")),
        allocation=_number(raw.get("allocation")),
        potential_return=_number(raw.get("potentialReturn")),
        rationale=_text(raw.get("rationale"), ""),
        summary=_text(raw.get("summary"), f"No detailed analysis available for {symbol}."),
    )


def sanitize_analysis(payload: dict[str, Any]) -> AnalysisResult:
    """Build an AnalysisResult from either response layout.

    The proxy nests the model output (``{"analysis": {"analysis": {...},
    "recommendations": [...]}}``); a flat ``{"analysis": {...},
    "recommendations": [...]}`` is accepted too.
    """
    body = payload.get("analysis")
    if isinstance(body, dict) and "recommendations" in body:
        summary_src = body.get("analysis")
        recommendations = body.get("recommendations")
    else:
        summary_src = body
        recommendations = payload.get("recommendations")

    if not isinstance(recommendations, list):
        raise ProviderError(
            "Failed to generate stock analysis",
            code=ProviderErrorCode.VALIDATION_FAILED,
        )
    if not isinstance(summary_src, dict):
        summary_src = {}

    return AnalysisResult(
        analysis=AnalysisSummary(
            summary=_text(summary_src.get("summary"), "Analysis unavailable"),
            market_outlook=_text(summary_src.get("marketOutlook"), "Market outlook unavailable"),
            risk_assessment=_text(summary_src.get("riskAssessment"), "Risk assessment unavailable"),
        ),
        recommendations=tuple(sanitize_recommendation(r) for r in recommendations),
    )


class StockAnalyzer(_ProxyFunctionClient):
    """Request an AI analysis of a set of symbols."""

    label = "Stock analysis"

    async def analyze(
        self,
        symbols: list[str],
        risk_level: str = "medium",
        investment_amount: float = 10_000,
    ) -> AnalysisResult:
        cleaned = [s.strip().upper() for s in symbols if isinstance(s, str) and s.strip()]
        if not cleaned:
            raise ValueError("at least one symbol is required")
        if risk_level not in RISK_LEVELS:
            raise ValueError(f"Invalid risk level: {risk_level}. Valid: {list(RISK_LEVELS)}")
        if investment_amount <= 0:
            raise ValueError("investment_amount must be positive")

        data = await self._invoke(ANALYZER_FUNCTION, {
            "symbols": cleaned,
            "riskLevel": risk_level,
            "investmentAmount": investment_amount,
        })
        try:
            return sanitize_analysis(data)
        except ProviderError as exc:
            logger.error("Invalid analysis data structure: %s", data)
            self._fail(exc)
            raise


# ------------------------------------------------------------------ journal

_BIAS_RULES: tuple[tuple[str, str, tuple[str, ...], Sentiment | None], ...] = (
    (
        "Confirmation Bias",
        "You may be seeking information that confirms your existing beliefs.",
        ("confirm", "prove", "sure", "certain"),
        None,
    ),
    (
        "Recency Bias",
        "Your analysis might be overly influenced by recent market events.",
        ("recent", "latest", "today", "yesterday", "week"),
        None,
    ),
    (
        "Emotional Bias",
        "Your excitement may be influencing your objective analysis.",
        ("exciting",),
        Sentiment.BULLISH,
    ),
    (
        "Fear-Driven Decision Making",
        "Your concerns may be causing you to overestimate risks.",
        ("worry", "fear"),
        Sentiment.BEARISH,
    ),
    (
        "FOMO (Fear of Missing Out)",
        "You may be rushing into an investment because others are participating.",
        ("missing out", "everyone", "opportunity", "chance"),
        None,
    ),
)


def identify_potential_biases(content: str, sentiment: Sentiment | None = None) -> list[Bias]:
    """Keyword heuristic for common biases; at most two are reported."""
    lowered = content.lower()
    found: list[Bias] = []
    for name, description, keywords, required in _BIAS_RULES:
        if required is not None and sentiment is not required:
            continue
        if any(k in lowered for k in keywords):
            found.append(Bias(name=name, description=description))
    return found[:MAX_BIASES]


class JournalFeedbackClient(_ProxyFunctionClient):
    """AI feedback on a journal entry."""

    label = "Journal feedback"

    async def review(
        self,
        content: str,
        sentiment: Sentiment | None = None,
        stocks: list[str] | None = None,
    ) -> JournalFeedback:
        if not content or not content.strip():
            raise ValueError("Journal content is required")
        data = await self._invoke(JOURNAL_FEEDBACK_FUNCTION, {
            "journalContent": content,
            "sentiment": sentiment.value if sentiment is not None else None,
            "stocks": list(stocks or []),
        })

        raw_biases = data.get("biases")
        if isinstance(raw_biases, list):
            biases = tuple(
                Bias(name=str(b.get("name", "")), description=str(b.get("description", "")))
                for b in raw_biases
                if isinstance(b, dict) and b.get("name")
            )
        else:
            biases = tuple(identify_potential_biases(content, sentiment))

        return JournalFeedback(
            ai_feedback=_text(data.get("aiFeedback"), ""),
            biases=biases,
        )
