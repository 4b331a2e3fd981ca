"""Tests for the AI proxy clients and recommendation sanitizing."""

import asyncio

import pytest

from wisefolio.ai import (
    ADVISOR_FUNCTION,
    ANALYZER_FUNCTION,
    JOURNAL_FEEDBACK_FUNCTION,
    FinancialAdvisor,
    JournalFeedbackClient,
    StockAnalyzer,
    identify_potential_biases,
    sanitize_analysis,
    sanitize_recommendation,
)
from wisefolio.errors import ProviderError, ProviderErrorCode
from wisefolio.models.analysis import AdvisorContext
from wisefolio.models.records import Sentiment
from wisefolio.notifications import NotificationLevel


class TestSanitizeRecommendation:
    def test_valid_passthrough(self):
        rec = sanitize_recommendation({
            "symbol": "AAPL",
            "name": "Apple Inc.",
            "action": "buy",
            "riskLevel": "low",
            "timeFrame": "long",
            "price": 184.92,
            "allocation": 25,
            "potentialReturn": 12.5,
            "rationale": "Strong cash flows",
            "summary": "Quality compounder",
        })
        assert rec.action == "buy"
        assert rec.risk_level == "low"
        assert rec.time_frame == "long"
        assert rec.allocation == 25.0

    def test_invalid_values_get_defaults(self):
        rec = sanitize_recommendation({
            "action": "YOLO",
            "riskLevel": "extreme",
            "timeFrame": "forever",
            "price": "a lot",
            "allocation": None,
        })
        assert rec.symbol == "Unknown"
        assert rec.name == "Unknown Company"
        assert rec.action == "hold"
        assert rec.risk_level == "medium"
        assert rec.time_frame == "medium"
        assert rec.price == 0.0
        assert rec.allocation == 0.0
        assert rec.summary == "No detailed analysis available for Unknown."

    def test_recommendation_alias(self):
        assert sanitize_recommendation({"symbol": "MSFT", "recommendation": "sell"}).action == "sell"

    def test_null_action_uses_recommendation(self):
        rec = sanitize_recommendation({"symbol": "MSFT", "action": None, "recommendation": "buy"})
        assert rec.action == "buy"

    def test_non_dict(self):
        assert sanitize_recommendation("garbage").symbol == "Unknown"


class TestSanitizeAnalysis:
    def test_nested_layout(self):
        result = sanitize_analysis({"analysis": {
            "analysis": {"summary": "Tech looks strong", "marketOutlook": "Bullish"},
            "recommendations": [{"symbol": "AAPL", "action": "buy"}],
        }})
        assert result.analysis.summary == "Tech looks strong"
        assert result.analysis.market_outlook == "Bullish"
        assert result.analysis.risk_assessment == "Risk assessment unavailable"
        assert result.recommendations[0].symbol == "AAPL"

    def test_flat_layout(self):
        result = sanitize_analysis({
            "analysis": {"summary": "ok"},
            "recommendations": [],
        })
        assert result.analysis.summary == "ok"
        assert result.recommendations == ()

    def test_missing_summary(self):
        result = sanitize_analysis({"recommendations": []})
        assert result.analysis.summary == "Analysis unavailable"
        assert result.analysis.market_outlook == "Market outlook unavailable"

    def test_missing_recommendations(self):
        with pytest.raises(ProviderError) as exc_info:
            sanitize_analysis({"analysis": {"summary": "ok"}})
        assert exc_info.value.code == ProviderErrorCode.VALIDATION_FAILED


class TestFinancialAdvisor:
    def test_ask(self, transport, notifier):
        transport.set_function(ADVISOR_FUNCTION, {"response": "Diversify."})
        advisor = FinancialAdvisor(transport, notifier)
        context = AdvisorContext(risk_tolerance="low", investment_goals=("retirement",))

        assert asyncio.run(advisor.ask(" Should I buy bonds? ", context)) == "Diversify."
        assert transport.calls == [(ADVISOR_FUNCTION, {
            "query": "Should I buy bonds?",
            "userContext": {"riskTolerance": "low", "investmentGoals": ["retirement"]},
        })]

    def test_error_notifies_and_raises(self, transport, notifier):
        transport.set_function(ADVISOR_FUNCTION, {"error": "OpenAI API key not configured"})
        advisor = FinancialAdvisor(transport, notifier)
        with pytest.raises(ProviderError):
            asyncio.run(advisor.ask("hi"))
        assert notifier.messages(NotificationLevel.ERROR) == [
            "AI Advisor error: OpenAI API key not configured",
        ]

    def test_empty_response(self, transport, notifier):
        transport.set_function(ADVISOR_FUNCTION, {"response": ""})
        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(FinancialAdvisor(transport, notifier).ask("hi"))
        assert exc_info.value.code == ProviderErrorCode.NO_DATA

    def test_blank_query(self, transport, notifier):
        with pytest.raises(ValueError):
            asyncio.run(FinancialAdvisor(transport, notifier).ask("  "))
        assert transport.calls == []


class TestStockAnalyzer:
    def test_analyze(self, transport, notifier):
        transport.set_function(ANALYZER_FUNCTION, {"analysis": {
            "analysis": {"summary": "s", "marketOutlook": "m", "riskAssessment": "r"},
            "recommendations": [{"symbol": "AAPL", "action": "buy", "riskLevel": "high"}],
        }})
        result = asyncio.run(StockAnalyzer(transport, notifier).analyze(["aapl", " "], "high", 5000))
        assert result.recommendations[0].risk_level == "high"
        body = transport.calls_to(ANALYZER_FUNCTION)[0]
        assert body == {"symbols": ["AAPL"], "riskLevel": "high", "investmentAmount": 5000}

    def test_invalid_structure_notifies(self, transport, notifier):
        transport.set_function(ANALYZER_FUNCTION, {"analysis": "plain text"})
        with pytest.raises(ProviderError):
            asyncio.run(StockAnalyzer(transport, notifier).analyze(["AAPL"]))
        assert notifier.messages(NotificationLevel.ERROR) == [
            "Stock analysis error: Failed to generate stock analysis",
        ]

    @pytest.mark.parametrize("symbols,risk,amount", [
        ([], "medium", 1000),
        (["AAPL"], "reckless", 1000),
        (["AAPL"], "low", 0),
    ])
    def test_input_validation(self, transport, notifier, symbols, risk, amount):
        with pytest.raises(ValueError):
            asyncio.run(StockAnalyzer(transport, notifier).analyze(symbols, risk, amount))


class TestBiases:
    def test_confirmation_and_recency(self):
        biases = identify_potential_biases("I am sure the latest earnings confirm my thesis")
        assert [b.name for b in biases] == ["Confirmation Bias", "Recency Bias"]

    def test_at_most_two(self):
        content = "I'm certain, after today's news, everyone sees this opportunity"
        assert len(identify_potential_biases(content)) == 2

    def test_emotional_needs_bullish(self):
        content = "This is an exciting company"
        assert identify_potential_biases(content, Sentiment.NEUTRAL) == []
        names = [b.name for b in identify_potential_biases(content, Sentiment.BULLISH)]
        assert names == ["Emotional Bias"]

    def test_fear_needs_bearish(self):
        names = [b.name for b in identify_potential_biases("I worry about debt", Sentiment.BEARISH)]
        assert names == ["Fear-Driven Decision Making"]

    def test_no_bias(self):
        assert identify_potential_biases("Revenue grew 8% on services.") == []


class TestJournalFeedback:
    def test_server_biases(self, transport, notifier):
        transport.set_function(JOURNAL_FEEDBACK_FUNCTION, {
            "aiFeedback": "Consider position sizing.",
            "biases": [{"name": "Anchoring", "description": "Fixed on entry price"}],
        })
        client = JournalFeedbackClient(transport, notifier)
        feedback = asyncio.run(client.review("Bought more at $150", Sentiment.BULLISH, ["AAPL"]))
        assert feedback.ai_feedback == "Consider position sizing."
        assert [b.name for b in feedback.biases] == ["Anchoring"]
        body = transport.calls_to(JOURNAL_FEEDBACK_FUNCTION)[0]
        assert body == {"journalContent": "Bought more at $150", "sentiment": "bullish", "stocks": ["AAPL"]}

    def test_local_biases_when_absent(self, transport, notifier):
        transport.set_function(JOURNAL_FEEDBACK_FUNCTION, {"aiFeedback": "ok"})
        client = JournalFeedbackClient(transport, notifier)
        feedback = asyncio.run(client.review("Everyone is buying, I can't miss this chance"))
        assert [b.name for b in feedback.biases] == ["FOMO (Fear of Missing Out)"]

    def test_blank_content(self, transport, notifier):
        with pytest.raises(ValueError):
            asyncio.run(JournalFeedbackClient(transport, notifier).review(""))
