"""
SmartBiz AI Gateway Tests

All calls go through a stand-in client; nothing here talks to the network.

Run with: pytest tests/test_ai_gateway.py -v
"""

import base64
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from smartbiz.core.calculator import calculate_pnl, compare_results
from smartbiz.core.history import HISTORICAL_DATA, history_summary
from smartbiz.tabs.tab_analysis import run_analysis
from smartbiz.utils.ai_gateway import (
    ANALYSIS_ERROR,
    ANALYSIS_FALLBACK,
    INSIGHT_ERROR,
    INSIGHT_FALLBACK,
    AnalysisContext,
    Citation,
    MissingAPIKeyError,
    NarrativeResult,
    OpenAIGateway,
    build_analysis_prompt,
    build_decision_prompt,
    extract_citations,
    extract_image_bytes,
)


def make_gateway(client=None, api_key="test-key"):
    return OpenAIGateway(
        api_key=api_key,
        client=client,
        text_model="text-model",
        image_model="image-model",
        timeout=5.0,
    )


def text_response(text, output=None):
    return SimpleNamespace(output_text=text, output=output or [])


SEARCH_OUTPUT = [
    {"type": "web_search_call", "status": "completed"},
    {
        "type": "message",
        "content": [{
            "type": "output_text",
            "annotations": [
                {"type": "url_citation", "url": "https://example.com/steel", "title": "Steel prices"},
                {"type": "url_citation", "url": "https://example.com/steel", "title": "Steel prices"},
                {"type": "url_citation", "url": "https://example.com/labor", "title": None},
                {"type": "file_citation", "file_id": "file-1"},
            ],
        }],
    },
]


# =============================================================================
# PROMPTS
# =============================================================================

class TestPrompts:

    def test_analysis_prompt_separates_custom_metrics(self, default_metrics):
        m = default_metrics.with_custom_metric("Competitor Price", 42.5)
        prompt = build_analysis_prompt(m, calculate_pnl(m), "Jan: NetProfit=1")

        core_block = prompt.split("Current Core Metrics:")[1].split("Additional Contextual Metrics")[0]
        custom_block = prompt.split("Additional Contextual Metrics (User Defined):")[1].split("Current P&L")[0]

        assert '"sales_price": 45.0' in core_block
        assert "Competitor Price" not in core_block
        assert '"Competitor Price": 42.5' in custom_block
        assert '"net_profit": 98150' in prompt
        assert "Jan: NetProfit=1" in prompt
        assert "web search" in prompt

    def test_decision_prompt_carries_both_scenarios_and_diff(self, default_metrics):
        new = default_metrics.replace(marketing_spend=20000)
        diff = compare_results(calculate_pnl(default_metrics), calculate_pnl(new))

        prompt = build_decision_prompt(default_metrics, new, diff)

        assert '"marketing_spend": 15000' in prompt
        assert '"marketing_spend": 20000' in prompt
        assert '"profitDiff": -5000' in prompt


# =============================================================================
# RESPONSE PARSING
# =============================================================================

class TestResponseParsing:

    def test_citations_deduplicated_with_title_fallback(self):
        citations = extract_citations(SimpleNamespace(output=SEARCH_OUTPUT))

        assert citations == (
            Citation(uri="https://example.com/steel", title="Steel prices"),
            Citation(uri="https://example.com/labor", title="https://example.com/labor"),
        )

    def test_no_output_means_no_citations(self):
        assert extract_citations(SimpleNamespace(output=None)) == ()

    def test_image_bytes_decoded(self):
        encoded = base64.b64encode(b"PNGDATA").decode()
        response = SimpleNamespace(data=[SimpleNamespace(b64_json=encoded)])

        assert extract_image_bytes(response) == b"PNGDATA"

    def test_missing_image_is_none(self):
        assert extract_image_bytes(SimpleNamespace(data=[])) is None
        assert extract_image_bytes(SimpleNamespace(data=[SimpleNamespace(b64_json=None)])) is None


# =============================================================================
# GATEWAY CALLS
# =============================================================================

class TestOpenAIGateway:

    def test_analysis_returns_text_and_sources(self, make_fake_client, default_metrics):
        client = make_fake_client(response=text_response("## Healthy margins", SEARCH_OUTPUT))
        gateway = make_gateway(client)

        result = gateway.analyze_business_performance(
            default_metrics, calculate_pnl(default_metrics), "Jan: NetProfit=1"
        )

        assert result.markdown == "## Healthy margins"
        assert len(result.citations) == 2
        call = client.responses.calls[0]
        assert call["model"] == "text-model"
        assert call["tools"] == [{"type": "web_search_preview"}]

    def test_empty_analysis_uses_fallback(self, make_fake_client, default_metrics):
        gateway = make_gateway(make_fake_client(response=text_response("")))

        result = gateway.analyze_business_performance(default_metrics, calculate_pnl(default_metrics), "")

        assert result == NarrativeResult(markdown=ANALYSIS_FALLBACK)

    def test_provider_error_becomes_error_text(self, make_fake_client, default_metrics):
        gateway = make_gateway(make_fake_client(error=OpenAIError("boom")))

        result = gateway.analyze_business_performance(default_metrics, calculate_pnl(default_metrics), "")

        assert result.markdown == ANALYSIS_ERROR
        assert result.citations == ()

    def test_missing_key_raises(self, default_metrics):
        gateway = make_gateway(api_key="")

        with pytest.raises(MissingAPIKeyError, match="API Key not found"):
            gateway.analyze_business_performance(default_metrics, calculate_pnl(default_metrics), "")

    def test_decision_insight(self, make_fake_client, default_metrics):
        client = make_fake_client(response=text_response("Spending more paid off."))
        gateway = make_gateway(client)
        new = default_metrics.replace(sales_price=50)
        diff = compare_results(calculate_pnl(default_metrics), calculate_pnl(new))

        text = gateway.simulate_decision_impact(default_metrics, new, diff)

        assert text == "Spending more paid off."
        assert "tools" not in client.responses.calls[0], "Decision insight does not search the web"

    @pytest.mark.parametrize("response, error, expected", [
        (text_response(""), None, INSIGHT_FALLBACK),
        (None, OpenAIError("boom"), INSIGHT_ERROR),
    ])
    def test_decision_insight_fallbacks(self, make_fake_client, default_metrics, response, error, expected):
        gateway = make_gateway(make_fake_client(response=response, error=error))
        diff = compare_results(calculate_pnl(default_metrics), calculate_pnl(default_metrics))

        assert gateway.simulate_decision_impact(default_metrics, default_metrics, diff) == expected

    def test_explain_dispatches_on_context(self, make_fake_client, default_metrics):
        client = make_fake_client(response=text_response("insight", SEARCH_OUTPUT))
        gateway = make_gateway(client)
        result = calculate_pnl(default_metrics)

        review = gateway.explain(AnalysisContext(metrics=default_metrics, result=result))
        decision = gateway.explain(AnalysisContext(
            metrics=default_metrics,
            result=result,
            base_metrics=default_metrics,
            diff=compare_results(result, result),
        ))

        assert len(review.citations) == 2
        assert decision == NarrativeResult(markdown="insight")
        assert "tools" in client.responses.calls[0]
        assert "tools" not in client.responses.calls[1]


class TestImageEdit:

    def test_edit_returns_decoded_image(self, make_fake_client):
        encoded = base64.b64encode(b"EDITED").decode()
        client = make_fake_client(image_response=SimpleNamespace(data=[SimpleNamespace(b64_json=encoded)]))
        gateway = make_gateway(client)

        edited = gateway.edit_product_image(b"RAW", "Put it on a wooden table", "image/png")

        assert edited == b"EDITED"
        call = client.images.calls[0]
        assert call["model"] == "image-model"
        assert call["image"] == ("product.png", b"RAW", "image/png")
        assert call["prompt"] == "Put it on a wooden table"

    def test_no_image_returned(self, make_fake_client):
        gateway = make_gateway(make_fake_client(image_response=SimpleNamespace(data=[])))

        assert gateway.edit_product_image(b"RAW", "retro filter") is None

    def test_provider_error_propagates(self, make_fake_client):
        gateway = make_gateway(make_fake_client(image_error=OpenAIError("rejected")))

        with pytest.raises(OpenAIError):
            gateway.edit_product_image(b"RAW", "retro filter")

    def test_missing_key_raises(self):
        with pytest.raises(MissingAPIKeyError):
            make_gateway(api_key="").edit_product_image(b"RAW", "retro filter")


# =============================================================================
# ANALYSIS TAB WIRING
# =============================================================================

class RecordingGateway:
    def __init__(self, narrative):
        self.narrative = narrative
        self.contexts = []

    def explain(self, context):
        self.contexts.append(context)
        return self.narrative


class TestRunAnalysis:

    def test_stores_markdown_and_sources(self, fake_session):
        from smartbiz.utils.state_manager import AppState

        state = AppState()
        citation = Citation(uri="https://example.com", title="Example")
        gateway = RecordingGateway(NarrativeResult(markdown="All good", citations=(citation,)))

        run_analysis(state, gateway)

        assert fake_session['analysis_markdown'] == "All good"
        assert fake_session['analysis_sources'] == [citation]
        context = gateway.contexts[0]
        assert not context.is_decision
        assert context.result is state.result
        assert context.historical_trend == history_summary(HISTORICAL_DATA)

    def test_zero_efficiency_sends_last_valid_snapshot(self, fake_session, default_metrics):
        from smartbiz.utils.state_manager import AppState

        state = AppState(metrics=default_metrics)
        state.update_metrics(default_metrics.replace(labor_efficiency=0))
        gateway = RecordingGateway(NarrativeResult(markdown="ok"))

        run_analysis(state, gateway)

        context = gateway.contexts[0]
        assert context.metrics == default_metrics, "Rejected form values must not reach the prompt"
        assert context.result == calculate_pnl(context.metrics)
