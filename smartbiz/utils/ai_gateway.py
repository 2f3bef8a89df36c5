"""
SmartBiz - AI Gateway
Sends metric/result snapshots to a hosted model and returns narrative text,
web citations, or edited product images.

Everything provider-specific lives in OpenAIGateway; the tabs only depend on
``explain(context)`` and ``edit_product_image(...)``.
"""

from __future__ import annotations

import base64
import json
import sys
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, Tuple

from openai import OpenAI, OpenAIError

import config
from business_parameters import AI
from smartbiz.core.calculator import ResultDiff
from smartbiz.core.metrics import BusinessMetrics, SimulationResult

ANALYSIS_FALLBACK = "No analysis generated."
ANALYSIS_ERROR = "Error generating analysis. Please check your API key and try again."
INSIGHT_FALLBACK = "No simulation insight generated."
INSIGHT_ERROR = "Error generating simulation insight."


class MissingAPIKeyError(RuntimeError):
    """Raised when a gateway call is attempted without a configured key."""

    def __init__(self):
        super().__init__("API Key not found")


@dataclass(frozen=True)
class Citation:
    uri: str
    title: str


@dataclass(frozen=True)
class NarrativeResult:
    markdown: str
    citations: Tuple[Citation, ...] = ()


@dataclass(frozen=True)
class AnalysisContext:
    """
    What the model is asked about.

    With ``base_metrics`` and ``diff`` set this is a decision-impact question
    (base scenario vs. simulated one); otherwise it is a performance review
    of ``metrics``/``result`` against ``historical_trend``.
    """
    metrics: BusinessMetrics
    result: SimulationResult
    historical_trend: str = ''
    base_metrics: Optional[BusinessMetrics] = None
    diff: Optional[ResultDiff] = None

    @property
    def is_decision(self) -> bool:
        return self.base_metrics is not None and self.diff is not None


class AnalysisGateway(Protocol):
    def explain(self, context: AnalysisContext) -> NarrativeResult:
        ...


# =============================================================================
# PROMPTS
# =============================================================================

def metrics_payload(metrics: BusinessMetrics, include_custom: bool = True) -> dict:
    payload: dict = dict(metrics.core_values())
    if include_custom:
        payload['custom_metrics'] = metrics.custom_metrics_as_plain()
    return payload


def build_analysis_prompt(metrics: BusinessMetrics, result: SimulationResult, historical_trend: str) -> str:
    core = json.dumps(metrics_payload(metrics, include_custom=False), indent=2)
    custom = json.dumps(metrics.custom_metrics_as_plain(), indent=2)
    pnl = json.dumps(result.as_dict(), indent=2)
    return f"""
You are a senior business analyst. Analyze the following business performance data.

Current Core Metrics:
{core}

Additional Contextual Metrics (User Defined):
{custom}

Current P&L Results:
{pnl}

Historical Context:
{historical_trend}

Tasks:
1. Evaluate the current financial health based on the P&L and Core Metrics.
2. INTELLIGENTLY INTERPRET the "Additional Contextual Metrics". How do these extra factors (like competitors, weather, internal HR stats, etc.) likely impact the financial results? Correlation doesn't imply causation, but suggest potential links.
3. Identify any anomalies.
4. Use web search to find if there are any current external market factors (e.g., raw material price trends, labor market shifts) that might explain high costs or sales trends relevant to a general manufacturing/retail context.
5. Provide actionable recommendations.
""".strip()


def build_decision_prompt(base_metrics: BusinessMetrics, new_metrics: BusinessMetrics, diff: ResultDiff) -> str:
    return f"""
A user is simulating a business decision.
Baseline Metrics: {json.dumps(metrics_payload(base_metrics))}
New Simulated Metrics: {json.dumps(metrics_payload(new_metrics))}
Calculated Financial Difference: {json.dumps(diff.as_dict())}

Explain the impact of this decision on the Profit & Loss statement in simple terms.
Focus on the trade-offs (e.g., "Increasing marketing spend by X increased sales by Y, leading to a net positive...").
Keep it concise.
""".strip()


# =============================================================================
# RESPONSE PARSING
# =============================================================================

def _get(obj: Any, name: str, default=None):
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def extract_citations(response: Any) -> Tuple[Citation, ...]:
    """Collect url_citation annotations from a Responses API result, de-duplicated."""
    citations = []
    seen = set()
    for item in _get(response, 'output', None) or []:
        if _get(item, 'type') != 'message':
            continue
        for part in _get(item, 'content', None) or []:
            for note in _get(part, 'annotations', None) or []:
                if _get(note, 'type') != 'url_citation':
                    continue
                uri = _get(note, 'url')
                if not uri or uri in seen:
                    continue
                seen.add(uri)
                citations.append(Citation(uri=uri, title=_get(note, 'title') or uri))
    return tuple(citations)


def extract_image_bytes(response: Any) -> Optional[bytes]:
    """First image in an Images API result, or None when the model returned none."""
    for item in _get(response, 'data', None) or []:
        encoded = _get(item, 'b64_json')
        if encoded:
            return base64.b64decode(encoded)
    return None


# =============================================================================
# GATEWAY
# =============================================================================

@dataclass
class OpenAIGateway:
    api_key: Optional[str] = None
    client: Optional[Any] = None
    text_model: str = field(default_factory=config.get_text_model)
    image_model: str = field(default_factory=config.get_image_model)
    timeout: float = field(default_factory=config.get_ai_timeout)

    def __post_init__(self):
        if self.api_key is None:
            self.api_key = config.get_api_key()

    def _client(self):
        if self.client is None:
            if not self.api_key:
                raise MissingAPIKeyError()
            self.client = OpenAI(api_key=self.api_key, timeout=self.timeout)
        return self.client

    def _require_key(self):
        # An injected client counts as configured
        if self.client is None and not self.api_key:
            raise MissingAPIKeyError()

    def explain(self, context: AnalysisContext) -> NarrativeResult:
        if context.is_decision:
            text = self.simulate_decision_impact(context.base_metrics, context.metrics, context.diff)
            return NarrativeResult(markdown=text)
        return self.analyze_business_performance(context.metrics, context.result, context.historical_trend)

    def analyze_business_performance(
        self,
        metrics: BusinessMetrics,
        result: SimulationResult,
        historical_trend: str,
    ) -> NarrativeResult:
        self._require_key()
        prompt = build_analysis_prompt(metrics, result, historical_trend)

        try:
            response = self._client().responses.create(
                model=self.text_model,
                input=prompt,
                tools=[{"type": "web_search_preview"}],
            )
        except OpenAIError as e:
            print(f"[ERROR] Analysis request failed: {e}", file=sys.stderr)
            return NarrativeResult(markdown=ANALYSIS_ERROR)

        markdown = _get(response, 'output_text') or ANALYSIS_FALLBACK
        return NarrativeResult(markdown=markdown, citations=extract_citations(response))

    def simulate_decision_impact(
        self,
        base_metrics: BusinessMetrics,
        new_metrics: BusinessMetrics,
        diff: ResultDiff,
    ) -> str:
        self._require_key()
        prompt = build_decision_prompt(base_metrics, new_metrics, diff)

        try:
            response = self._client().responses.create(model=self.text_model, input=prompt)
        except OpenAIError as e:
            print(f"[ERROR] Simulation insight request failed: {e}", file=sys.stderr)
            return INSIGHT_ERROR

        return _get(response, 'output_text') or INSIGHT_FALLBACK

    def edit_product_image(
        self,
        image_bytes: bytes,
        prompt: str,
        mime_type: str = AI["DEFAULT_IMAGE_MIME"],
    ) -> Optional[bytes]:
        """
        Apply ``prompt`` to the product photo.

        Returns the edited image bytes, or None when the response carries no
        image. Provider errors propagate to the caller.
        """
        self._require_key()
        extension = mime_type.split('/')[-1] or 'jpeg'
        try:
            response = self._client().images.edit(
                model=self.image_model,
                image=(f"product.{extension}", image_bytes, mime_type),
                prompt=prompt,
            )
        except OpenAIError as e:
            print(f"[ERROR] Image edit failed: {e}", file=sys.stderr)
            raise
        return extract_image_bytes(response)
