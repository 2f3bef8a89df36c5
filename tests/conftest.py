"""
Shared pytest fixtures for SmartBiz tests.
"""
import io
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from openpyxl import Workbook

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from smartbiz.core.metrics import BusinessMetrics  # noqa: E402


@pytest.fixture
def default_metrics():
    """Baseline scenario: 5000 in stock, 4200 sold at $45."""
    return BusinessMetrics(
        inventory_level=5000,
        material_cost_per_unit=15.50,
        labor_efficiency=12,
        labor_cost_per_hour=25.00,
        sales_volume=4200,
        sales_price=45.00,
        marketing_spend=15000,
    )


@pytest.fixture
def metrics_xlsx():
    """
    In-memory upload with two core metrics, one unknown numeric metric,
    one unknown text metric and a row with no value.
    """
    wb = Workbook()
    ws = wb.active
    ws['A1'] = "Metric"
    ws['B1'] = "Value"

    ws['A2'] = "Sales Volume"
    ws['B2'] = 4500
    ws['A3'] = "Marketing Spend"
    ws['B3'] = "$18,000"
    ws['A4'] = "Competitor Price"
    ws['B4'] = 42.5
    ws['A5'] = "Weather"
    ws['B5'] = "Rainy"
    ws['A6'] = "Empty Row"

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    buffer.name = "metrics.xlsx"
    return buffer


@pytest.fixture
def make_csv_upload():
    """Factory for named in-memory CSV uploads."""
    def _make(text, name="metrics.csv"):
        buffer = io.BytesIO(text.encode("utf-8"))
        buffer.name = name
        return buffer
    return _make


@pytest.fixture
def fake_session(monkeypatch):
    """Swap Streamlit's session state for a plain dict."""
    from smartbiz.utils import state_manager

    fake_st = SimpleNamespace(session_state={})
    monkeypatch.setattr(state_manager, "st", fake_st)
    return fake_st.session_state


class FakeResponses:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class FakeImages:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def edit(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def make_fake_client():
    """Factory for a stand-in OpenAI client exposing responses/images."""
    def _make(response=None, error=None, image_response=None, image_error=None):
        return SimpleNamespace(
            responses=FakeResponses(response, error),
            images=FakeImages(image_response, image_error),
        )
    return _make
