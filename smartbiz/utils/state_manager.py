"""
SmartBiz - State Manager
Holds the per-session application state and keeps the P&L result in step
with the metrics it was derived from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import streamlit as st

from smartbiz.core.calculator import ZeroLaborEfficiencyError, calculate_pnl
from smartbiz.core.metrics import BusinessMetrics, SimulationResult

APP_STATE_KEY = 'app_state'


class AppView(str, Enum):
    DASHBOARD = 'Dashboard'
    INPUTS = 'Data Input'
    ANALYSIS = 'Analysis & History'
    SIMULATION = 'P&L Simulator'
    IMAGE_STUDIO = 'Image Studio'


@dataclass
class AppState:
    """Current view plus the metrics/result pair every tab renders from."""
    metrics: BusinessMetrics = field(default_factory=BusinessMetrics.default)
    result: Optional[SimulationResult] = None
    view: AppView = AppView.DASHBOARD
    calc_error: Optional[str] = None
    # Metrics ``result`` was computed from; differs from ``metrics`` while calc_error is set
    result_metrics: Optional[BusinessMetrics] = None

    def __post_init__(self):
        if self.result is None:
            self.result = calculate_pnl(self.metrics)
        if self.result_metrics is None:
            self.result_metrics = self.metrics

    def update_metrics(self, metrics: BusinessMetrics) -> bool:
        """
        Replace the metrics and recompute the result.

        When the new metrics cannot be calculated (zero labor efficiency) the
        metrics are still stored so the form shows what the user typed, the
        last valid result and its metrics are kept, and ``calc_error`` carries
        the reason. Returns True when the result was refreshed.
        """
        self.metrics = metrics
        try:
            self.result = calculate_pnl(metrics)
        except ZeroLaborEfficiencyError as e:
            self.calc_error = str(e)
            return False
        self.result_metrics = metrics
        self.calc_error = None
        return True

    def navigate(self, view: AppView):
        self.view = AppView(view)


def init_session_state():
    """Initialize all session state variables."""
    defaults = {
        APP_STATE_KEY: None,

        # Per-view scratch state
        'analysis_markdown': '',
        'analysis_sources': [],
        'sim_metrics': None,
        'sim_base': None,
        'sim_insight': '',
        'upload_status': '',
        'image_source': None,
        'image_result': None,
    }

    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default

    if st.session_state[APP_STATE_KEY] is None:
        st.session_state[APP_STATE_KEY] = AppState()


def get_app_state() -> AppState:
    """Return the session's AppState, creating it on first use."""
    state = st.session_state.get(APP_STATE_KEY)
    if state is None:
        state = AppState()
        st.session_state[APP_STATE_KEY] = state
    return state


def get_state(key: str, default: Any = None) -> Any:
    """Get a value from session state."""
    return st.session_state.get(key, default)


def set_state(key: str, value: Any):
    """Set a value in session state."""
    st.session_state[key] = value


def reset_view_states():
    """Drop per-view scratch values so they rebuild from fresh metrics."""
    for key in ['analysis_markdown', 'analysis_sources', 'sim_metrics', 'sim_base', 'sim_insight']:
        if key in st.session_state:
            del st.session_state[key]
