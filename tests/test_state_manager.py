"""
SmartBiz Session State Tests

Run with: pytest tests/test_state_manager.py -v
"""

import pytest

from smartbiz.core.calculator import calculate_pnl
from smartbiz.core.metrics import BusinessMetrics
from smartbiz.utils.state_manager import (
    APP_STATE_KEY,
    AppState,
    AppView,
    get_app_state,
    get_state,
    init_session_state,
    reset_view_states,
    set_state,
)


# =============================================================================
# APP STATE
# =============================================================================

class TestAppState:

    def test_defaults(self):
        state = AppState()

        assert state.metrics == BusinessMetrics.default()
        assert state.result == calculate_pnl(BusinessMetrics.default())
        assert state.view == AppView.DASHBOARD
        assert state.calc_error is None

    def test_update_recomputes_result(self, default_metrics):
        state = AppState()

        refreshed = state.update_metrics(default_metrics.replace(sales_price=50))

        assert refreshed
        assert state.result.revenue == 4200 * 50
        assert state.result == calculate_pnl(state.metrics), "Result must track metrics"
        assert state.result_metrics is state.metrics

    def test_zero_efficiency_keeps_last_result(self, default_metrics):
        state = AppState(metrics=default_metrics)
        previous = state.result

        refreshed = state.update_metrics(default_metrics.replace(labor_efficiency=0))

        assert not refreshed
        assert state.metrics.labor_efficiency == 0, "Typed value stays visible in the form"
        assert state.result is previous
        assert state.result_metrics is default_metrics, "Result stays paired with the metrics it came from"
        assert "Labor efficiency" in state.calc_error

    def test_valid_update_clears_error(self, default_metrics):
        state = AppState(metrics=default_metrics)
        state.update_metrics(default_metrics.replace(labor_efficiency=0))

        state.update_metrics(default_metrics)

        assert state.calc_error is None

    @pytest.mark.parametrize("view", list(AppView))
    def test_navigate_accepts_view_or_label(self, view):
        state = AppState()

        state.navigate(view.value)

        assert state.view is view


# =============================================================================
# SESSION HELPERS
# =============================================================================

class TestSessionHelpers:

    def test_init_populates_defaults(self, fake_session):
        init_session_state()

        assert isinstance(fake_session[APP_STATE_KEY], AppState)
        assert fake_session['analysis_markdown'] == ''
        assert fake_session['analysis_sources'] == []
        assert fake_session['sim_metrics'] is None
        assert fake_session['image_result'] is None

    def test_init_does_not_overwrite(self, fake_session):
        init_session_state()
        state = fake_session[APP_STATE_KEY]
        fake_session['analysis_markdown'] = 'kept'

        init_session_state()

        assert fake_session[APP_STATE_KEY] is state
        assert fake_session['analysis_markdown'] == 'kept'

    def test_get_app_state_creates_on_first_use(self, fake_session):
        state = get_app_state()

        assert fake_session[APP_STATE_KEY] is state
        assert get_app_state() is state

    def test_get_and_set_state(self, fake_session):
        assert get_state('missing', 'fallback') == 'fallback'

        set_state('upload_status', 'done')

        assert get_state('upload_status') == 'done'

    def test_reset_view_states_only_drops_scratch_keys(self, fake_session):
        init_session_state()
        fake_session['sim_metrics'] = BusinessMetrics.default()
        fake_session['sim_insight'] = 'old insight'

        reset_view_states()

        for key in ['analysis_markdown', 'analysis_sources', 'sim_metrics', 'sim_base', 'sim_insight']:
            assert key not in fake_session, f"{key} should be dropped"
        assert APP_STATE_KEY in fake_session
        assert 'upload_status' in fake_session

    def test_reset_is_safe_when_keys_are_missing(self, fake_session):
        reset_view_states()
        assert fake_session == {}
