"""
SmartBiz - P&L Simulator Tab
What-if sliders on top of the current metrics, compared against the base
result, with an AI explanation of the trade-offs.
"""

import streamlit as st

from business_parameters import SIMULATOR_SLIDERS
from smartbiz.core.calculator import ZeroLaborEfficiencyError, calculate_pnl, compare_results
from smartbiz.utils.ai_gateway import AnalysisContext, MissingAPIKeyError, OpenAIGateway
from smartbiz.utils.state_manager import AppState, get_state, set_state


def slider_bounds(value: float, low: float, high: float):
    """Widen the configured range so the current value is always reachable."""
    return min(low, value), max(high, value)


def init_simulation_state(state: AppState):
    """
    Seed the simulated metrics from the last calculated metrics.

    The scenario is reseeded whenever that base changes, so an untouched
    scenario always matches the base result.
    """
    base = state.result_metrics
    if get_state('sim_metrics') is None or get_state('sim_base') != base:
        set_state('sim_metrics', base)
        set_state('sim_base', base)
        set_state('sim_insight', '')
        set_state('sim_version', get_state('sim_version', 0) + 1)


def render_simulation_tab(state: AppState, gateway=None):
    """Render the P&L Decision Simulator."""
    init_simulation_state(state)

    st.header("🧪 P&L Decision Simulator")
    st.caption('Model "What-If" scenarios to see financial impact.')

    base_metrics = state.result_metrics
    base_result = state.result
    sim_metrics = get_state('sim_metrics')
    version = get_state('sim_version', 0)

    col_controls, col_results = st.columns(2)

    with col_controls:
        st.subheader("🎚️ Decision Simulator")
        if st.button("↩️ Reset to Base"):
            set_state('sim_metrics', None)
            set_state('sim_insight', '')
            st.rerun()

        updates = {}
        for field_name, (label, low, high, step) in SIMULATOR_SLIDERS.items():
            current = float(getattr(sim_metrics, field_name))
            lo, hi = slider_bounds(current, low, high)
            updates[field_name] = st.slider(
                label, min_value=lo, max_value=hi, value=current, step=step,
                key=f'sim_{field_name}_{version}'
            )

        changed = {k: v for k, v in updates.items() if v != getattr(sim_metrics, k)}
        if changed:
            sim_metrics = sim_metrics.replace(**changed)
            set_state('sim_metrics', sim_metrics)

        explain_clicked = st.button("Calculate Impact on P&L", type="primary", width="stretch")

    try:
        sim_result = calculate_pnl(sim_metrics)
    except ZeroLaborEfficiencyError as e:
        with col_results:
            st.error(f"❌ {e}")
        return

    diff = compare_results(base_result, sim_result)

    with col_results:
        st.subheader("📊 Simulated P&L")
        c1, c2 = st.columns(2)
        with c1:
            st.metric(
                "Net Profit", f"${sim_result.net_profit:,.0f}",
                delta=f"{diff.profit_diff:,.0f}"
            )
            st.caption(f"Base: ${base_result.net_profit:,.0f}")
        with c2:
            st.metric(
                "Margin", sim_result.margin_label(),
                delta=f"{diff.margin_diff:.1f} pts" if diff.margin_diff is not None else None
            )
            st.caption(f"Base: {base_result.margin_label()}")

        if explain_clicked:
            with st.spinner("Asking the AI strategist..."):
                try:
                    gateway = gateway or OpenAIGateway()
                    narrative = gateway.explain(AnalysisContext(
                        metrics=sim_metrics,
                        result=sim_result,
                        base_metrics=base_metrics,
                        diff=diff,
                    ))
                    set_state('sim_insight', narrative.markdown)
                except MissingAPIKeyError as e:
                    st.error(f"❌ {e}. Set OPENAI_API_KEY in the environment or .streamlit/secrets.toml.")

        insight = get_state('sim_insight', '')
        if insight:
            st.markdown("**AI Strategic Insight**")
            st.info(insight)
