"""
SmartBiz - Dashboard Tab
Headline P&L cards, quick navigation and the cost bridge from revenue to
net profit.
"""

import streamlit as st
import plotly.graph_objects as go

from smartbiz.core.calculator import ZeroLaborEfficiencyError, compute_cost_breakdown
from smartbiz.utils.state_manager import AppState, AppView


def render_pnl_waterfall(state: AppState):
    """Revenue -> COGS -> Opex -> Net Profit bridge."""
    result = state.result
    fig = go.Figure(go.Waterfall(
        measure=["absolute", "relative", "relative", "total"],
        x=["Revenue", "COGS", "Operating Expenses", "Net Profit"],
        y=[result.revenue, -result.cogs, -result.operating_expenses, result.net_profit],
        increasing={"marker": {"color": "green"}},
        decreasing={"marker": {"color": "red"}},
        totals={"marker": {"color": "blue"}}
    ))
    fig.update_layout(title="P&L Bridge", height=380)
    st.plotly_chart(fig, width="stretch")


def render_cost_breakdown(state: AppState):
    try:
        breakdown = compute_cost_breakdown(state.metrics)
    except ZeroLaborEfficiencyError:
        st.info("💡 Set a non-zero labor efficiency to see the cost breakdown")
        return

    fig = go.Figure(go.Bar(
        x=["Material", "Labor", "Marketing", "Holding"],
        y=[
            breakdown.material_cost,
            breakdown.labor_cost,
            state.metrics.marketing_spend,
            breakdown.charged_holding_cost,
        ],
        marker_color=['steelblue', 'orange', 'purple', 'gray']
    ))
    fig.update_layout(title="Cost Breakdown", yaxis_tickprefix="$", height=380)
    st.plotly_chart(fig, width="stretch")
    st.caption(f"Labor hours: {breakdown.labor_hours:,.1f}")


def render_dashboard_tab(state: AppState):
    """Render the Dashboard overview."""
    st.header("📊 Dashboard Overview")
    st.caption("Key metrics and alerts for your business.")

    if state.calc_error:
        st.error(f"❌ {state.calc_error} Showing the last valid result.")

    result = state.result
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Net Revenue", f"${result.revenue:,.0f}")
    with col2:
        st.metric("COGS", f"${result.cogs:,.0f}")
    with col3:
        st.metric("Net Profit", f"${result.net_profit:,.0f}")
    with col4:
        st.metric("Margin", result.margin_label())

    if not result.margin_defined:
        st.warning("⚠️ Revenue is zero, so profit margin is undefined.")

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("👋 Welcome to SmartBiz Analyst")
        st.markdown(
            "Your AI-powered assistant for cost analysis, P&L simulation, "
            "and product visualization."
        )
        b1, b2 = st.columns(2)
        with b1:
            if st.button("View Analysis", type="primary", width="stretch"):
                state.navigate(AppView.ANALYSIS)
                st.rerun()
        with b2:
            if st.button("Simulate Scenario", width="stretch"):
                state.navigate(AppView.SIMULATION)
                st.rerun()

    with col2:
        st.subheader("⚡ Quick Actions")
        b1, b2 = st.columns(2)
        with b1:
            if st.button("📝 Update Data", width="stretch"):
                state.navigate(AppView.INPUTS)
                st.rerun()
        with b2:
            if st.button("✨ Image Studio", width="stretch"):
                state.navigate(AppView.IMAGE_STUDIO)
                st.rerun()

    st.markdown("---")

    col1, col2 = st.columns(2)
    with col1:
        render_pnl_waterfall(state)
    with col2:
        render_cost_breakdown(state)
