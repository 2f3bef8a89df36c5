"""
SmartBiz - Analysis Tab
Historical trend vs. the current snapshot, plus the AI anomaly and market
analysis with its web sources.
"""

import streamlit as st
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from smartbiz.core.history import HISTORICAL_DATA, build_trend_frame, history_summary
from smartbiz.utils.ai_gateway import AnalysisContext, MissingAPIKeyError, OpenAIGateway
from smartbiz.utils.state_manager import AppState, get_state, set_state


def render_trend_chart(state: AppState):
    df = build_trend_frame(state.result, HISTORICAL_DATA)

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(go.Scatter(x=df['Period'], y=df['Revenue'], name='Revenue',
                             mode='lines+markers', line=dict(color='#8884d8')), secondary_y=False)
    fig.add_trace(go.Scatter(x=df['Period'], y=df['Profit'], name='Profit',
                             mode='lines+markers', line=dict(color='#82ca9d')), secondary_y=False)
    fig.add_trace(go.Scatter(x=df['Period'], y=df['Margin'], name='Margin %',
                             mode='lines+markers', line=dict(color='#ff7300')), secondary_y=True)
    fig.update_layout(title="Historical Trend & Current Status", height=400)
    fig.update_yaxes(title_text="$", secondary_y=False)
    fig.update_yaxes(title_text="Margin %", secondary_y=True)
    st.plotly_chart(fig, width="stretch")

    with st.expander("📋 Trend Data", expanded=False):
        st.dataframe(df, width="stretch", hide_index=True)


def run_analysis(state: AppState, gateway=None):
    """Ask the gateway about the last calculated snapshot and store the narrative."""
    gateway = gateway or OpenAIGateway()
    context = AnalysisContext(
        metrics=state.result_metrics,
        result=state.result,
        historical_trend=history_summary(HISTORICAL_DATA),
    )
    narrative = gateway.explain(context)
    set_state('analysis_markdown', narrative.markdown)
    set_state('analysis_sources', list(narrative.citations))


def render_analysis_tab(state: AppState):
    """Render the Analysis & History tab."""
    st.header("📈 Performance Analysis")
    st.caption("Compare current performance against history with AI insights.")

    render_trend_chart(state)

    st.markdown("---")
    col1, col2 = st.columns([3, 1])
    with col1:
        st.subheader("⚡ AI Anomaly & Market Analysis")
    with col2:
        clicked = st.button("Analyze Anomalies", type="primary", width="stretch")

    if state.calc_error:
        st.warning(f"⚠️ {state.calc_error} Analysis uses the last valid P&L.")

    if clicked:
        with st.spinner("Analyzing with AI..."):
            try:
                run_analysis(state)
            except MissingAPIKeyError as e:
                st.error(f"❌ {e}. Set OPENAI_API_KEY in the environment or .streamlit/secrets.toml.")

    analysis = get_state('analysis_markdown', '')
    if analysis:
        st.markdown(analysis)
    else:
        st.info('Click "Analyze Anomalies" to generate insights based on internal data and web search trends.')

    sources = get_state('analysis_sources', [])
    if sources:
        st.markdown("---")
        st.markdown("**Sources (Web Search Grounding)**")
        for source in sources:
            st.markdown(f"- [{source.title}]({source.uri})")
