"""
SmartBiz Analyst - Main Application
AI decision support dashboard: P&L snapshot, history, what-if simulation
and product image studio.

Run with: streamlit run smartbiz/app.py
"""

import sys
from pathlib import Path

# Project root holds config.py and business_parameters.py
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import streamlit as st

import config
from smartbiz.utils.state_manager import AppView, get_app_state, init_session_state

from smartbiz.tabs.tab_dashboard import render_dashboard_tab
from smartbiz.tabs.tab_inputs import render_inputs_tab
from smartbiz.tabs.tab_analysis import render_analysis_tab
from smartbiz.tabs.tab_simulation import render_simulation_tab
from smartbiz.tabs.tab_image_studio import render_image_studio_tab

VIEW_ICONS = {
    AppView.DASHBOARD: "📊",
    AppView.INPUTS: "📝",
    AppView.ANALYSIS: "📈",
    AppView.SIMULATION: "🧪",
    AppView.IMAGE_STUDIO: "✨",
}

# =============================================================================
# PAGE CONFIG
# =============================================================================
st.set_page_config(
    page_title="SmartBiz Analyst",
    page_icon="💼",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Initialize session state
init_session_state()
state = get_app_state()

# =============================================================================
# SIDEBAR - Navigation
# =============================================================================
with st.sidebar:
    st.title("💼 SmartBiz")
    st.caption("AI Decision Support")

    st.markdown("---")

    views = list(AppView)
    choice = st.radio(
        "Navigate",
        views,
        index=views.index(state.view),
        format_func=lambda v: f"{VIEW_ICONS[v]} {v.value}",
        label_visibility="collapsed"
    )
    if choice != state.view:
        state.navigate(choice)

    st.markdown("---")

    if config.get_api_key():
        st.success("✅ AI key detected")
    else:
        st.warning("⚠️ No OPENAI_API_KEY found - AI features disabled")

    st.caption(f"Net profit: ${state.result.net_profit:,.0f} · Margin: {state.result.margin_label()}")

# =============================================================================
# MAIN CONTENT
# =============================================================================
if state.view == AppView.DASHBOARD:
    render_dashboard_tab(state)
elif state.view == AppView.INPUTS:
    render_inputs_tab(state)
elif state.view == AppView.ANALYSIS:
    render_analysis_tab(state)
elif state.view == AppView.SIMULATION:
    render_simulation_tab(state)
elif state.view == AppView.IMAGE_STUDIO:
    render_image_studio_tab()
else:
    st.error("View not found")
