"""
SmartBiz - Data Input Tab
Spreadsheet import, template download, core parameter form and the
free-form additional metrics grid.
"""

import streamlit as st
import pandas as pd
from st_aggrid import AgGrid, GridOptionsBuilder, GridUpdateMode, DataReturnMode

import config
from business_parameters import FORM_GROUPS, REPORT_FILENAME, SUPPORTED_UPLOAD_TYPES, TEMPLATE_FILENAME
from smartbiz.core.calculator import compute_cost_breakdown
from smartbiz.core.metrics import custom_value
from smartbiz.utils.data_loader import MetricsFileError, coerce_number, load_metrics_file
from smartbiz.utils.export_engine import create_pnl_workbook, generate_template_csv
from smartbiz.utils.state_manager import AppState, get_state, reset_view_states, set_state

SAMPLE_FILENAME = "sample_metrics.csv"


def _form_version() -> int:
    return get_state('form_version', 0)


def _bump_form_version():
    """Force the form widgets to pick up values that changed outside them."""
    set_state('form_version', _form_version() + 1)


def apply_import(state: AppState, file):
    """Merge an uploaded/sample file into the metrics and record the status."""
    try:
        imported = load_metrics_file(file, state.metrics)
    except MetricsFileError as e:
        set_state('upload_status', str(e))
        return

    if imported.updated_count > 0:
        state.update_metrics(imported.metrics)
        reset_view_states()
        _bump_form_version()
    set_state('upload_status', imported.message)


def export_snapshot(state: AppState) -> bytes:
    """Workbook for the last calculated metrics/result pair."""
    metrics = state.result_metrics
    return create_pnl_workbook(metrics, state.result, compute_cost_breakdown(metrics))


def render_import_section(state: AppState):
    st.subheader("📁 Data Import (Excel/CSV)")

    uploaded = st.file_uploader(
        "Drag and drop your Excel file here",
        type=SUPPORTED_UPLOAD_TYPES,
        key='metrics_upload',
        help='Supported columns: "Metric", "Value"'
    )
    if uploaded is not None:
        # Apply each upload once; reruns keep the same file attached
        signature = (uploaded.name, uploaded.size)
        if get_state('last_upload') != signature:
            set_state('last_upload', signature)
            apply_import(state, uploaded)

    col1, col2, col3 = st.columns(3)
    with col1:
        st.download_button(
            label="⬇️ Download Template",
            data=generate_template_csv(state.metrics),
            file_name=TEMPLATE_FILENAME,
            mime="text/csv",
            width="stretch"
        )
    with col2:
        sample_path = config.get_data_path(SAMPLE_FILENAME, required=False)
        if st.button("📋 Load Sample Data", disabled=sample_path is None, width="stretch"):
            apply_import(state, sample_path)
    with col3:
        st.download_button(
            label="💾 Export P&L Workbook",
            data=export_snapshot(state),
            file_name=REPORT_FILENAME,
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            width="stretch",
            help="Exports the last valid P&L" if state.calc_error else None
        )

    status = get_state('upload_status', '')
    if status:
        if status.startswith('Error'):
            st.error(status)
        elif status.startswith('Warning'):
            st.warning(status)
        else:
            st.success(status)


def render_core_form(state: AppState):
    st.subheader("⚙️ Core Operational Parameters")

    version = _form_version()
    values = {}
    columns = st.columns(len(FORM_GROUPS))
    for col, (group_title, group_fields) in zip(columns, FORM_GROUPS):
        with col:
            st.markdown(f"**{group_title}**")
            for field_name, label, step in group_fields:
                raw = st.number_input(
                    label,
                    value=float(getattr(state.metrics, field_name)),
                    step=step,
                    key=f'in_{field_name}_{version}'
                )
                values[field_name] = coerce_number(raw)

    changed = {k: v for k, v in values.items() if v != getattr(state.metrics, k)}
    if changed:
        state.update_metrics(state.metrics.replace(**changed))
        reset_view_states()

    if state.calc_error:
        st.error(f"❌ {state.calc_error}")


def render_custom_metrics(state: AppState):
    st.subheader("➕ Additional Metrics & Indicators")
    st.caption(
        "Add any other relevant business data here (e.g., Competitor Price, Weather Condition, "
        "Customer Sentiment). The AI Analyst will include these in its evaluation."
    )

    version = _form_version()
    custom = state.metrics.custom_metrics
    if custom:
        custom_df = pd.DataFrame(
            [{'Metric': key, 'Value': val.display()} for key, val in custom.items()]
        )
        gb = GridOptionsBuilder.from_dataframe(custom_df)
        gb.configure_column('Metric', editable=False)
        gb.configure_column('Value', editable=True)
        gb.configure_grid_options(stopEditingWhenCellsLoseFocus=True)

        response = AgGrid(
            custom_df, gridOptions=gb.build(),
            update_mode=GridUpdateMode.MODEL_CHANGED, data_return_mode=DataReturnMode.FILTERED_AND_SORTED,
            fit_columns_on_grid_load=True, height=min(60 + 35 * len(custom_df), 300),
            key=f'custom_grid_{version}'
        )
        if response.data is not None:
            edited = {
                str(row['Metric']): custom_value(row['Value'])
                for _, row in pd.DataFrame(response.data).iterrows()
            }
            if edited != dict(custom):
                state.update_metrics(state.metrics.replace(custom_metrics=edited))

        col1, col2 = st.columns([3, 1])
        with col1:
            to_remove = st.multiselect("Remove metrics", list(custom.keys()), key=f'custom_remove_{version}')
        with col2:
            st.write("")
            if st.button("🗑️ Remove", disabled=not to_remove, width="stretch"):
                metrics = state.metrics
                for key in to_remove:
                    metrics = metrics.without_custom_metric(key)
                state.update_metrics(metrics)
                _bump_form_version()
                st.rerun()
    else:
        st.info("💡 No additional metrics yet")

    col1, col2, col3 = st.columns([2, 2, 1])
    with col1:
        new_key = st.text_input("Metric Name", placeholder="e.g. Employee Churn Rate", key=f'new_key_{version}')
    with col2:
        new_value = st.text_input("Value", placeholder="e.g. 5%", key=f'new_value_{version}')
    with col3:
        st.write("")
        st.write("")
        if st.button("Add", type="primary", width="stretch"):
            if new_key.strip() and new_value.strip():
                state.update_metrics(state.metrics.with_custom_metric(new_key.strip(), new_value.strip()))
                _bump_form_version()
                st.rerun()
            else:
                st.warning("Enter both a name and a value.")


def render_inputs_tab(state: AppState):
    """Render the Data Input tab."""
    st.header("📝 Data Entry")
    st.caption("Update your core business parameters here.")

    render_import_section(state)
    st.markdown("---")
    render_core_form(state)
    st.markdown("---")
    render_custom_metrics(state)
