"""
SmartBiz - Export Engine
Builds the Metric/Value template and the P&L snapshot workbook.
"""

import io
from typing import Optional, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.chart import LineChart, Reference
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from business_parameters import CURRENT_PERIOD_LABEL, METRIC_LABELS
from smartbiz.core.calculator import CostBreakdown
from smartbiz.core.history import HISTORICAL_DATA, HistoricalPeriod
from smartbiz.core.metrics import BusinessMetrics, SimulationResult

RESULT_ROWS = [
    ('Revenue', 'revenue'),
    ('COGS', 'cogs'),
    ('Gross Profit', 'gross_profit'),
    ('Operating Expenses', 'operating_expenses'),
    ('Net Profit', 'net_profit'),
]


def generate_template_csv(metrics: BusinessMetrics) -> str:
    """Metric/Value CSV prefilled with the current core and custom metrics."""
    rows = [(label, getattr(metrics, field_name)) for label, field_name in METRIC_LABELS.items()]
    rows += [(key, val.display()) for key, val in metrics.custom_metrics.items()]
    # object dtype keeps integral values from being written as floats
    df = pd.DataFrame(rows, columns=['Metric', 'Value'], dtype=object)
    return df.to_csv(index=False, lineterminator='\n')


def create_pnl_workbook(
    metrics: BusinessMetrics,
    result: SimulationResult,
    breakdown: Optional[CostBreakdown] = None,
    history: Sequence[HistoricalPeriod] = HISTORICAL_DATA,
) -> bytes:
    """Create the P&L snapshot workbook and return it as xlsx bytes."""
    wb = Workbook()

    # Styles
    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="2F5496", end_color="2F5496", fill_type="solid")
    title_font = Font(bold=True, size=14, color="2F5496")
    section_font = Font(bold=True, size=12, color="2F5496")
    input_fill = PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid")
    output_fill = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
    red_fill = PatternFill(start_color="FFC7CE", end_color="FFC7CE", fill_type="solid")
    thin_border = Border(
        left=Side(style='thin'), right=Side(style='thin'),
        top=Side(style='thin'), bottom=Side(style='thin')
    )

    # =========================================================================
    # TAB 1: PNL_SNAPSHOT
    # =========================================================================
    ws1 = wb.active
    ws1.title = "PNL_SNAPSHOT"

    ws1['A1'] = "P&L SNAPSHOT - Current Period"
    ws1['A1'].font = title_font

    ws1['A3'] = "SECTION A: OPERATING METRICS"
    ws1['A3'].font = section_font

    row = 4
    for label, field_name in METRIC_LABELS.items():
        ws1.cell(row=row, column=1, value=label).border = thin_border
        cell = ws1.cell(row=row, column=2, value=getattr(metrics, field_name))
        cell.border = thin_border
        cell.fill = input_fill
        row += 1

    row += 1
    ws1.cell(row=row, column=1, value="SECTION B: PROFIT & LOSS").font = section_font
    row += 1
    for label, attr in RESULT_ROWS:
        ws1.cell(row=row, column=1, value=label).border = thin_border
        cell = ws1.cell(row=row, column=2, value=getattr(result, attr))
        cell.border = thin_border
        cell.number_format = '$#,##0.00'
        cell.fill = output_fill if getattr(result, attr) >= 0 else red_fill
        row += 1

    ws1.cell(row=row, column=1, value="Profit Margin").border = thin_border
    cell = ws1.cell(row=row, column=2)
    cell.border = thin_border
    if result.profit_margin is None:
        cell.value = "n/a"
    else:
        cell.value = result.profit_margin / 100
        cell.number_format = '0.0%'
    row += 1

    if breakdown is not None:
        row += 1
        ws1.cell(row=row, column=1, value="SECTION C: COST BREAKDOWN").font = section_font
        row += 1
        for label, value in [
            ("Material Cost", breakdown.material_cost),
            ("Labor Hours", breakdown.labor_hours),
            ("Labor Cost", breakdown.labor_cost),
            ("Holding Cost (charged)", breakdown.charged_holding_cost),
        ]:
            ws1.cell(row=row, column=1, value=label).border = thin_border
            cell = ws1.cell(row=row, column=2, value=value)
            cell.border = thin_border
            cell.number_format = '#,##0.00'
            row += 1

    if metrics.custom_metrics:
        row += 1
        ws1.cell(row=row, column=1, value="SECTION D: ADDITIONAL METRICS").font = section_font
        row += 1
        for key, val in metrics.custom_metrics.items():
            ws1.cell(row=row, column=1, value=key).border = thin_border
            ws1.cell(row=row, column=2, value=val.value).border = thin_border
            row += 1

    ws1.column_dimensions['A'].width = 32
    ws1.column_dimensions['B'].width = 18

    # =========================================================================
    # TAB 2: HISTORY
    # =========================================================================
    ws2 = wb.create_sheet("HISTORY")
    headers = ['Period', 'Sales Volume', 'Material Cost / Unit', 'Revenue', 'Net Profit', 'Margin %']
    for col, header in enumerate(headers, start=1):
        cell = ws2.cell(row=1, column=col, value=header)
        cell.font = header_font
        cell.fill = header_fill
        cell.border = thin_border
        ws2.column_dimensions[get_column_letter(col)].width = 20

    periods = [(h.month, h.metrics, h.result) for h in history]
    periods.append((CURRENT_PERIOD_LABEL, metrics, result))
    for r, (label, period_metrics, period_result) in enumerate(periods, start=2):
        values = [
            label,
            period_metrics.sales_volume,
            period_metrics.material_cost_per_unit,
            period_result.revenue,
            period_result.net_profit,
            period_result.profit_margin,
        ]
        for col, value in enumerate(values, start=1):
            cell = ws2.cell(row=r, column=col, value=value)
            cell.border = thin_border
            if col in (4, 5):
                cell.number_format = '$#,##0'
            elif col == 6 and value is not None:
                cell.number_format = '0.0'

    last_row = len(periods) + 1
    chart = LineChart()
    chart.title = "Revenue & Net Profit"
    chart.height = 8
    chart.width = 18
    data = Reference(ws2, min_col=4, max_col=5, min_row=1, max_row=last_row)
    cats = Reference(ws2, min_col=1, min_row=2, max_row=last_row)
    chart.add_data(data, titles_from_data=True)
    chart.set_categories(cats)
    ws2.add_chart(chart, "H2")

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return buffer.getvalue()
