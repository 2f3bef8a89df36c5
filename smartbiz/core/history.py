"""
SmartBiz - Historical Dataset
Six canned months built from the default metrics, used as the comparison
baseline for charts and AI prompts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import pandas as pd

from business_parameters import CURRENT_PERIOD_LABEL, HISTORY

from .calculator import calculate_pnl
from .metrics import BusinessMetrics, SimulationResult


@dataclass(frozen=True)
class HistoricalPeriod:
    month: str
    metrics: BusinessMetrics
    result: SimulationResult


def build_historical_data(
    base: Optional[BusinessMetrics] = None,
    variations: Iterable = HISTORY,
) -> Tuple[HistoricalPeriod, ...]:
    """Apply each month's overrides to ``base`` and run it through the calculator."""
    base = base or BusinessMetrics.default()
    periods = []
    for month, overrides in variations:
        metrics = base.replace(**overrides)
        periods.append(HistoricalPeriod(month=month, metrics=metrics, result=calculate_pnl(metrics)))
    return tuple(periods)


HISTORICAL_DATA: Tuple[HistoricalPeriod, ...] = build_historical_data()


def history_summary(history: Sequence[HistoricalPeriod] = HISTORICAL_DATA) -> str:
    """One-line trend used as prompt context: ``Jan: NetProfit=<value>, Feb: ...``."""
    return ", ".join(f"{h.month}: NetProfit={h.result.net_profit}" for h in history)


def build_trend_frame(
    current: SimulationResult,
    history: Sequence[HistoricalPeriod] = HISTORICAL_DATA,
) -> pd.DataFrame:
    """History rows followed by the current snapshot, ready for charting."""
    rows = [
        {
            'Period': h.month,
            'Revenue': h.result.revenue,
            'Profit': h.result.net_profit,
            'Margin': h.result.profit_margin,
        }
        for h in history
    ]
    rows.append({
        'Period': CURRENT_PERIOD_LABEL,
        'Revenue': current.revenue,
        'Profit': current.net_profit,
        'Margin': current.profit_margin,
    })
    df = pd.DataFrame(rows, columns=['Period', 'Revenue', 'Profit', 'Margin'])
    # None margins become NaN so plotly leaves a gap instead of failing
    df['Margin'] = pd.to_numeric(df['Margin'])
    return df
