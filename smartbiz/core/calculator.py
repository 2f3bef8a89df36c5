"""Core P&L calculations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from business_parameters import COSTS

from .metrics import BusinessMetrics, SimulationResult

HOLDING_COST_PER_UNIT = COSTS["HOLDING_COST_PER_UNIT"]


class ZeroLaborEfficiencyError(ZeroDivisionError):
    """Raised when labor hours cannot be derived because efficiency is zero."""

    def __init__(self, metrics: BusinessMetrics):
        super().__init__("Labor efficiency must not be zero (labor hours are undefined).")
        self.metrics = metrics


@dataclass(frozen=True)
class CostBreakdown:
    material_cost: float
    labor_hours: float
    labor_cost: float
    holding_cost: float  # before clamping at zero

    @property
    def charged_holding_cost(self) -> float:
        return max(0.0, self.holding_cost)


@dataclass(frozen=True)
class ResultDiff:
    profit_diff: float
    margin_diff: Optional[float]

    def as_dict(self) -> dict:
        return {"profitDiff": self.profit_diff, "marginDiff": self.margin_diff}


def compute_cost_breakdown(metrics: BusinessMetrics) -> CostBreakdown:
    """Intermediate cost figures behind COGS and operating expenses."""
    if metrics.labor_efficiency == 0:
        raise ZeroLaborEfficiencyError(metrics)

    material_cost = metrics.sales_volume * metrics.material_cost_per_unit
    labor_hours = metrics.sales_volume / metrics.labor_efficiency
    labor_cost = labor_hours * metrics.labor_cost_per_hour
    holding_cost = (metrics.inventory_level - metrics.sales_volume) * HOLDING_COST_PER_UNIT

    return CostBreakdown(
        material_cost=material_cost,
        labor_hours=labor_hours,
        labor_cost=labor_cost,
        holding_cost=holding_cost,
    )


def calculate_pnl(metrics: BusinessMetrics) -> SimulationResult:
    """
    Derive the P&L snapshot for one set of metrics.

    Inputs are not validated: negative values flow through the formulas.
    Zero labor efficiency raises ``ZeroLaborEfficiencyError``; zero revenue
    yields ``profit_margin=None``.
    """
    revenue = metrics.sales_volume * metrics.sales_price

    breakdown = compute_cost_breakdown(metrics)
    cogs = breakdown.material_cost + breakdown.labor_cost

    gross_profit = revenue - cogs

    # Only inventory above sales volume costs money; a shortfall earns no credit
    operating_expenses = metrics.marketing_spend + breakdown.charged_holding_cost

    net_profit = gross_profit - operating_expenses
    profit_margin = (net_profit / revenue) * 100 if revenue != 0 else None

    return SimulationResult(
        revenue=revenue,
        cogs=cogs,
        gross_profit=gross_profit,
        operating_expenses=operating_expenses,
        net_profit=net_profit,
        profit_margin=profit_margin,
    )


def compare_results(base: SimulationResult, new: SimulationResult) -> ResultDiff:
    """Net profit and margin movement from ``base`` to ``new``."""
    if base.profit_margin is None or new.profit_margin is None:
        margin_diff = None
    else:
        margin_diff = new.profit_margin - base.profit_margin

    return ResultDiff(
        profit_diff=new.net_profit - base.net_profit,
        margin_diff=margin_diff,
    )


__all__ = [
    "CostBreakdown",
    "HOLDING_COST_PER_UNIT",
    "ResultDiff",
    "ZeroLaborEfficiencyError",
    "calculate_pnl",
    "compare_results",
    "compute_cost_breakdown",
]
