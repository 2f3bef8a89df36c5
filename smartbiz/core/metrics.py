"""
SmartBiz - Metrics Model
Input record for the P&L model, the custom-metric value types and the
derived result record.
"""

from __future__ import annotations

import dataclasses
import math
from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union

from business_parameters import DEFAULTS


@dataclass(frozen=True)
class NumberValue:
    value: float

    def display(self) -> str:
        value = float(self.value)
        if value.is_integer():
            return str(int(value))
        return repr(value)


@dataclass(frozen=True)
class TextValue:
    value: str

    def display(self) -> str:
        return self.value


CustomValue = Union[NumberValue, TextValue]


def custom_value(raw: Any) -> CustomValue:
    """Wrap a raw cell/form value, keeping finite numbers numeric."""
    if isinstance(raw, (NumberValue, TextValue)):
        return raw
    if isinstance(raw, bool):
        return TextValue(str(raw))
    if isinstance(raw, (int, float)):
        if math.isfinite(raw):
            return NumberValue(float(raw))
        return TextValue(str(raw))
    text = str(raw).strip()
    try:
        number = float(text)
    except ValueError:
        return TextValue(text)
    # Non-finite parses ("nan", "inf") stay text
    if not math.isfinite(number):
        return TextValue(text)
    return NumberValue(number)


CORE_FIELDS = (
    "inventory_level",
    "material_cost_per_unit",
    "labor_efficiency",
    "labor_cost_per_hour",
    "sales_volume",
    "sales_price",
    "marketing_spend",
)


@dataclass(frozen=True)
class BusinessMetrics:
    inventory_level: float
    material_cost_per_unit: float
    labor_efficiency: float  # units per labor-hour, must not be zero
    labor_cost_per_hour: float
    sales_volume: float
    sales_price: float
    marketing_spend: float
    custom_metrics: Mapping[str, CustomValue] = field(default_factory=dict)

    def __post_init__(self):
        # Freeze the mapping so two snapshots never share a mutable dict
        frozen = MappingProxyType(
            {str(k): custom_value(v) for k, v in dict(self.custom_metrics).items()}
        )
        object.__setattr__(self, "custom_metrics", frozen)

    def __hash__(self):
        custom = tuple(sorted(self.custom_metrics.items(), key=lambda kv: kv[0]))
        return hash((tuple(self.core_values().values()), custom))

    @classmethod
    def default(cls) -> "BusinessMetrics":
        return cls(**{name: float(DEFAULTS[name]) for name in CORE_FIELDS})

    def replace(self, **changes) -> "BusinessMetrics":
        return dataclasses.replace(self, **changes)

    def core_values(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in CORE_FIELDS}

    def custom_metrics_as_plain(self) -> Dict[str, Union[float, str]]:
        return {key: val.value for key, val in self.custom_metrics.items()}

    def with_custom_metric(self, name: str, value: Any) -> "BusinessMetrics":
        updated = dict(self.custom_metrics)
        updated[name] = custom_value(value)
        return self.replace(custom_metrics=updated)

    def without_custom_metric(self, name: str) -> "BusinessMetrics":
        updated = dict(self.custom_metrics)
        updated.pop(name, None)
        return self.replace(custom_metrics=updated)


@dataclass(frozen=True)
class SimulationResult:
    revenue: float
    cogs: float  # Cost of Goods Sold
    gross_profit: float
    operating_expenses: float
    net_profit: float
    profit_margin: Optional[float]  # None when revenue is zero

    @property
    def margin_defined(self) -> bool:
        return self.profit_margin is not None

    def margin_label(self, digits: int = 1) -> str:
        if self.profit_margin is None:
            return "n/a"
        return f"{self.profit_margin:.{digits}f}%"

    def as_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)
