"""
Per-period result types.

PeriodProjection is one row of the forecast-vs-actual table. Optional fields
are None when the data does not exist (no actual entry, no attendance); they
are never NaN.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional

import pandas as pd


@dataclass
class PeriodProjection:
    period: int
    label: str
    revenue_forecast: float
    cost_forecast: float
    profit_forecast: float
    period_start: Optional[dt.date] = None

    revenue_actual: Optional[float] = None
    cost_actual: Optional[float] = None
    profit_actual: Optional[float] = None

    revenue_variance: Optional[float] = None
    cost_variance: Optional[float] = None
    profit_variance: Optional[float] = None
    revenue_variance_percent: Optional[float] = None
    cost_variance_percent: Optional[float] = None
    profit_variance_percent: Optional[float] = None

    attendance_forecast: Optional[int] = None
    attendance_actual: Optional[int] = None
    attendance_variance: Optional[int] = None
    attendance_variance_percent: Optional[float] = None

    # running sums through this period
    cumulative_revenue_forecast: float = 0.0
    cumulative_cost_forecast: float = 0.0
    cumulative_profit_forecast: float = 0.0
    cumulative_attendance_forecast: Optional[int] = None
    cumulative_revenue_actual: Optional[float] = None
    cumulative_cost_actual: Optional[float] = None
    cumulative_profit_actual: Optional[float] = None
    cumulative_attendance_actual: Optional[int] = None
    cumulative_revenue_variance: Optional[float] = None
    cumulative_cost_variance: Optional[float] = None
    cumulative_profit_variance: Optional[float] = None
    cumulative_attendance_variance: Optional[int] = None

    @property
    def has_actuals(self) -> bool:
        return self.revenue_actual is not None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class PeriodDetail:
    """Line-item decomposition of one period's forecast."""
    period: int
    label: str
    revenue_lines: Dict[str, float] = field(default_factory=dict)
    cost_lines: Dict[str, float] = field(default_factory=dict)
    # cost line -> operations / staffing / marketing / other
    cost_groups: Dict[str, str] = field(default_factory=dict)
    # cost line -> fixed / recurring / cogs / staffing / marketing
    cost_kinds: Dict[str, str] = field(default_factory=dict)
    attendance: Optional[float] = None

    @property
    def revenue_total(self) -> float:
        return float(sum(self.revenue_lines.values()))

    @property
    def cost_total(self) -> float:
        return float(sum(self.cost_lines.values()))

    @property
    def profit(self) -> float:
        return self.revenue_total - self.cost_total


def projections_to_dataframe(projections: List[PeriodProjection]) -> pd.DataFrame:
    """Tabular view of the projections, one row per period."""
    if not projections:
        return pd.DataFrame(columns=list(PeriodProjection.__dataclass_fields__))
    return pd.DataFrame([p.to_dict() for p in projections])
