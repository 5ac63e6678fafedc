"""
Forecast engine: deterministic per-period revenue, cost and attendance
projection plus the runner that merges actuals and builds the summary.
"""

from .revenue import attendance_for_period, revenue_for_period
from .costs import cost_for_period, marketing_for_period
from .projection import PeriodDetail, PeriodProjection, project_period_detail
from .runner import ForecastResult, project_periods, run_forecast

__all__ = [
    "attendance_for_period",
    "revenue_for_period",
    "cost_for_period",
    "marketing_for_period",
    "PeriodDetail",
    "PeriodProjection",
    "project_period_detail",
    "ForecastResult",
    "project_periods",
    "run_forecast",
]
