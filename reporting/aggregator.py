"""
Aggregate per-period projections into a forecast summary.

Three views of the same horizon:
  forecast        Σ forecast over every period
  actual to date  Σ actual over periods that have an entry
  revised outlook actual where a period has been reported (up to the latest
                  reported period), forecast everywhere else

Gaps before the latest reported period fall back to forecast; they are never
interpolated. With no actuals the revised outlook equals the forecast exactly.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from core.utils import margin_pct
from core.results import PeriodProjection


@dataclass
class ForecastSummary:
    """Portfolio-level totals and ratios for one forecast run."""
    period_unit: Optional[str]
    period_count: int

    total_revenue_forecast: float
    total_cost_forecast: float
    total_profit_forecast: float

    total_revenue_actual: float
    total_cost_actual: float
    total_profit_actual: float

    revised_total_revenue: float
    revised_total_cost: float
    revised_total_profit: float

    # revised outlook − original forecast
    total_revenue_variance: float
    total_cost_variance: float
    total_profit_variance: float

    avg_profit_margin_forecast: float
    avg_profit_margin_actual: float
    revised_avg_profit_margin: float

    latest_period_with_actuals: int
    periods_with_actuals: int

    avg_revenue_per_period: float
    avg_cost_per_period: float
    avg_profit_per_period: float
    break_even_period: Optional[int]

    # like-for-like: forecast restricted to the periods that have actuals
    period_specific_revenue_forecast: float = 0.0
    period_specific_cost_forecast: float = 0.0
    period_specific_profit_forecast: float = 0.0
    period_specific_profit_margin: float = 0.0
    period_revenue_variance: float = 0.0
    period_cost_variance: float = 0.0
    period_profit_variance: float = 0.0
    period_revenue_variance_percent: float = 0.0
    period_cost_variance_percent: float = 0.0
    period_profit_variance_percent: float = 0.0

    total_attendance_forecast: Optional[int] = None
    total_attendance_actual: Optional[int] = None
    revised_total_attendance: Optional[int] = None
    total_attendance_variance: Optional[int] = None
    revenue_per_attendee_forecast: Optional[float] = None
    revenue_per_attendee_actual: Optional[float] = None
    profit_per_attendee_forecast: Optional[float] = None

    def to_dict(self) -> Dict:
        return asdict(self)

    def to_dataframe(self) -> pd.DataFrame:
        """Metric / value table for display."""
        return pd.DataFrame(
            [{"Metric": k, "Value": v} for k, v in self.to_dict().items()]
        )


def _per_unit(total: float, units: Optional[float]) -> Optional[float]:
    if not units:
        return None
    return total / units


def _positive_pct(numerator: float, denominator: float) -> float:
    return numerator / denominator * 100.0 if denominator > 0 else 0.0


def _break_even_period(projections: List[PeriodProjection]) -> Optional[int]:
    for p in projections:
        if p.cumulative_profit_forecast >= 0:
            return p.period
    return None


def summarize(
    projections: List[PeriodProjection],
    *,
    period_unit: Optional[str] = None,
) -> ForecastSummary:
    """
    Build the ForecastSummary for ``projections`` (ascending period order).

    Margins are profit / revenue × 100 and 0 when revenue is 0; per-attendee
    metrics are None when there is no attendance to divide by.
    Period-specific figures compare actual totals with the forecast of the
    reported periods only; their percentages are 0 when that forecast is <= 0.
    """
    ps = sorted(projections, key=lambda p: p.period)
    n = len(ps)

    periods = np.array([p.period for p in ps], dtype=int)
    has_actual = np.array([p.has_actuals for p in ps], dtype=bool)
    latest = int(periods[has_actual].max()) if has_actual.any() else 0

    rev_f = np.array([p.revenue_forecast for p in ps], dtype=float)
    cost_f = np.array([p.cost_forecast for p in ps], dtype=float)
    profit_f = np.array([p.profit_forecast for p in ps], dtype=float)
    rev_a = np.array([p.revenue_actual if p.has_actuals else 0.0 for p in ps], dtype=float)
    cost_a = np.array([p.cost_actual if p.has_actuals else 0.0 for p in ps], dtype=float)
    profit_a = np.array([p.profit_actual if p.has_actuals else 0.0 for p in ps], dtype=float)

    use_actual = has_actual & (periods <= latest)
    revised_rev = np.where(use_actual, rev_a, rev_f)
    revised_cost = np.where(use_actual, cost_a, cost_f)
    revised_profit = np.where(use_actual, profit_a, profit_f)

    total_rev_f = float(rev_f.sum())
    total_cost_f = float(cost_f.sum())
    total_profit_f = float(profit_f.sum())
    total_rev_a = float(rev_a.sum())
    total_cost_a = float(cost_a.sum())
    total_profit_a = float(profit_a.sum())
    revised_total_rev = float(revised_rev.sum())
    revised_total_cost = float(revised_cost.sum())
    revised_total_profit = float(revised_profit.sum())

    summary = ForecastSummary(
        period_unit=period_unit,
        period_count=n,
        total_revenue_forecast=total_rev_f,
        total_cost_forecast=total_cost_f,
        total_profit_forecast=total_profit_f,
        total_revenue_actual=total_rev_a,
        total_cost_actual=total_cost_a,
        total_profit_actual=total_profit_a,
        revised_total_revenue=revised_total_rev,
        revised_total_cost=revised_total_cost,
        revised_total_profit=revised_total_profit,
        total_revenue_variance=revised_total_rev - total_rev_f,
        total_cost_variance=revised_total_cost - total_cost_f,
        total_profit_variance=revised_total_profit - total_profit_f,
        avg_profit_margin_forecast=margin_pct(total_profit_f, total_rev_f),
        avg_profit_margin_actual=margin_pct(total_profit_a, total_rev_a),
        revised_avg_profit_margin=margin_pct(revised_total_profit, revised_total_rev),
        latest_period_with_actuals=latest,
        periods_with_actuals=int(has_actual.sum()),
        avg_revenue_per_period=total_rev_f / n if n else 0.0,
        avg_cost_per_period=total_cost_f / n if n else 0.0,
        avg_profit_per_period=total_profit_f / n if n else 0.0,
        break_even_period=_break_even_period(ps),
    )

    # --- like-for-like (reported periods only) ---
    ps_rev = float(rev_f[has_actual].sum())
    ps_cost = float(cost_f[has_actual].sum())
    ps_profit = float(profit_f[has_actual].sum())
    summary.period_specific_revenue_forecast = ps_rev
    summary.period_specific_cost_forecast = ps_cost
    summary.period_specific_profit_forecast = ps_profit
    summary.period_specific_profit_margin = _positive_pct(ps_profit, ps_rev)
    summary.period_revenue_variance = total_rev_a - ps_rev
    summary.period_cost_variance = total_cost_a - ps_cost
    summary.period_profit_variance = total_profit_a - ps_profit
    summary.period_revenue_variance_percent = _positive_pct(total_rev_a - ps_rev, ps_rev)
    summary.period_cost_variance_percent = _positive_pct(total_cost_a - ps_cost, ps_cost)
    summary.period_profit_variance_percent = _positive_pct(total_profit_a - ps_profit, ps_profit)

    # --- attendance (attendance-driven events only) ---
    if n and all(p.attendance_forecast is not None for p in ps):
        att_f = np.array([p.attendance_forecast for p in ps], dtype=np.int64)
        att_has = np.array([p.attendance_actual is not None for p in ps], dtype=bool)
        att_a = np.array(
            [p.attendance_actual if p.attendance_actual is not None else 0 for p in ps],
            dtype=np.int64,
        )
        revised_att = np.where(use_actual & att_has, att_a, att_f)

        summary.total_attendance_forecast = int(att_f.sum())
        summary.total_attendance_actual = int(att_a.sum())
        summary.revised_total_attendance = int(revised_att.sum())
        summary.total_attendance_variance = (
            summary.revised_total_attendance - summary.total_attendance_forecast
        )
        summary.revenue_per_attendee_forecast = _per_unit(
            total_rev_f, summary.total_attendance_forecast
        )
        summary.profit_per_attendee_forecast = _per_unit(
            total_profit_f, summary.total_attendance_forecast
        )
        # like-for-like: actual revenue of periods that also recorded attendance
        summary.revenue_per_attendee_actual = _per_unit(
            float(rev_a[att_has].sum()), summary.total_attendance_actual
        )

    return summary
