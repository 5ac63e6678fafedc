"""
Actuals merge & variance: attach recorded results to forecast periods.

For each period with an actual entry:
  revenue_actual = Σ revenue_actuals,  cost_actual = Σ cost_actuals
  variance       = actual − forecast   (signed; interpretation is the consumer's:
                                        a positive cost variance is unfavorable)
  variance %     = variance / forecast × 100, None when forecast == 0

Duplicate entries for one period resolve last-wins by insertion order and are
reported, never silently dropped.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from core.config import DEFAULT_CONFIG, EngineConfig
from core.schema import ActualPeriodEntry
from core.utils import safe_pct, snap_to_zero
from core.results import PeriodProjection

from .validators import index_actuals

logger = logging.getLogger(__name__)


def _apply_entry(p: PeriodProjection, entry: ActualPeriodEntry, cfg: EngineConfig) -> None:
    p.revenue_actual = entry.revenue_total
    p.cost_actual = entry.cost_total
    p.profit_actual = p.revenue_actual - p.cost_actual

    p.revenue_variance = snap_to_zero(p.revenue_actual - p.revenue_forecast, cfg.variance_epsilon)
    p.cost_variance = snap_to_zero(p.cost_actual - p.cost_forecast, cfg.variance_epsilon)
    p.profit_variance = snap_to_zero(p.profit_actual - p.profit_forecast, cfg.variance_epsilon)

    p.revenue_variance_percent = safe_pct(p.revenue_variance, p.revenue_forecast)
    p.cost_variance_percent = safe_pct(p.cost_variance, p.cost_forecast)
    p.profit_variance_percent = safe_pct(p.profit_variance, p.profit_forecast)

    if entry.attendance_actual is not None and p.attendance_forecast is not None:
        p.attendance_actual = int(entry.attendance_actual)
        p.attendance_variance = p.attendance_actual - p.attendance_forecast
        p.attendance_variance_percent = safe_pct(p.attendance_variance, p.attendance_forecast)


def merge_and_compare(
    projections: List[PeriodProjection],
    actual_entries: Iterable[ActualPeriodEntry],
    *,
    period_unit: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> Tuple[List[PeriodProjection], List[str]]:
    """
    Attach actual and variance fields to ``projections`` in place.

    Parameters
    ----------
    projections : list of PeriodProjection
        Forecast rows, one per period, as built by the runner.
    actual_entries : iterable of ActualPeriodEntry
        Recorded actuals; at most one per period is expected.
    period_unit : str, optional
        Forecast granularity ("Week" / "Month"). Entries in another unit are
        ignored with a warning. None accepts any unit.

    Returns
    -------
    (projections, warnings)
    projections: the same list, ordered by period, with actual fields set
    warnings: data-quality messages (duplicates, unit mismatch, out of range)
    """
    cfg = config or DEFAULT_CONFIG
    projections.sort(key=lambda p: p.period)
    lookup, rejected, duplicates = index_actuals(
        actual_entries, period_unit=period_unit, period_count=len(projections)
    )
    warnings = rejected + duplicates
    for w in warnings:
        logger.warning(w)

    cum_rev = cum_cost = cum_profit = 0.0
    cum_rev_var = cum_cost_var = cum_profit_var = 0.0
    cum_att = cum_att_var = 0
    seen_attendance = False

    for p in projections:
        entry = lookup.get(p.period)
        if entry is None:
            continue
        _apply_entry(p, entry, cfg)

        cum_rev += p.revenue_actual
        cum_cost += p.cost_actual
        cum_profit += p.profit_actual
        cum_rev_var += p.revenue_variance
        cum_cost_var += p.cost_variance
        cum_profit_var += p.profit_variance
        p.cumulative_revenue_actual = cum_rev
        p.cumulative_cost_actual = cum_cost
        p.cumulative_profit_actual = cum_profit
        p.cumulative_revenue_variance = snap_to_zero(cum_rev_var, cfg.variance_epsilon)
        p.cumulative_cost_variance = snap_to_zero(cum_cost_var, cfg.variance_epsilon)
        p.cumulative_profit_variance = snap_to_zero(cum_profit_var, cfg.variance_epsilon)

        if p.attendance_actual is not None:
            seen_attendance = True
            cum_att += p.attendance_actual
            cum_att_var += p.attendance_variance
        if seen_attendance:
            p.cumulative_attendance_actual = cum_att
            p.cumulative_attendance_variance = cum_att_var

    logger.debug("Merged %d actual entries into %d periods", len(lookup), len(projections))
    return projections, warnings
