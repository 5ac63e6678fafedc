"""
Forecast runner: orchestrates the period loop, the actuals merge and the summary.

Flow for one invocation (pure, no I/O, nothing cached):
  1. Forecast:  periods 1..N in ascending order; revenue, cost, attendance and
                running totals per period
  2. Merge:     recorded actuals attached to their period, variance computed
  3. Summary:   forecast / actual-to-date / revised-outlook totals

Every call recomputes from its inputs; callers decide when to re-run (e.g.
whenever assumptions or actuals change).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from actuals.merge import merge_and_compare
from actuals.validators import index_actuals, line_warnings
from core.config import DEFAULT_CONFIG, EngineConfig
from core.results import PeriodProjection, projections_to_dataframe
from core.schema import ActualPeriodEntry, ForecastAssumptions
from core.utils import period_label, period_start_dates, round_to_int
from reporting.aggregator import ForecastSummary, summarize

from .costs import cost_for_period
from .revenue import attendance_for_period, revenue_for_period

logger = logging.getLogger(__name__)


@dataclass
class ForecastResult:
    projections: List[PeriodProjection]
    summary: ForecastSummary
    warnings: List[str] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        return projections_to_dataframe(self.projections)


def project_periods(
    assumptions: ForecastAssumptions,
    config: Optional[EngineConfig] = None,
) -> List[PeriodProjection]:
    """Forecast-only projections for every period, with running totals."""
    cfg = config or DEFAULT_CONFIG
    n_periods = assumptions.period_count
    unit = assumptions.period_unit

    starts = None
    if assumptions.metadata.start_date is not None:
        starts = period_start_dates(assumptions.metadata.start_date, unit, n_periods)

    projections: List[PeriodProjection] = []
    cum_rev = cum_cost = cum_profit = 0.0
    cum_att = 0

    for period in range(1, n_periods + 1):
        revenue = revenue_for_period(assumptions, period)
        cost = cost_for_period(assumptions, period, cfg)
        profit = revenue - cost
        cum_rev += revenue
        cum_cost += cost
        cum_profit += profit

        p = PeriodProjection(
            period=period,
            label=period_label(unit, period),
            revenue_forecast=revenue,
            cost_forecast=cost,
            profit_forecast=profit,
            period_start=starts[period - 1] if starts else None,
            cumulative_revenue_forecast=cum_rev,
            cumulative_cost_forecast=cum_cost,
            cumulative_profit_forecast=cum_profit,
        )

        attendance = attendance_for_period(assumptions, period)
        if attendance is not None:
            p.attendance_forecast = round_to_int(attendance)
            cum_att += p.attendance_forecast
            p.cumulative_attendance_forecast = cum_att

        projections.append(p)

    return projections


def _select_model_actuals(
    entries: List[ActualPeriodEntry],
    target_model_id: Optional[str],
) -> Tuple[List[ActualPeriodEntry], List[str]]:
    if target_model_id is None:
        return entries, []
    kept = [e for e in entries if e.model_id is None or e.model_id == target_model_id]
    n_other = len(entries) - len(kept)
    warnings = []
    if n_other:
        warnings.append(
            f"{n_other} actual entries belong to another model than {target_model_id!r}; ignored."
        )
    return kept, warnings


def run_forecast(
    assumptions: ForecastAssumptions,
    actuals: Iterable[ActualPeriodEntry] = (),
    *,
    model_id: Optional[str] = None,
    config: Optional[EngineConfig] = None,
) -> ForecastResult:
    """
    Run the full forecast-vs-actual analysis for one model.

    Parameters
    ----------
    assumptions : ForecastAssumptions
        The selected forecast model (validated at construction).
    actuals : iterable of ActualPeriodEntry
        Recorded actuals for the project; at most one per period is expected.
    model_id : str, optional
        Target model; actual entries tagged with a different model_id are
        skipped. Defaults to ``assumptions.model_id``.
    config : EngineConfig, optional
        Conversion constants and tolerances.

    Returns
    -------
    ForecastResult with per-period projections, the summary, and any
    data-quality warnings raised by the actuals.
    """
    cfg = config or DEFAULT_CONFIG
    entries, warnings = _select_model_actuals(list(actuals), model_id or assumptions.model_id)
    for w in warnings:
        logger.warning(w)

    projections = project_periods(assumptions, cfg)
    projections, merge_warnings = merge_and_compare(
        projections, entries, period_unit=assumptions.period_unit, config=cfg
    )
    warnings.extend(merge_warnings)

    merged, _, _ = index_actuals(
        entries, period_unit=assumptions.period_unit, period_count=assumptions.period_count
    )
    for w in line_warnings((merged[p] for p in sorted(merged)), assumptions):
        logger.warning(w)
        warnings.append(w)

    summary = summarize(projections, period_unit=assumptions.period_unit)
    logger.debug(
        "Forecast %s: %d periods, %d with actuals, %d warnings",
        assumptions.model_id, len(projections), summary.periods_with_actuals, len(warnings),
    )
    return ForecastResult(projections=projections, summary=summary, warnings=warnings)
