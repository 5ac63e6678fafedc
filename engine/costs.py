"""
Cost & COGS projection: per-line and per-period cost.

Line rules:
  fixed        base value in period 1 only
  recurring    base value every period (amortize=True: base / period_count)
  cogs-linked  linked stream revenue of the SAME period × cogs% / 100
               (the category's own base value is ignored)
  marketing    role-tagged categories contribute nothing themselves; the
               marketing plan is the single source of marketing cost
Staffing from the metadata and the marketing plan are emitted as synthetic
lines ("Staff Costs", "Marketing Budget").
"""

from __future__ import annotations

from typing import Dict, Optional

from core.config import DEFAULT_CONFIG, EngineConfig
from core.schema import (
    MARKETING_LINE,
    STAFF_LINE,
    ChannelMarketing,
    CostCategory,
    ForecastAssumptions,
    HighLevelMarketing,
)

from .revenue import stream_revenue_for_period


def cogs_for_period(assumptions: ForecastAssumptions, cost: CostCategory, period: int) -> float:
    linked = assumptions.stream(cost.linked_stream)
    linked_revenue = stream_revenue_for_period(assumptions, linked, period)
    return linked_revenue * assumptions.cogs_percent_for(cost) / 100.0


def category_cost_for_period(
    assumptions: ForecastAssumptions,
    cost: CostCategory,
    period: int,
) -> float:
    if cost.role == "cogs-linked":
        return cogs_for_period(assumptions, cost, period)
    if cost.role == "marketing":
        return 0.0
    if cost.kind == "fixed":
        return float(cost.base_value) if period == 1 else 0.0
    if cost.amortize:
        return float(cost.base_value) / assumptions.period_count
    return float(cost.base_value)


def marketing_for_period(
    assumptions: ForecastAssumptions,
    period: int,
    config: Optional[EngineConfig] = None,
) -> float:
    """Marketing contribution of the plan for ``period``."""
    cfg = config or DEFAULT_CONFIG
    plan = assumptions.marketing_plan

    if isinstance(plan, ChannelMarketing):
        weekly = float(sum(ch.weekly_budget for ch in plan.channels))
        if assumptions.period_unit == "Month":
            return weekly * cfg.weeks_per_month
        return weekly

    if isinstance(plan, HighLevelMarketing):
        budget = float(plan.total_budget)
        n_periods = assumptions.period_count
        if plan.application == "upfront":
            return budget if period == 1 else 0.0
        if plan.application == "spreadEvenly":
            return budget / n_periods
        spread = plan.spread_duration_periods or n_periods
        return budget / spread if period <= spread else 0.0

    return 0.0


def staffing_for_period(assumptions: ForecastAssumptions, period: int) -> float:
    staffing = assumptions.metadata.staffing
    if staffing is None:
        return 0.0
    return float(staffing.cost_per_period)


def cost_lines_for_period(
    assumptions: ForecastAssumptions,
    period: int,
    config: Optional[EngineConfig] = None,
) -> Dict[str, float]:
    """
    Cost per line for ``period``: configured categories (marketing-role ones
    excluded) in order, then the synthetic staffing and marketing lines when
    they are configured.
    """
    lines: Dict[str, float] = {}
    for cost in assumptions.cost_categories:
        if cost.role == "marketing":
            continue
        lines[cost.name] = category_cost_for_period(assumptions, cost, period)

    if assumptions.metadata.staffing is not None:
        lines[STAFF_LINE] = lines.get(STAFF_LINE, 0.0) + staffing_for_period(assumptions, period)

    if assumptions.marketing_plan.mode != "none":
        lines[MARKETING_LINE] = lines.get(MARKETING_LINE, 0.0) + marketing_for_period(
            assumptions, period, config
        )
    return lines


def cost_for_period(
    assumptions: ForecastAssumptions,
    period: int,
    config: Optional[EngineConfig] = None,
) -> float:
    """Total cost: non-marketing categories + COGS + staffing + marketing."""
    return float(sum(cost_lines_for_period(assumptions, period, config).values()))
