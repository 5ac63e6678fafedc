"""
Single-period forecast detail: every revenue and cost line of one period,
tagged by cost group and kind for breakdown views.
"""

from __future__ import annotations

from typing import Dict, Optional

from core.config import EngineConfig
from core.results import PeriodDetail, PeriodProjection, projections_to_dataframe
from core.schema import MARKETING_LINE, STAFF_LINE, ForecastAssumptions
from core.utils import period_label

from .costs import cost_lines_for_period
from .revenue import attendance_for_period, revenue_lines_for_period

__all__ = [
    "PeriodDetail",
    "PeriodProjection",
    "project_period_detail",
    "projections_to_dataframe",
]


def project_period_detail(
    assumptions: ForecastAssumptions,
    period: int,
    config: Optional[EngineConfig] = None,
) -> PeriodDetail:
    """Revenue and cost lines for a single period, tagged for breakdown views."""
    cost_lines = cost_lines_for_period(assumptions, period, config)

    groups: Dict[str, str] = {}
    kinds: Dict[str, str] = {}
    for cost in assumptions.cost_categories:
        if cost.name not in cost_lines:
            continue
        groups[cost.name] = cost.category
        kinds[cost.name] = "cogs" if cost.role == "cogs-linked" else cost.kind
    if STAFF_LINE in cost_lines:
        groups.setdefault(STAFF_LINE, "staffing")
        kinds.setdefault(STAFF_LINE, "staffing")
    if MARKETING_LINE in cost_lines:
        groups.setdefault(MARKETING_LINE, "marketing")
        kinds.setdefault(MARKETING_LINE, "marketing")

    return PeriodDetail(
        period=period,
        label=period_label(assumptions.period_unit, period),
        revenue_lines=revenue_lines_for_period(assumptions, period),
        cost_lines=cost_lines,
        cost_groups=groups,
        cost_kinds=kinds,
        attendance=attendance_for_period(assumptions, period),
    )

