"""
Category breakdown of a single period, for detail views.

Percentages are shares of the period's own total (not the horizon total),
rounded half-up independently per share. Rounded shares need not sum to
exactly 100; with k shares the sum stays within 100 ± k.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List

import pandas as pd

from core.utils import round_to_int
from core.results import PeriodDetail

_GROUP_LABELS = {
    "operations": "Operations",
    "staffing": "Staffing",
    "marketing": "Marketing",
    "other": "Other",
}

_KIND_LABELS = {
    "fixed": "Fixed Costs",
    "recurring": "Recurring Costs",
    "cogs": "Cost of Goods Sold",
    "staffing": "Staffing Costs",
    "marketing": "Marketing Costs",
}


class BreakdownSource(str, Enum):
    REVENUE = "revenue"
    COST = "cost"
    COST_CATEGORY = "cost_category"
    COST_KIND = "cost_kind"


@dataclass(frozen=True)
class CategoryShare:
    name: str
    value: float
    percentage_of_period_total: int

    @property
    def name_and_percentage(self) -> str:
        return f"{self.name} ({self.percentage_of_period_total}%)"


def _grouped(lines: Dict[str, float], tags: Dict[str, str], labels: Dict[str, str]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for name, value in lines.items():
        tag = tags.get(name, "other")
        label = labels.get(tag, tag.title())
        out[label] = out.get(label, 0.0) + value
    return out


def category_values(detail: PeriodDetail, source: BreakdownSource) -> Dict[str, float]:
    source = BreakdownSource(source)
    if source is BreakdownSource.REVENUE:
        return dict(detail.revenue_lines)
    if source is BreakdownSource.COST:
        return dict(detail.cost_lines)
    if source is BreakdownSource.COST_CATEGORY:
        return _grouped(detail.cost_lines, detail.cost_groups, _GROUP_LABELS)
    return _grouped(detail.cost_lines, detail.cost_kinds, _KIND_LABELS)


def breakdown(detail: PeriodDetail, source: BreakdownSource = BreakdownSource.REVENUE) -> List[CategoryShare]:
    """
    Shares of ``detail``'s revenue or cost total, largest first.

    Zero-valued lines are kept for line sources (a fixed cost after period 1
    still appears at 0%); grouped sources drop empty groups. A zero period
    total gives every share 0%.
    """
    source = BreakdownSource(source)
    values = category_values(detail, source)
    if source in (BreakdownSource.COST_CATEGORY, BreakdownSource.COST_KIND):
        values = {k: v for k, v in values.items() if v > 0}

    total = float(sum(values.values()))
    shares = [
        CategoryShare(
            name=name,
            value=float(value),
            percentage_of_period_total=round_to_int(value / total * 100.0) if total > 0 else 0,
        )
        for name, value in values.items()
    ]
    # stable sort keeps configuration order among equal values
    return sorted(shares, key=lambda s: s.value, reverse=True)


def breakdown_to_dataframe(shares: List[CategoryShare]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"Category": s.name, "Value": s.value, "Percentage": s.percentage_of_period_total}
            for s in shares
        ],
        columns=["Category", "Value", "Percentage"],
    )
