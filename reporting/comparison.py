"""
Scenario comparison: deltas between two forecast summaries.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional

import pandas as pd

from .aggregator import ForecastSummary


@dataclass(frozen=True)
class ScenarioComparison:
    revenue_delta: float
    revenue_delta_percent: float
    cost_delta: float
    cost_delta_percent: float
    profit_delta: float
    profit_delta_percent: float
    margin_delta: float
    break_even_delta: Optional[int]

    def to_dict(self) -> Dict:
        return asdict(self)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([{"Metric": k, "Delta": v} for k, v in self.to_dict().items()])


def _delta_pct(delta: float, base: float) -> float:
    return delta / base * 100.0 if base != 0 else 0.0


def compare_summaries(
    baseline: ForecastSummary,
    scenario: ForecastSummary,
    *,
    use_revised: bool = False,
) -> ScenarioComparison:
    """
    Scenario minus baseline for the headline totals.

    With ``use_revised`` the revised-outlook totals are compared instead of the
    original forecast. Percent deltas are 0 when the baseline value is 0; the
    break-even delta is None unless both summaries break even.
    """
    if use_revised:
        b = (baseline.revised_total_revenue, baseline.revised_total_cost,
             baseline.revised_total_profit, baseline.revised_avg_profit_margin)
        s = (scenario.revised_total_revenue, scenario.revised_total_cost,
             scenario.revised_total_profit, scenario.revised_avg_profit_margin)
    else:
        b = (baseline.total_revenue_forecast, baseline.total_cost_forecast,
             baseline.total_profit_forecast, baseline.avg_profit_margin_forecast)
        s = (scenario.total_revenue_forecast, scenario.total_cost_forecast,
             scenario.total_profit_forecast, scenario.avg_profit_margin_forecast)

    revenue_delta = s[0] - b[0]
    cost_delta = s[1] - b[1]
    profit_delta = s[2] - b[2]

    break_even_delta = None
    if baseline.break_even_period is not None and scenario.break_even_period is not None:
        break_even_delta = scenario.break_even_period - baseline.break_even_period

    return ScenarioComparison(
        revenue_delta=revenue_delta,
        revenue_delta_percent=_delta_pct(revenue_delta, b[0]),
        cost_delta=cost_delta,
        cost_delta_percent=_delta_pct(cost_delta, b[1]),
        profit_delta=profit_delta,
        profit_delta_percent=_delta_pct(profit_delta, b[2]),
        margin_delta=s[3] - b[3],
        break_even_delta=break_even_delta,
    )
