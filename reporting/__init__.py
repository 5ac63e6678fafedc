"""
Reporting: summary totals, period breakdowns, forecast accuracy and
scenario comparison built on top of the period projections.
"""

from .aggregator import ForecastSummary, summarize
from .breakdown import BreakdownSource, CategoryShare, breakdown
from .accuracy import AccuracyReport, compute_forecast_accuracy
from .comparison import ScenarioComparison, compare_summaries
from .variance_trend import VarianceTrend, compute_variance_trend, variance_insights

__all__ = [
    "ForecastSummary",
    "summarize",
    "BreakdownSource",
    "CategoryShare",
    "breakdown",
    "AccuracyReport",
    "compute_forecast_accuracy",
    "ScenarioComparison",
    "compare_summaries",
    "VarianceTrend",
    "compute_variance_trend",
    "variance_insights",
]
