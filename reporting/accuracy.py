"""
Forecast accuracy: how well past forecasts matched recorded actuals.

Answers the questions a planner asks once actuals start arriving:
  Q1: "How far off are we?"        → MAPE over reported periods, per-period grade
  Q2: "Is it getting better?"      → trend of the recent percentage errors
  Q3: "Can we trust the outlook?"  → confidence score
  Q4: "Are we biased?"             → consistent over-/under-estimation flags

Periods whose actual is zero are left out of MAPE (no percentage error exists).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

import numpy as np
import pandas as pd

from core.config import DEFAULT_CONFIG, EngineConfig
from core.utils import round_to_int
from core.results import PeriodProjection

Metric = Literal["revenue", "cost", "profit"]
Trend = Literal["improving", "stable", "declining"]


@dataclass
class PeriodAccuracy:
    period: int
    label: str
    projected: float
    actual: float
    absolute_error: float
    percentage_error: float
    grade: str


@dataclass
class RiskFlag:
    category: str
    severity: Literal["low", "medium", "high"]
    description: str
    suggested_action: str


@dataclass
class AccuracyReport:
    """Structured forecast-accuracy output for one metric."""
    metric: Metric
    periods: List[PeriodAccuracy]
    mape: float
    trend: Trend
    confidence_score: int
    flags: List[RiskFlag] = field(default_factory=list)

    @property
    def grade(self) -> str:
        return accuracy_grade(self.mape)

    def to_dataframe(self) -> pd.DataFrame:
        """Per-period table for display."""
        return pd.DataFrame(
            [
                {
                    "Period": p.label,
                    "Projected": p.projected,
                    "Actual": p.actual,
                    "Abs Error": p.absolute_error,
                    "Error %": p.percentage_error,
                    "Grade": p.grade,
                }
                for p in self.periods
            ],
            columns=["Period", "Projected", "Actual", "Abs Error", "Error %", "Grade"],
        )


def accuracy_grade(percentage_error: float, config: Optional[EngineConfig] = None) -> str:
    cfg = config or DEFAULT_CONFIG
    for grade, bound in zip("ABCD", cfg.grade_bounds):
        if percentage_error <= bound:
            return grade
    return "F"


def mean_absolute_percentage_error(projected, actual) -> float:
    """MAPE in percent over entries with a non-zero actual; 0 if there are none."""
    projected = np.asarray(projected, dtype=float)
    actual = np.asarray(actual, dtype=float)
    if projected.shape != actual.shape or actual.size == 0:
        return 0.0
    mask = actual != 0
    if not mask.any():
        return 0.0
    return float(np.mean(np.abs((actual[mask] - projected[mask]) / actual[mask])) * 100.0)


def accuracy_trend(percentage_errors: List[float], config: Optional[EngineConfig] = None) -> Trend:
    """Compare the mean error of the older and newer half of the recent window."""
    cfg = config or DEFAULT_CONFIG
    if len(percentage_errors) < 3:
        return "stable"
    recent = np.asarray(percentage_errors[-cfg.trend_window:], dtype=float)
    half = len(recent) // 2
    first, second = recent[:half].mean(), recent[half:].mean()
    if second < first - cfg.trend_threshold_pct:
        return "improving"
    if second > first + cfg.trend_threshold_pct:
        return "declining"
    return "stable"


def confidence_score(mape: float, trend: Trend) -> int:
    score = max(0.0, 100.0 - mape * 2)
    if trend == "improving":
        score = min(100.0, score + 10)
    elif trend == "declining":
        score = max(0.0, score - 15)
    return round_to_int(score)


def _risk_flags(report: AccuracyReport, cfg: EngineConfig) -> List[RiskFlag]:
    flags: List[RiskFlag] = []
    if report.mape > cfg.mape_high_risk_pct:
        flags.append(RiskFlag(
            category="forecast_reliability",
            severity="high",
            description=f"Poor forecast accuracy ({report.mape:.1f}% MAPE) for {report.metric}",
            suggested_action="Review forecasting methodology and assumptions",
        ))
    elif report.mape > cfg.mape_medium_risk_pct:
        flags.append(RiskFlag(
            category="forecast_reliability",
            severity="medium",
            description=f"Moderate forecast accuracy issues ({report.mape:.1f}% MAPE) for {report.metric}",
            suggested_action="Monitor forecast assumptions and adjust if needed",
        ))

    if report.trend == "declining":
        flags.append(RiskFlag(
            category="forecast_trend",
            severity="medium",
            description=f"Forecast accuracy is declining for {report.metric}",
            suggested_action="Investigate root causes of declining prediction reliability",
        ))

    n = len(report.periods)
    if n:
        over = sum(1 for p in report.periods if p.projected > p.actual)
        under = sum(1 for p in report.periods if p.projected < p.actual)
        if over > n * cfg.bias_share:
            flags.append(RiskFlag(
                category="forecast_bias",
                severity="medium",
                description=f"Consistent overestimation of {report.metric} ({over / n:.0%} of periods)",
                suggested_action="Adjust forecasting to be more conservative",
            ))
        elif under > n * cfg.bias_share:
            flags.append(RiskFlag(
                category="forecast_bias",
                severity="low",
                description=f"Consistent underestimation of {report.metric} ({under / n:.0%} of periods)",
                suggested_action="Review if growth opportunities are being missed",
            ))
    return flags


def compute_forecast_accuracy(
    projections: List[PeriodProjection],
    *,
    metric: Metric = "revenue",
    config: Optional[EngineConfig] = None,
) -> AccuracyReport:
    """
    Accuracy of ``metric`` over the periods of ``projections`` that have actuals.

    Parameters
    ----------
    projections : list of PeriodProjection
        Output of actuals.merge.merge_and_compare() (or run_forecast().projections).
    metric : str
        "revenue", "cost" or "profit".
    """
    cfg = config or DEFAULT_CONFIG
    rows: List[PeriodAccuracy] = []
    for p in sorted(projections, key=lambda x: x.period):
        if not p.has_actuals:
            continue
        projected = float(getattr(p, f"{metric}_forecast"))
        actual = float(getattr(p, f"{metric}_actual"))
        abs_err = abs(actual - projected)
        pct_err = abs_err / abs(actual) * 100.0 if actual != 0 else 0.0
        rows.append(PeriodAccuracy(
            period=p.period,
            label=p.label,
            projected=projected,
            actual=actual,
            absolute_error=abs_err,
            percentage_error=pct_err,
            grade=accuracy_grade(pct_err, cfg),
        ))

    mape = mean_absolute_percentage_error(
        [r.projected for r in rows], [r.actual for r in rows]
    )
    trend = accuracy_trend([r.percentage_error for r in rows], cfg)
    report = AccuracyReport(
        metric=metric,
        periods=rows,
        mape=mape,
        trend=trend,
        confidence_score=confidence_score(mape, trend),
    )
    report.flags = _risk_flags(report, cfg)
    return report
