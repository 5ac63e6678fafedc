"""
Variance trend: how the forecast-vs-actual gap evolves across reported periods.

Works on the variance percentages already attached by the actuals merge:
  Q1: "Is the gap closing?"         → least-squares slope of variance % per period
  Q2: "How erratic is it?"          → volatility (population std of variance %)
  Q3: "Which periods stand out?"    → anomalies by z-score or IQR fences
  Q4: "Which periods need a look?"  → risk level per point

Periods without actuals or with a zero forecast carry no variance % and are
left out of the series.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional

import numpy as np
import pandas as pd

from core.config import DEFAULT_CONFIG, EngineConfig
from core.results import PeriodProjection

Metric = Literal["revenue", "cost", "profit"]
Direction = Literal["improving", "stable", "worsening"]
RiskLevel = Literal["low", "medium", "high"]
Severity = Literal["mild", "moderate", "severe"]


@dataclass
class VariancePoint:
    period: int
    label: str
    projected: float
    actual: float
    variance_percent: float
    is_anomaly: bool = False
    risk_level: RiskLevel = "low"


@dataclass
class AnomalyPoint:
    period: int
    label: str
    variance_percent: float
    severity: Severity
    deviation_from_norm: float
    potential_causes: List[str] = field(default_factory=list)


@dataclass
class VarianceTrend:
    """Variance-% time series for one metric with its trend statistics."""
    metric: Metric
    points: List[VariancePoint]
    direction: Direction = "stable"
    change_rate: float = 0.0
    trend_confidence: float = 0.0
    projected_next_variance: Optional[float] = None
    volatility: float = 0.0
    average_variance: float = 0.0
    variance_standard_deviation: float = 0.0
    anomalies: List[AnomalyPoint] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame(
            [
                {
                    "Period": p.label,
                    "Projected": p.projected,
                    "Actual": p.actual,
                    "Variance %": p.variance_percent,
                    "Anomaly": p.is_anomaly,
                    "Risk": p.risk_level,
                }
                for p in self.points
            ],
            columns=["Period", "Projected", "Actual", "Variance %", "Anomaly", "Risk"],
        )


@dataclass
class VarianceInsight:
    kind: Literal["trend", "anomaly", "volatility"]
    severity: Literal["info", "warning", "critical"]
    title: str
    description: str
    recommendation: str
    affected_periods: List[str]


def _linear_trend(values: np.ndarray):
    """Slope, intercept and R² (in percent) of values against 1..n."""
    x = np.arange(1, len(values) + 1, dtype=float)
    slope, intercept = np.polyfit(x, values, 1)
    ss_tot = float(np.sum((values - values.mean()) ** 2))
    ss_res = float(np.sum((values - (slope * x + intercept)) ** 2))
    r_squared = 1.0 - ss_res / ss_tot if ss_tot > 0 else 1.0
    return float(slope), float(intercept), float(np.clip(r_squared * 100.0, 0.0, 100.0))


def _z_scores(values: np.ndarray, mean: float, std: float) -> np.ndarray:
    if std == 0:
        return np.zeros_like(values)
    return np.abs((values - mean) / std)


def risk_level(variance_pct: float, z_score: float, config: Optional[EngineConfig] = None) -> RiskLevel:
    cfg = config or DEFAULT_CONFIG
    magnitude = abs(variance_pct)
    if magnitude > cfg.high_variance_pct or z_score > 2:
        return "high"
    if magnitude > cfg.medium_variance_pct or z_score > 1:
        return "medium"
    return "low"


def _potential_causes(variance_pct: float, z_score: float) -> List[str]:
    magnitude = abs(variance_pct)
    if variance_pct > 0:
        if magnitude > 50:
            causes = ["Significant market opportunity or forecasting error",
                      "Seasonal effects not captured in projections"]
        elif magnitude > 25:
            causes = ["Better than expected market conditions",
                      "Operational efficiency improvements"]
        else:
            causes = ["Minor forecasting adjustment needed"]
    else:
        if magnitude > 50:
            causes = ["Major market downturn or competitive pressure",
                      "Operational challenges or capacity constraints"]
        elif magnitude > 25:
            causes = ["Market conditions worse than expected",
                      "Execution or delivery issues"]
        else:
            causes = ["Conservative forecasting or minor headwinds"]
    if z_score > 3:
        causes.append("Highly unusual event requiring investigation")
    return causes


def detect_anomalies(points: List[VariancePoint], config: Optional[EngineConfig] = None) -> List[AnomalyPoint]:
    """Points beyond ``anomaly_z_score`` standard deviations or the 1.5·IQR fences."""
    cfg = config or DEFAULT_CONFIG
    if len(points) < cfg.min_anomaly_points:
        return []
    values = np.array([p.variance_percent for p in points], dtype=float)
    mean, std = float(values.mean()), float(values.std())
    z = _z_scores(values, mean, std)

    ordered = np.sort(values)
    q1 = ordered[int(len(ordered) * 0.25)]
    q3 = ordered[int(len(ordered) * 0.75)]
    iqr = q3 - q1
    lower, upper = q1 - 1.5 * iqr, q3 + 1.5 * iqr

    anomalies: List[AnomalyPoint] = []
    for p, v, zs in zip(points, values, z):
        if not (zs > cfg.anomaly_z_score or v < lower or v > upper):
            continue
        if zs > 3 or abs(v) > 50:
            severity = "severe"
        elif zs > 2.5 or abs(v) > 25:
            severity = "moderate"
        else:
            severity = "mild"
        anomalies.append(AnomalyPoint(
            period=p.period,
            label=p.label,
            variance_percent=float(v),
            severity=severity,
            deviation_from_norm=float(zs),
            potential_causes=_potential_causes(float(v), float(zs)),
        ))
    return anomalies


def compute_variance_trend(
    projections: List[PeriodProjection],
    *,
    metric: Metric = "revenue",
    config: Optional[EngineConfig] = None,
) -> VarianceTrend:
    """
    Variance-% trend of ``metric`` over the reported periods of ``projections``.

    Parameters
    ----------
    projections : list of PeriodProjection
        Output of actuals.merge.merge_and_compare() (or run_forecast().projections).
    metric : str
        "revenue", "cost" or "profit".

    Returns
    -------
    VarianceTrend. With fewer than ``min_trend_points`` points the trend is
    "stable" and all statistics are 0.
    """
    cfg = config or DEFAULT_CONFIG
    points = [
        VariancePoint(
            period=p.period,
            label=p.label,
            projected=float(getattr(p, f"{metric}_forecast")),
            actual=float(getattr(p, f"{metric}_actual")),
            variance_percent=float(getattr(p, f"{metric}_variance_percent")),
        )
        for p in sorted(projections, key=lambda x: x.period)
        if p.has_actuals and getattr(p, f"{metric}_variance_percent") is not None
    ]
    trend = VarianceTrend(metric=metric, points=points)
    if len(points) < cfg.min_trend_points:
        return trend

    values = np.array([p.variance_percent for p in points], dtype=float)
    mean, std = float(values.mean()), float(values.std())
    slope, intercept, confidence = _linear_trend(values)

    if slope < -cfg.variance_slope_threshold_pct:
        trend.direction = "improving"
    elif slope > cfg.variance_slope_threshold_pct:
        trend.direction = "worsening"
    trend.change_rate = slope
    trend.trend_confidence = confidence
    trend.projected_next_variance = slope * (len(values) + 1) + intercept
    trend.volatility = std
    trend.average_variance = mean
    trend.variance_standard_deviation = std
    trend.anomalies = detect_anomalies(points, cfg)

    anomalous = {a.period for a in trend.anomalies}
    # z-score against a unit deviation when the series is flat
    z = np.abs((values - mean) / (std or 1.0))
    for p, zs in zip(points, z):
        p.is_anomaly = p.period in anomalous
        p.risk_level = risk_level(p.variance_percent, float(zs), cfg)
    return trend


def variance_insights(trends: List[VarianceTrend]) -> List[VarianceInsight]:
    """Trend, anomaly and volatility insights, most severe first."""
    insights: List[VarianceInsight] = []
    for t in trends:
        if t.direction == "worsening":
            insights.append(VarianceInsight(
                kind="trend",
                severity="critical" if t.volatility > 20 else "warning",
                title=f"{t.metric} variance is worsening",
                description=(
                    f"Variance has been trending worse over the last {len(t.points)} periods "
                    f"with {t.volatility:.1f}% volatility"
                ),
                recommendation="Review forecasting methodology and identify root causes of increasing variance",
                affected_periods=[p.label for p in t.points[-3:]],
            ))
        severe = [a for a in t.anomalies if a.severity == "severe"]
        if severe:
            worst = max(a.deviation_from_norm for a in severe)
            insights.append(VarianceInsight(
                kind="anomaly",
                severity="critical",
                title=f"Severe variance anomalies detected in {t.metric}",
                description=(
                    f"{len(severe)} severe anomalies found with deviations up to "
                    f"{worst:.1f} standard deviations"
                ),
                recommendation="Investigate underlying causes and adjust future forecasting assumptions",
                affected_periods=[a.label for a in severe],
            ))
        if t.volatility > 30:
            insights.append(VarianceInsight(
                kind="volatility",
                severity="warning",
                title=f"High volatility in {t.metric} variance",
                description=(
                    f"Variance volatility of {t.volatility:.1f}% indicates unpredictable performance"
                ),
                recommendation="Consider implementing more frequent forecasting reviews and scenario planning",
                affected_periods=[p.label for p in t.points],
            ))
    order = {"critical": 0, "warning": 1, "info": 2}
    return sorted(insights, key=lambda i: order[i.severity])
