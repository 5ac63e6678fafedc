"""
Engine configuration.
Conversion constants and tolerances used across the projection, merge and
accuracy layers. Passed explicitly; nothing reads a module-level default at
call time except through DEFAULT_CONFIG.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    # weekly channel budgets are scaled into monthly periods by this factor
    weeks_per_month: float = 365.25 / 7 / 12

    # |actual - forecast| below this is reported as an exact zero variance
    variance_epsilon: float = 1e-9

    # forecast accuracy grading (percentage error upper bounds for A..D)
    grade_bounds: tuple = (10.0, 20.0, 30.0, 40.0)
    trend_window: int = 6
    trend_threshold_pct: float = 5.0
    mape_high_risk_pct: float = 30.0
    mape_medium_risk_pct: float = 20.0
    bias_share: float = 0.8

    # variance trend: slope in variance-% points per period, anomaly and risk cut-offs
    variance_slope_threshold_pct: float = 1.0
    min_trend_points: int = 3
    min_anomaly_points: int = 5
    anomaly_z_score: float = 2.0
    high_variance_pct: float = 30.0
    medium_variance_pct: float = 15.0


DEFAULT_CONFIG = EngineConfig()
