"""
Revenue projection: per-stream and per-period revenue.

Attendance-driven events compute driver-based streams as
attendance(period) × per-attendee rate(period); every other stream is its base
value scaled by the growth evaluator. Attendance stays a float here so
compounding does not accumulate rounding; it is rounded only where it is
presented.
"""

from __future__ import annotations

from typing import Dict, Optional

from core.schema import ForecastAssumptions, RevenueStream
from growth.evaluator import driver_growth_model, growth_for_driver, project, spend_growth_for_driver


def attendance_for_period(assumptions: ForecastAssumptions, period: int) -> Optional[float]:
    """Forecast attendance, or None for businesses without attendance."""
    if not assumptions.is_attendance_driven:
        return None
    meta = assumptions.metadata
    model = driver_growth_model(meta.growth.attendance_growth_pct)
    return project(meta.initial_attendance, period, model)


def per_attendee_rate(assumptions: ForecastAssumptions, driver: str, period: int) -> float:
    base_rate = assumptions.metadata.per_attendee_rates.get(driver)
    return project(base_rate, period, spend_growth_for_driver(assumptions, driver))


def stream_revenue_for_period(
    assumptions: ForecastAssumptions,
    stream: RevenueStream,
    period: int,
) -> float:
    if stream.kind == "fixed-one-time":
        return float(stream.base_value) if period == 1 else 0.0

    if stream.kind == "driver-based" and assumptions.is_attendance_driven:
        attendance = attendance_for_period(assumptions, period)
        return attendance * per_attendee_rate(assumptions, stream.driver, period)

    return project(stream.base_value, period, growth_for_driver(assumptions, stream.driver))


def revenue_lines_for_period(assumptions: ForecastAssumptions, period: int) -> Dict[str, float]:
    """Revenue per stream name, in stream order."""
    return {
        s.name: stream_revenue_for_period(assumptions, s, period)
        for s in assumptions.revenue_streams
    }


def revenue_for_period(assumptions: ForecastAssumptions, period: int) -> float:
    """Total revenue for ``period``; 0 when no streams are configured."""
    return float(sum(revenue_lines_for_period(assumptions, period).values()))
