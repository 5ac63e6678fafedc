"""
Growth Model Evaluator: closed-form growth applied to a period-1 base value.

Period 1 is always the unscaled baseline. Later periods scale by:
  linear       base × (1 + rate × (period − 1))
  exponential  base × (1 + rate) ^ (period − 1)
  none         base

Driver-specific overrides (ticket price, per-attendee spend categories) use the
exponential form with their own rate, and only when the assumptions enable
driver-specific growth. Negative and zero rates are valid (declining models).
"""

from __future__ import annotations

from typing import Optional

from core.schema import ForecastAssumptions, GrowthModel

NO_GROWTH = GrowthModel(kind="none", rate=0.0)


def project(base_value: float, period: int, model: GrowthModel) -> float:
    """Projected value of ``base_value`` in ``period`` (1-based) under ``model``."""
    base = float(base_value)
    if period <= 1 or model.kind == "none":
        return base
    steps = period - 1
    if model.kind == "linear":
        # base + base·rate·steps keeps integral results exact (1000, 0.1 -> 1100.0)
        return base + base * model.rate * steps
    return base * (1.0 + model.rate) ** steps


def driver_growth_model(pct: float) -> GrowthModel:
    """Exponential model for a per-period growth percentage."""
    return GrowthModel(kind="exponential", rate=float(pct) / 100.0)


def growth_for_driver(assumptions: ForecastAssumptions, driver: Optional[str]) -> GrowthModel:
    """
    Growth model for a line tagged with ``driver``.

    The driver's own rate wins when driver-specific growth is enabled;
    otherwise (or for untagged lines) the generic growth model applies.
    """
    growth = assumptions.metadata.growth
    if driver is not None and growth.use_driver_specific_growth:
        return driver_growth_model(growth.per_driver_growth_pct.get(driver))
    return assumptions.growth_model


def spend_growth_for_driver(assumptions: ForecastAssumptions, driver: str) -> GrowthModel:
    """Growth of a per-attendee rate: its own rate when enabled, flat otherwise."""
    growth = assumptions.metadata.growth
    if growth.use_driver_specific_growth:
        return driver_growth_model(growth.per_driver_growth_pct.get(driver))
    return NO_GROWTH
