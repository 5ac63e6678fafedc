"""
Core package: input schema, configuration, result types and shared utilities.
No business logic lives here.
"""

from .schema import (
    ActualPeriodEntry,
    ChannelMarketing,
    ContinuousBusinessMetadata,
    CostCategory,
    ForecastAssumptions,
    GrowthModel,
    HighLevelMarketing,
    NoMarketing,
    PeriodicEventMetadata,
    RevenueStream,
)
from .config import EngineConfig, DEFAULT_CONFIG
from .results import PeriodDetail, PeriodProjection
from .utils import round_half_up, safe_pct, margin_pct, period_label

__all__ = [
    "ActualPeriodEntry",
    "ChannelMarketing",
    "ContinuousBusinessMetadata",
    "CostCategory",
    "ForecastAssumptions",
    "GrowthModel",
    "HighLevelMarketing",
    "NoMarketing",
    "PeriodicEventMetadata",
    "RevenueStream",
    "EngineConfig",
    "PeriodDetail",
    "PeriodProjection",
    "DEFAULT_CONFIG",
    "round_half_up",
    "safe_pct",
    "margin_pct",
    "period_label",
]
