"""
Input schema for the forecast engine.

ForecastAssumptions is the read-only description of one forecast model and
ActualPeriodEntry one recorded period of actual results. Both are pydantic
models: invalid configuration is rejected at construction time (raising
pydantic.ValidationError, a ValueError) so projection never starts on
inconsistent inputs.

Special lines are recognised through explicit tags, never by display name:
  - RevenueStream.driver  ties a stream to a per-attendee spend driver
  - CostCategory.role     marks COGS-linked and marketing lines
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Annotated, Dict, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .utils import duplicated

PeriodUnit = Literal["Week", "Month"]
Driver = Literal["ticket", "food", "merchandise", "online", "misc"]
GrowthKind = Literal["linear", "exponential", "none"]

Percent = Annotated[float, Field(ge=0.0, le=100.0)]
GrowthPercent = Annotated[float, Field(ge=-100.0)]
Amount = Annotated[float, Field(ge=0.0)]

# Synthetic line keys produced by the cost engine and accepted in actuals.
MARKETING_LINE = "Marketing Budget"
FB_COGS_LINE = "F&B COGS"
STAFF_LINE = "Staff Costs"
SYNTHETIC_COST_LINES = (MARKETING_LINE, FB_COGS_LINE, STAFF_LINE)

# Which metadata COGS percentage applies to revenue from a given driver.
COGS_PERCENT_BY_DRIVER = {
    "food": "food_beverage_pct",
    "merchandise": "merchandise_pct",
}


def _peak_growth(kind: str, rate: float, steps: int) -> float:
    """Largest |multiplier| a growth model reaches over `steps` periods (inf on overflow)."""
    if kind == "none" or steps <= 0:
        return 1.0
    if kind == "linear":
        return max(1.0, abs(1.0 + rate * steps))
    try:
        return max(1.0, abs((1.0 + rate) ** steps))
    except OverflowError:
        return math.inf


class _Frozen(BaseModel):
    model_config = ConfigDict(
        frozen=True, extra="forbid", allow_inf_nan=False, protected_namespaces=()
    )


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

class DriverRates(_Frozen):
    """Per-attendee spend, one value per driver."""
    ticket: Amount = 0.0
    food: Amount = 0.0
    merchandise: Amount = 0.0
    online: Amount = 0.0
    misc: Amount = 0.0

    def get(self, driver: str) -> float:
        return float(getattr(self, driver))


class DriverGrowthRates(_Frozen):
    """Per-driver compound growth, in percent per period."""
    ticket: GrowthPercent = 0.0
    food: GrowthPercent = 0.0
    merchandise: GrowthPercent = 0.0
    online: GrowthPercent = 0.0
    misc: GrowthPercent = 0.0

    def get(self, driver: str) -> float:
        return float(getattr(self, driver))


class DriverGrowth(_Frozen):
    attendance_growth_pct: GrowthPercent = 0.0
    use_driver_specific_growth: bool = False
    per_driver_growth_pct: DriverGrowthRates = Field(default_factory=DriverGrowthRates)


class CogsPercents(_Frozen):
    food_beverage_pct: Percent = 0.0
    merchandise_pct: Percent = 0.0


class Staffing(_Frozen):
    count: Amount = 0.0
    cost_per_person: Amount = 0.0
    management_cost: Amount = 0.0

    @property
    def cost_per_period(self) -> float:
        return self.count * self.cost_per_person + self.management_cost


class _MetadataBase(_Frozen):
    period_count: int = Field(ge=1)
    growth: DriverGrowth = Field(default_factory=DriverGrowth)
    cogs_percents: CogsPercents = Field(default_factory=CogsPercents)
    staffing: Optional[Staffing] = None
    start_date: Optional[dt.date] = None


class PeriodicEventMetadata(_MetadataBase):
    """An attendance-driven event repeating every period (weekly by default)."""
    event_kind: Literal["PeriodicEvent"] = "PeriodicEvent"
    period_unit: PeriodUnit = "Week"
    initial_attendance: Amount = 0.0
    per_attendee_rates: DriverRates = Field(default_factory=DriverRates)


class ContinuousBusinessMetadata(_MetadataBase):
    """A business without attendance; revenue follows growth models only."""
    event_kind: Literal["ContinuousBusiness"] = "ContinuousBusiness"
    period_unit: PeriodUnit = "Month"


Metadata = Annotated[
    Union[PeriodicEventMetadata, ContinuousBusinessMetadata],
    Field(discriminator="event_kind"),
]


# ---------------------------------------------------------------------------
# Streams, categories, growth
# ---------------------------------------------------------------------------

class RevenueStream(_Frozen):
    name: str = Field(min_length=1)
    base_value: Amount = 0.0
    kind: Literal["recurring", "fixed-one-time", "driver-based"] = "recurring"
    driver: Optional[Driver] = None

    @model_validator(mode="after")
    def _driver_required(self):
        if self.kind == "driver-based" and self.driver is None:
            raise ValueError(f"Revenue stream {self.name!r} is driver-based but has no driver.")
        return self


class CostCategory(_Frozen):
    name: str = Field(min_length=1)
    base_value: Amount = 0.0
    kind: Literal["fixed", "recurring"] = "recurring"
    category: Literal["operations", "staffing", "marketing", "other"] = "operations"
    role: Literal["generic", "cogs-linked", "marketing"] = "generic"
    linked_stream: Optional[str] = None
    cogs_percent: Optional[Percent] = None
    # recurring only: spread base_value evenly over all periods
    amortize: bool = False

    @model_validator(mode="after")
    def _cogs_link_required(self):
        if self.role == "cogs-linked" and not self.linked_stream:
            raise ValueError(f"COGS-linked cost {self.name!r} must name a linked_stream.")
        return self


class GrowthModel(_Frozen):
    kind: GrowthKind = "none"
    # decimal fraction per period: 0.1 == 10%
    rate: float = 0.0


# ---------------------------------------------------------------------------
# Marketing
# ---------------------------------------------------------------------------

class MarketingChannel(_Frozen):
    id: str
    name: Optional[str] = None
    weekly_budget: Amount = 0.0


class NoMarketing(_Frozen):
    mode: Literal["none"] = "none"


class ChannelMarketing(_Frozen):
    mode: Literal["channels"] = "channels"
    channels: List[MarketingChannel] = Field(default_factory=list)


class HighLevelMarketing(_Frozen):
    mode: Literal["highLevel"] = "highLevel"
    total_budget: Amount = 0.0
    application: Literal["upfront", "spreadEvenly", "spreadCustom"] = "spreadEvenly"
    spread_duration_periods: Optional[int] = Field(default=None, gt=0)


MarketingPlan = Annotated[
    Union[NoMarketing, ChannelMarketing, HighLevelMarketing],
    Field(discriminator="mode"),
]


# ---------------------------------------------------------------------------
# Assumptions
# ---------------------------------------------------------------------------

class ForecastAssumptions(_Frozen):
    model_id: Optional[str] = None
    metadata: Metadata
    revenue_streams: List[RevenueStream] = Field(default_factory=list)
    cost_categories: List[CostCategory] = Field(default_factory=list)
    growth_model: GrowthModel = Field(default_factory=GrowthModel)
    marketing_plan: MarketingPlan = Field(default_factory=NoMarketing)

    @field_validator("revenue_streams", "cost_categories")
    @classmethod
    def _unique_names(cls, items):
        dups = duplicated(item.name for item in items)
        if dups:
            raise ValueError(f"Names must be unique, duplicated: {dups}")
        return items

    @model_validator(mode="after")
    def _resolve_cogs_links(self):
        streams = {s.name: s for s in self.revenue_streams}
        for cost in self.cost_categories:
            if cost.role != "cogs-linked":
                continue
            linked = streams.get(cost.linked_stream)
            if linked is None:
                raise ValueError(
                    f"COGS-linked cost {cost.name!r} references unknown revenue stream "
                    f"{cost.linked_stream!r}."
                )
            if cost.cogs_percent is None and linked.driver not in COGS_PERCENT_BY_DRIVER:
                raise ValueError(
                    f"COGS-linked cost {cost.name!r} has no cogs_percent and its linked stream "
                    f"{linked.name!r} has no food/merchandise driver to take one from."
                )
        return self

    @model_validator(mode="after")
    def _projection_stays_finite(self):
        steps = self.period_count - 1
        growth = self.metadata.growth
        rates = {"growth_model": (self.growth_model.kind, self.growth_model.rate)}
        if self.is_attendance_driven:
            rates["attendance_growth_pct"] = ("exponential", growth.attendance_growth_pct / 100.0)
        if growth.use_driver_specific_growth:
            for driver in get_args(Driver):
                rates[f"per_driver_growth_pct.{driver}"] = (
                    "exponential", growth.per_driver_growth_pct.get(driver) / 100.0
                )

        peak = 1.0
        for name, (kind, rate) in rates.items():
            factor = _peak_growth(kind, rate, steps)
            if not math.isfinite(factor):
                raise ValueError(
                    f"{name} growth overflows over {self.period_count} periods."
                )
            peak = max(peak, factor)

        # attendance and per-attendee rates may both grow, hence peak squared
        bases = [s.base_value for s in self.revenue_streams]
        bases += [c.base_value for c in self.cost_categories]
        if self.is_attendance_driven:
            meta = self.metadata
            bases += [meta.initial_attendance * meta.per_attendee_rates.get(d) for d in get_args(Driver)]
        if self.metadata.staffing is not None:
            bases.append(self.metadata.staffing.cost_per_period)
        plan = self.marketing_plan
        if isinstance(plan, HighLevelMarketing):
            bases.append(plan.total_budget)
        elif isinstance(plan, ChannelMarketing):
            bases.append(sum(ch.weekly_budget for ch in plan.channels) * 5)
        n_lines = len(self.revenue_streams) + len(self.cost_categories) + 1
        if not math.isfinite(max(bases, default=0.0) * peak * peak * n_lines):
            raise ValueError("Projected values exceed the floating-point range.")
        return self

    # --- convenience accessors (no business logic) ---

    @property
    def period_count(self) -> int:
        return self.metadata.period_count

    @property
    def period_unit(self) -> str:
        return self.metadata.period_unit

    @property
    def is_attendance_driven(self) -> bool:
        return isinstance(self.metadata, PeriodicEventMetadata)

    def stream(self, name: str) -> Optional[RevenueStream]:
        for s in self.revenue_streams:
            if s.name == name:
                return s
        return None

    def cogs_percent_for(self, cost: CostCategory) -> float:
        """Explicit cogs_percent, else the metadata percent for the linked driver."""
        if cost.cogs_percent is not None:
            return float(cost.cogs_percent)
        linked = self.stream(cost.linked_stream)
        field_name = COGS_PERCENT_BY_DRIVER[linked.driver]
        return float(getattr(self.metadata.cogs_percents, field_name))


class ActualPeriodEntry(_Frozen):
    period: int = Field(ge=1)
    period_unit: PeriodUnit
    revenue_actuals: Dict[str, Amount] = Field(default_factory=dict)
    cost_actuals: Dict[str, Amount] = Field(default_factory=dict)
    attendance_actual: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = Field(default=None, max_length=500)
    model_id: Optional[str] = None

    @model_validator(mode="after")
    def _totals_finite(self):
        if not (math.isfinite(self.revenue_total) and math.isfinite(self.cost_total)):
            raise ValueError(f"Period {self.period}: actual totals exceed the floating-point range.")
        return self

    @property
    def revenue_total(self) -> float:
        return float(sum(self.revenue_actuals.values()))

    @property
    def cost_total(self) -> float:
        return float(sum(self.cost_actuals.values()))
