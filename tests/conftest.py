"""
Pytest configuration and shared fixtures.
"""

import datetime as dt

import pytest

from core.schema import (
    ActualPeriodEntry,
    ContinuousBusinessMetadata,
    ForecastAssumptions,
    PeriodicEventMetadata,
)


@pytest.fixture
def linear_business():
    """Monthly business, one recurring stream of 1000 growing 10% linearly, no costs."""
    return ForecastAssumptions(
        model_id="base",
        metadata=ContinuousBusinessMetadata(period_count=3),
        revenue_streams=[{"name": "Subscriptions", "base_value": 1000}],
        growth_model={"kind": "linear", "rate": 0.1},
    )


@pytest.fixture
def weekly_event():
    """
    Four-week event: 100 attendees growing 10%/week, $20 ticket and $5 F&B per
    attendee, 30% F&B COGS, venue, one-off setup, staff and two marketing channels.
    """
    return ForecastAssumptions(
        model_id="event",
        metadata=PeriodicEventMetadata(
            period_count=4,
            initial_attendance=100,
            per_attendee_rates={"ticket": 20, "food": 5},
            growth={"attendance_growth_pct": 10},
            staffing={"count": 2, "cost_per_person": 100, "management_cost": 50},
        ),
        revenue_streams=[
            {"name": "Tickets", "kind": "driver-based", "driver": "ticket"},
            {"name": "F&B Sales", "kind": "driver-based", "driver": "food"},
        ],
        cost_categories=[
            {"name": "Venue", "base_value": 1000},
            {"name": "Setup", "base_value": 500, "kind": "fixed"},
            {
                "name": "F&B COGS",
                "base_value": 999,
                "role": "cogs-linked",
                "linked_stream": "F&B Sales",
                "cogs_percent": 30,
            },
        ],
        marketing_plan={
            "mode": "channels",
            "channels": [
                {"id": "social", "weekly_budget": 100},
                {"id": "radio", "weekly_budget": 50},
            ],
        },
    )


@pytest.fixture
def make_business():
    """Factory for monthly businesses with custom streams, costs and plans."""
    def _make(period_count=3, streams=(), costs=(), growth=None, marketing=None, start_date=None):
        kwargs = dict(
            metadata=ContinuousBusinessMetadata(period_count=period_count, start_date=start_date),
            revenue_streams=list(streams),
            cost_categories=list(costs),
        )
        if growth is not None:
            kwargs["growth_model"] = growth
        if marketing is not None:
            kwargs["marketing_plan"] = marketing
        return ForecastAssumptions(**kwargs)
    return _make


@pytest.fixture
def monthly_actual():
    """Factory for a monthly actual entry."""
    def _make(period, revenue=None, cost=None, **kwargs):
        return ActualPeriodEntry(
            period=period,
            period_unit="Month",
            revenue_actuals=revenue or {},
            cost_actuals=cost or {},
            **kwargs,
        )
    return _make


@pytest.fixture
def new_year():
    return dt.date(2024, 1, 1)
