"""
Unit tests for the summary, breakdown, accuracy and scenario comparison reports.
"""

import pytest

from core.results import PeriodProjection
from core.schema import ActualPeriodEntry, GrowthModel
from engine.projection import project_period_detail
from engine.runner import run_forecast
from reporting.accuracy import (
    accuracy_grade,
    accuracy_trend,
    compute_forecast_accuracy,
    confidence_score,
    mean_absolute_percentage_error,
)
from reporting.aggregator import summarize
from reporting.breakdown import BreakdownSource, breakdown, breakdown_to_dataframe
from reporting.comparison import compare_summaries


def _reported(period, forecast, actual):
    return PeriodProjection(
        period=period,
        label=f"Month {period}",
        revenue_forecast=forecast,
        cost_forecast=0.0,
        profit_forecast=forecast,
        revenue_actual=actual,
        cost_actual=0.0,
        profit_actual=actual,
    )


class TestSummary:

    def test_no_actuals_revised_equals_forecast(self, linear_business):
        summary = run_forecast(linear_business).summary
        assert summary.total_revenue_forecast == 3300.0
        assert summary.revised_total_revenue == summary.total_revenue_forecast
        assert summary.revised_total_profit == summary.total_profit_forecast
        assert summary.total_revenue_variance == 0.0
        assert summary.latest_period_with_actuals == 0
        assert summary.periods_with_actuals == 0

    def test_revised_outlook(self, linear_business, monthly_actual):
        summary = run_forecast(
            linear_business, [monthly_actual(2, revenue={"Subscriptions": 1050})]
        ).summary
        assert summary.revised_total_revenue == 3250.0
        assert summary.total_revenue_actual == 1050.0
        assert summary.total_revenue_variance == -50.0
        assert summary.latest_period_with_actuals == 2

    def test_period_specific_figures(self, linear_business, monthly_actual):
        summary = run_forecast(linear_business, [
            monthly_actual(2, revenue={"Subscriptions": 1050}, cost={"Rent": 30}),
        ]).summary
        assert summary.period_specific_revenue_forecast == 1100.0
        assert summary.period_specific_cost_forecast == 0.0
        assert summary.period_specific_profit_margin == pytest.approx(100.0)
        assert summary.period_revenue_variance == -50.0
        assert summary.period_revenue_variance_percent == pytest.approx(-50 / 1100 * 100)
        assert summary.period_cost_variance == 30.0
        # zero cost forecast for the reported period
        assert summary.period_cost_variance_percent == 0.0
        assert summary.period_profit_variance == -80.0

    def test_period_specific_figures_without_actuals(self, linear_business):
        summary = run_forecast(linear_business).summary
        assert summary.period_specific_revenue_forecast == 0.0
        assert summary.period_revenue_variance == 0.0
        assert summary.period_revenue_variance_percent == 0.0
        assert summary.period_specific_profit_margin == 0.0

    def test_period_specific_negative_forecast_percent_zero(self, make_business, monthly_actual):
        a = make_business(costs=[{"name": "Rent", "base_value": 100}])
        summary = run_forecast(a, [monthly_actual(1, cost={"Rent": 120})]).summary
        assert summary.period_specific_profit_forecast == -100.0
        assert summary.period_profit_variance == -20.0
        assert summary.period_profit_variance_percent == 0.0
        assert summary.period_cost_variance_percent == pytest.approx(20.0)

    def test_gap_before_latest_uses_forecast(self, linear_business, monthly_actual):
        summary = run_forecast(linear_business, [
            monthly_actual(1, revenue={"Subscriptions": 900}),
            monthly_actual(3, revenue={"Subscriptions": 1300}),
        ]).summary
        assert summary.revised_total_revenue == 900.0 + 1100.0 + 1300.0
        assert summary.periods_with_actuals == 2
        assert summary.latest_period_with_actuals == 3

    def test_margin_zero_without_revenue(self, make_business):
        summary = run_forecast(make_business(costs=[{"name": "Rent", "base_value": 100}])).summary
        assert summary.avg_profit_margin_forecast == 0.0
        assert summary.revised_avg_profit_margin == 0.0
        assert summary.total_profit_forecast == -300.0
        assert summary.break_even_period is None

    def test_break_even_period(self, make_business):
        a = make_business(
            period_count=5,
            streams=[{"name": "Sales", "base_value": 1000}],
            costs=[{"name": "Fit-out", "base_value": 2500, "kind": "fixed"}],
        )
        summary = run_forecast(a).summary
        # cumulative profit: -1500, -500, 500
        assert summary.break_even_period == 3
        assert summary.avg_profit_margin_forecast == pytest.approx(2500 / 5000 * 100)
        assert summary.avg_revenue_per_period == 1000.0

    def test_attendance_totals(self, weekly_event):
        entry = ActualPeriodEntry(
            period=1, period_unit="Week", revenue_actuals={"Tickets": 1800}, attendance_actual=90
        )
        summary = run_forecast(weekly_event, [entry]).summary
        assert summary.total_attendance_forecast == 100 + 110 + 121 + 133
        assert summary.total_attendance_actual == 90
        assert summary.revised_total_attendance == 90 + 110 + 121 + 133
        assert summary.total_attendance_variance == -10
        assert summary.revenue_per_attendee_actual == pytest.approx(20.0)
        assert summary.revenue_per_attendee_forecast == pytest.approx(
            summary.total_revenue_forecast / summary.total_attendance_forecast
        )

    def test_no_attendance_metrics_for_business(self, linear_business):
        summary = run_forecast(linear_business).summary
        assert summary.total_attendance_forecast is None
        assert summary.revenue_per_attendee_forecast is None

    def test_empty_projection_list(self):
        summary = summarize([])
        assert summary.period_count == 0
        assert summary.total_revenue_forecast == 0.0
        assert summary.avg_revenue_per_period == 0.0

    def test_to_dataframe(self, linear_business):
        df = run_forecast(linear_business).summary.to_dataframe()
        assert list(df.columns) == ["Metric", "Value"]
        assert "revised_total_revenue" in set(df["Metric"])


class TestBreakdown:

    def test_revenue_shares(self, weekly_event):
        shares = breakdown(project_period_detail(weekly_event, 1), BreakdownSource.REVENUE)
        assert [(s.name, s.percentage_of_period_total) for s in shares] == [
            ("Tickets", 80),
            ("F&B Sales", 20),
        ]
        assert shares[0].name_and_percentage == "Tickets (80%)"

    def test_cost_shares_sum_near_hundred(self, weekly_event):
        shares = breakdown(project_period_detail(weekly_event, 1), "cost")
        assert shares[0].name == "Venue"
        total = sum(s.percentage_of_period_total for s in shares)
        assert abs(total - 100) <= len(shares)

    def test_fixed_line_kept_at_zero(self, weekly_event):
        shares = breakdown(project_period_detail(weekly_event, 2), BreakdownSource.COST)
        setup = next(s for s in shares if s.name == "Setup")
        assert setup.value == 0.0
        assert setup.percentage_of_period_total == 0
        assert shares[-1].name == "Setup"

    def test_grouped_by_category(self, weekly_event):
        shares = breakdown(project_period_detail(weekly_event, 1), BreakdownSource.COST_CATEGORY)
        assert {s.name: s.value for s in shares} == {
            "Operations": pytest.approx(1650.0),
            "Staffing": 250.0,
            "Marketing": 150.0,
        }

    def test_grouped_by_kind_drops_empty(self, weekly_event):
        shares = breakdown(project_period_detail(weekly_event, 2), BreakdownSource.COST_KIND)
        names = [s.name for s in shares]
        assert "Fixed Costs" not in names
        assert names[0] == "Recurring Costs"
        assert "Cost of Goods Sold" in names

    def test_zero_total(self, make_business):
        a = make_business(streams=[{"name": "Sales", "base_value": 0}])
        shares = breakdown(project_period_detail(a, 1))
        assert [s.percentage_of_period_total for s in shares] == [0]

    def test_detail_totals_match_projection(self, weekly_event):
        result = run_forecast(weekly_event)
        for p in result.projections:
            detail = project_period_detail(weekly_event, p.period)
            assert detail.revenue_total == pytest.approx(p.revenue_forecast)
            assert detail.cost_total == pytest.approx(p.cost_forecast)

    def test_dataframe(self, weekly_event):
        df = breakdown_to_dataframe(breakdown(project_period_detail(weekly_event, 1)))
        assert list(df.columns) == ["Category", "Value", "Percentage"]
        assert len(df) == 2


class TestAccuracy:

    @pytest.mark.parametrize("error, grade", [
        (0.0, "A"), (10.0, "A"), (15.0, "B"), (25.0, "C"), (40.0, "D"), (40.1, "F"),
    ])
    def test_grades(self, error, grade):
        assert accuracy_grade(error) == grade

    def test_mape(self):
        assert mean_absolute_percentage_error([90, 110], [100, 100]) == pytest.approx(10.0)

    def test_mape_skips_zero_actuals(self):
        assert mean_absolute_percentage_error([90, 50], [100, 0]) == pytest.approx(10.0)
        assert mean_absolute_percentage_error([1], [0]) == 0.0
        assert mean_absolute_percentage_error([], []) == 0.0

    def test_trend(self):
        assert accuracy_trend([30, 30, 30, 10, 10, 10]) == "improving"
        assert accuracy_trend([10, 10, 10, 30, 30, 30]) == "declining"
        assert accuracy_trend([10, 12, 11, 10]) == "stable"
        assert accuracy_trend([50, 1]) == "stable"

    def test_confidence(self):
        assert confidence_score(10.0, "stable") == 80
        assert confidence_score(10.0, "improving") == 90
        assert confidence_score(10.0, "declining") == 65
        assert confidence_score(0.0, "improving") == 100
        assert confidence_score(60.0, "declining") == 0

    def test_report_skips_unreported_periods(self, linear_business, monthly_actual):
        result = run_forecast(linear_business, [monthly_actual(2, revenue={"Subscriptions": 1000})])
        report = compute_forecast_accuracy(result.projections)
        assert [p.period for p in report.periods] == [2]
        assert report.periods[0].absolute_error == 100.0
        assert report.mape == pytest.approx(10.0)
        assert report.grade == "A"
        assert report.trend == "stable"
        assert report.confidence_score == 80
        assert len(report.to_dataframe()) == 1

    def test_overestimation_bias_flagged(self):
        projections = [_reported(p, 105.0, 100.0) for p in range(1, 6)]
        report = compute_forecast_accuracy(projections)
        categories = {f.category for f in report.flags}
        assert categories == {"forecast_bias"}
        assert report.flags[0].severity == "medium"

    def test_poor_accuracy_flagged(self):
        projections = [_reported(1, 135.0, 100.0), _reported(2, 65.0, 100.0)]
        report = compute_forecast_accuracy(projections)
        reliability = [f for f in report.flags if f.category == "forecast_reliability"]
        assert reliability[0].severity == "high"

    def test_no_actuals(self, linear_business):
        report = compute_forecast_accuracy(run_forecast(linear_business).projections, metric="cost")
        assert report.periods == []
        assert report.mape == 0.0
        assert report.flags == []
        assert report.confidence_score == 100


class TestScenarioComparison:

    def test_deltas(self, linear_business):
        baseline = run_forecast(linear_business).summary
        scenario = run_forecast(
            linear_business.model_copy(update={"growth_model": GrowthModel(kind="exponential", rate=0.1)})
        ).summary
        cmp = compare_summaries(baseline, scenario)
        assert cmp.revenue_delta == pytest.approx(10.0)
        assert cmp.revenue_delta_percent == pytest.approx(10.0 / 3300.0 * 100)
        assert cmp.cost_delta == 0.0
        assert cmp.cost_delta_percent == 0.0
        assert cmp.margin_delta == pytest.approx(0.0)
        assert cmp.break_even_delta == 0

    def test_revised_totals(self, linear_business, monthly_actual):
        baseline = run_forecast(linear_business).summary
        scenario = run_forecast(linear_business, [monthly_actual(1, revenue={"Subscriptions": 800})]).summary
        assert compare_summaries(baseline, scenario).revenue_delta == 0.0
        assert compare_summaries(baseline, scenario, use_revised=True).revenue_delta == -200.0
