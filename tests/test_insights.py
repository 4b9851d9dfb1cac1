from datetime import date, datetime

import pytest

from core.budgets import OVER, WARNING
from core.domain import Budget, Transaction
from core.insights import (
    EXPENSE_INCREASE_ALERT,
    PROJECTION_DAYS,
    SAVINGS_FAIR,
    SAVINGS_FAIR_THRESHOLD,
    SAVINGS_GOOD,
    SAVINGS_GOOD_THRESHOLD,
    SAVINGS_POOR,
    build_insights,
    category_share,
    compute_insights,
    dashboard_summary,
    recommendations,
    savings_tier,
)

TS = datetime(2025, 1, 1)
TODAY = date(2025, 3, 10)


def make_tx(id, amount, category, d=date(2025, 3, 5), type="expense"):
    return Transaction(id, amount, d, id, type, category, TS, TS)


def make_budget(id, category, amount, month="03", year=2025):
    return Budget(id, category, amount, month, year, TS, TS)


def test_two_expenses_and_no_budgets():
    trans = [make_tx("t1", 100.0, "catA"), make_tx("t2", 50.0, "catB")]
    ins = build_insights(trans, [], TODAY)
    assert ins.budget_alerts == []
    assert ins.top_categories == [("catA", 100.0), ("catB", 50.0)]


def test_top_categories_limited_to_three():
    trans = [make_tx(f"t{i}", float(i * 10), f"cat{i}") for i in range(1, 6)]
    ins = build_insights(trans, [], TODAY)
    assert [c for c, _ in ins.top_categories] == ["cat5", "cat4", "cat3"]


def test_expense_change_is_zero_without_prior_expenses():
    trans = [make_tx("t1", 999.0, "Food")]
    ins = build_insights(trans, [], TODAY)
    assert ins.previous_expenses == 0.0
    assert ins.expense_change == 0.0


def test_expense_change_against_last_month():
    trans = [
        make_tx("t1", 150.0, "Food"),
        make_tx("t2", 100.0, "Food", d=date(2025, 2, 20)),
    ]
    ins = build_insights(trans, [], TODAY)
    assert ins.expense_change == 50.0


def test_expense_change_in_january_uses_december():
    trans = [
        make_tx("t1", 50.0, "Food", d=date(2025, 1, 3)),
        make_tx("t2", 200.0, "Food", d=date(2024, 12, 15)),
    ]
    ins = build_insights(trans, [], date(2025, 1, 5))
    assert ins.previous_expenses == 200.0
    assert ins.expense_change == -75.0


def test_savings_rate_is_zero_without_income():
    ins = build_insights([make_tx("t1", 10.0, "Food")], [], TODAY)
    assert ins.current_income == 0.0
    assert ins.savings_rate == 0.0


def test_savings_rate_with_income():
    trans = [
        make_tx("t1", 1000.0, "Salary", type="income"),
        make_tx("t2", 750.0, "Food"),
    ]
    ins = build_insights(trans, [], TODAY)
    assert ins.savings_rate == 25.0
    assert ins.savings_tier == SAVINGS_GOOD


def test_daily_average_uses_day_of_month_and_flat_projection():
    trans = [make_tx("t1", 200.0, "Food"), make_tx("t2", 100.0, "Rent")]
    ins = build_insights(trans, [], TODAY)
    assert ins.daily_average == 30.0
    assert PROJECTION_DAYS == 30
    assert ins.projected_monthly == 900.0


def test_projection_ignores_actual_month_length():
    # February 28th: still divided by day 28 and projected over 30 days
    trans = [make_tx("t1", 280.0, "Food", d=date(2025, 2, 1))]
    ins = build_insights(trans, [], date(2025, 2, 28))
    assert ins.daily_average == 10.0
    assert ins.projected_monthly == 300.0


def test_budget_alerts_only_include_warning_and_over():
    trans = [make_tx("t1", 120.0, "catA"), make_tx("t2", 85.0, "catB"), make_tx("t3", 10.0, "catC")]
    budgets = [
        make_budget("b1", "catA", 100.0),
        make_budget("b2", "catB", 100.0),
        make_budget("b3", "catC", 100.0),
        make_budget("b4", "catA", 5.0, month="02"),
    ]
    ins = build_insights(trans, budgets, TODAY)
    assert [(a.category, a.status) for a in ins.budget_alerts] == [("catA", OVER), ("catB", WARNING)]
    assert ins.budget_alerts[0].spent == 120.0
    assert ins.budget_alerts[0].remaining == 0.0


def test_compute_insights_on_prefiltered_sets():
    current = [make_tx("t1", 40.0, "Food")]
    previous = [make_tx("t0", 20.0, "Food", d=date(2025, 2, 1))]
    ins = compute_insights(current, previous, [], date(2025, 3, 4))
    assert ins.expense_change == 100.0
    assert ins.daily_average == 10.0


def test_savings_tier_boundaries():
    assert SAVINGS_GOOD_THRESHOLD == 20
    assert SAVINGS_FAIR_THRESHOLD == 10
    assert savings_tier(20.0) == SAVINGS_GOOD
    assert savings_tier(19.99) == SAVINGS_FAIR
    assert savings_tier(10.0) == SAVINGS_FAIR
    assert savings_tier(9.99) == SAVINGS_POOR
    assert savings_tier(-5.0) == SAVINGS_POOR


def test_recommendations_for_struggling_month():
    trans = [
        make_tx("t1", 1000.0, "Salary", type="income"),
        make_tx("t2", 950.0, "Food"),
        make_tx("t3", 500.0, "Food", d=date(2025, 2, 1)),
    ]
    budgets = [make_budget("b1", "Food", 900.0)]
    ins = build_insights(trans, budgets, TODAY)
    kinds = [r.kind for r in recommendations(ins)]
    assert kinds == ["spending_increase", "low_savings", "budget_alerts", "projection", "automate_savings"]


def test_recommendations_for_good_savings():
    trans = [make_tx("t1", 1000.0, "Salary", type="income"), make_tx("t2", 100.0, "Food")]
    recs = recommendations(build_insights(trans, [], TODAY), "USD")
    kinds = [r.kind for r in recs]
    assert "great_savings" in kinds
    assert "low_savings" not in kinds
    projection = next(r for r in recs if r.kind == "projection")
    assert "$10.00" in projection.message
    assert "$300.00" in projection.message


def test_spending_increase_tip_needs_more_than_threshold():
    assert EXPENSE_INCREASE_ALERT == 10
    trans = [make_tx("t1", 110.0, "Food"), make_tx("t0", 100.0, "Food", d=date(2025, 2, 1))]
    ins = build_insights(trans, [], TODAY)
    assert ins.expense_change == pytest.approx(10.0)
    assert "spending_increase" not in [r.kind for r in recommendations(ins)]


def test_dashboard_summary_current_month():
    trans = [
        make_tx("t1", 2000.0, "Salary", type="income"),
        make_tx("t2", 300.0, "Food"),
        make_tx("t3", 100.0, "Transport"),
        make_tx("t4", 999.0, "Food", d=date(2025, 2, 1)),
    ]
    budgets = [make_budget("b1", "Food", 600.0), make_budget("b2", "Transport", 200.0)]
    s = dashboard_summary(trans, budgets, TODAY)
    assert s.total_income == 2000.0
    assert s.total_expenses == 400.0
    assert s.net_amount == 1600.0
    assert s.total_budget == 800.0
    assert s.budget_used == 50.0
    assert s.top_category == ("Food", 300.0)
    assert s.transaction_count == 3


def test_dashboard_summary_without_budgets_or_transactions():
    s = dashboard_summary([], [], TODAY)
    assert s.total_budget == 0.0
    assert s.budget_used == 0.0
    assert s.top_category is None
    assert s.average_expense == 0.0


def test_category_share():
    assert category_share(25.0, 100.0) == 25.0
    assert category_share(25.0, 0.0) == 0.0
