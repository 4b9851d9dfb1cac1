"""Month-over-month trends, savings rate and spending recommendations.

The run-rate numbers are deliberate approximations: ``daily_average``
divides by the day of the month (not the days in the month) and
``projected_monthly`` always assumes a 30-day month.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from core.aggregation import category_totals, top_categories, total_amount
from core.budgets import BudgetEvaluation, budget_alerts, evaluate_budgets, summarize_budgets
from core.domain import EXPENSE, INCOME, Budget, Transaction
from core.formatting import format_currency, format_percent
from core.periods import budgets_for_period, current_period, filter_by_period, previous_period

PROJECTION_DAYS = 30
TOP_CATEGORY_COUNT = 3

SAVINGS_GOOD_THRESHOLD = 20.0
SAVINGS_FAIR_THRESHOLD = 10.0
EXPENSE_INCREASE_ALERT = 10.0

SAVINGS_GOOD = "good"
SAVINGS_FAIR = "fair"
SAVINGS_POOR = "poor"

TIER_COLORS = {
    SAVINGS_GOOD: "green",
    SAVINGS_FAIR: "yellow",
    SAVINGS_POOR: "red",
}


@dataclass(frozen=True)
class Insights:
    expense_change: float
    daily_average: float
    projected_monthly: float
    savings_rate: float
    current_expenses: float
    previous_expenses: float
    current_income: float
    budget_alerts: list[BudgetEvaluation] = field(default_factory=list)
    top_categories: list[tuple[str, float]] = field(default_factory=list)

    @property
    def savings_tier(self) -> str:
        return savings_tier(self.savings_rate)


@dataclass(frozen=True)
class Recommendation:
    kind: str
    tier: str
    message: str


@dataclass(frozen=True)
class DashboardSummary:
    total_income: float
    total_expenses: float
    net_amount: float
    total_budget: float
    budget_used: float
    top_category: Optional[tuple[str, float]]
    transaction_count: int
    average_expense: float


def savings_tier(rate: float) -> str:
    if rate >= SAVINGS_GOOD_THRESHOLD:
        return SAVINGS_GOOD
    if rate >= SAVINGS_FAIR_THRESHOLD:
        return SAVINGS_FAIR
    return SAVINGS_POOR


def percent_change(previous: float, current: float) -> float:
    if previous <= 0:
        return 0.0
    return (current - previous) * 100 / previous


def savings_rate(income: float, expenses: float) -> float:
    if income <= 0:
        return 0.0
    return (income - expenses) * 100 / income


def category_share(amount: float, total: float) -> float:
    return amount * 100 / total if total > 0 else 0.0


def compute_insights(
    current: Iterable[Transaction],
    previous: Iterable[Transaction],
    evaluations: Iterable[BudgetEvaluation],
    today: date,
) -> Insights:
    """Derive insights from already period-filtered transaction sets."""
    current = tuple(current)
    current_expenses = total_amount(current, EXPENSE)
    previous_expenses = total_amount(previous, EXPENSE)
    current_income = total_amount(current, INCOME)

    daily_average = current_expenses / today.day

    return Insights(
        expense_change=percent_change(previous_expenses, current_expenses),
        daily_average=daily_average,
        projected_monthly=daily_average * PROJECTION_DAYS,
        savings_rate=savings_rate(current_income, current_expenses),
        current_expenses=current_expenses,
        previous_expenses=previous_expenses,
        current_income=current_income,
        budget_alerts=budget_alerts(evaluations),
        top_categories=top_categories(category_totals(current, EXPENSE), TOP_CATEGORY_COUNT),
    )


def build_insights(
    trans: Iterable[Transaction], budgets: Iterable[Budget], today: date
) -> Insights:
    trans = tuple(trans)
    period = current_period(today)
    current = filter_by_period(trans, period)
    previous = filter_by_period(trans, previous_period(period))
    evaluations = evaluate_budgets(
        budgets_for_period(budgets, period), category_totals(current, EXPENSE)
    )
    return compute_insights(current, previous, evaluations, today)


def recommendations(insights: Insights, currency: str = "USD") -> list[Recommendation]:
    recs = []
    rate = format_percent(insights.savings_rate)

    if insights.expense_change > EXPENSE_INCREASE_ALERT:
        recs.append(Recommendation(
            "spending_increase", "warning",
            f"Your spending increased by {format_percent(insights.expense_change)} this month. "
            "Consider reviewing your largest expense categories.",
        ))
    if insights.savings_rate < SAVINGS_FAIR_THRESHOLD:
        recs.append(Recommendation(
            "low_savings", "danger",
            f"Your savings rate is {rate}. "
            f"Aim for at least {SAVINGS_GOOD_THRESHOLD:.0f}% to build financial security.",
        ))
    if insights.budget_alerts:
        recs.append(Recommendation(
            "budget_alerts", "warning",
            f"{len(insights.budget_alerts)} categories are approaching or over budget. "
            "Consider adjusting your spending or budget limits.",
        ))

    recs.append(Recommendation(
        "projection", "info",
        f"Based on your daily average of {format_currency(insights.daily_average, currency)}, "
        f"you're projected to spend {format_currency(insights.projected_monthly, currency)} this month.",
    ))
    if insights.savings_rate >= SAVINGS_GOOD_THRESHOLD:
        recs.append(Recommendation(
            "great_savings", "success",
            f"Great job! Your {rate} savings rate is excellent. Keep up the good work!",
        ))
    recs.append(Recommendation(
        "automate_savings", "info",
        "Consider setting up automatic transfers to savings to maintain consistent saving habits.",
    ))
    return recs


def dashboard_summary(
    trans: Iterable[Transaction], budgets: Iterable[Budget], today: date
) -> DashboardSummary:
    period = current_period(today)
    current = filter_by_period(trans, period)

    income = total_amount(current, INCOME)
    expenses = total_amount(current, EXPENSE)
    totals = category_totals(current, EXPENSE)
    top = top_categories(totals, 1)

    summary = summarize_budgets(evaluate_budgets(budgets_for_period(budgets, period), totals))
    total_budget = summary.total_budget

    return DashboardSummary(
        total_income=income,
        total_expenses=expenses,
        net_amount=income - expenses,
        total_budget=total_budget,
        budget_used=expenses * 100 / total_budget if total_budget > 0 else 0.0,
        top_category=top[0] if top else None,
        transaction_count=len(current),
        average_expense=expenses / len(current) if current else 0.0,
    )
