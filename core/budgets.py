"""Budget vs actual evaluation for one period.

Budgets are expected to be pre-filtered to a single (month, year); see
``core.periods.budgets_for_period``. Several budgets for the same category
are summed into one evaluation.
"""
from dataclasses import dataclass
from typing import Iterable, Mapping

from core.aggregation import CategoryTotal
from core.domain import Budget

GOOD = "good"
WARNING = "warning"
OVER = "over"

WARNING_THRESHOLD = 80.0
OVER_THRESHOLD = 100.0


@dataclass(frozen=True)
class BudgetEvaluation:
    category: str
    budget: float
    spent: float
    remaining: float
    percentage: float
    status: str
    budget_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class BudgetSummary:
    total_budget: float
    total_spent: float
    total_remaining: float
    over_budget_count: int
    overall_percentage: float


def status_for(percentage: float) -> str:
    # inclusive: a fully spent budget is over
    if percentage >= OVER_THRESHOLD:
        return OVER
    if percentage > WARNING_THRESHOLD:
        return WARNING
    return GOOD


def evaluate(category: str, amount: float, spent: float, budget_ids: tuple[str, ...] = ()) -> BudgetEvaluation:
    if amount <= 0:
        # no meaningful ratio for a non-positive limit
        percentage = 0.0
        status = OVER if spent > 0 else GOOD
    else:
        percentage = spent * 100 / amount
        status = status_for(percentage)

    return BudgetEvaluation(
        category=category,
        budget=amount,
        spent=spent,
        remaining=max(0.0, amount - spent),
        percentage=percentage,
        status=status,
        budget_ids=budget_ids,
    )


def evaluate_budgets(
    budgets: Iterable[Budget], totals: Mapping[str, CategoryTotal]
) -> list[BudgetEvaluation]:
    """One evaluation per budgeted category, in first-seen order."""
    limits: dict[str, float] = {}
    ids: dict[str, list[str]] = {}

    for b in budgets:
        limits[b.category] = limits.get(b.category, 0.0) + b.amount
        ids.setdefault(b.category, []).append(b.id)

    result = []
    for category, amount in limits.items():
        ct = totals.get(category)
        spent = ct.total if ct is not None else 0.0
        result.append(evaluate(category, amount, spent, tuple(ids[category])))
    return result


def sort_by_usage(evaluations: Iterable[BudgetEvaluation]) -> list[BudgetEvaluation]:
    return sorted(evaluations, key=lambda e: e.percentage, reverse=True)


def budget_alerts(evaluations: Iterable[BudgetEvaluation]) -> list[BudgetEvaluation]:
    return [e for e in evaluations if e.status != GOOD]


def summarize_budgets(evaluations: Iterable[BudgetEvaluation]) -> BudgetSummary:
    evaluations = list(evaluations)
    total_budget = sum((e.budget for e in evaluations), 0.0)
    total_spent = sum((e.spent for e in evaluations), 0.0)

    return BudgetSummary(
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=total_budget - total_spent,
        over_budget_count=sum(1 for e in evaluations if e.status == OVER),
        overall_percentage=total_spent * 100 / total_budget if total_budget > 0 else 0.0,
    )
