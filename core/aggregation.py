from collections import defaultdict
from typing import Iterable, NamedTuple, Optional

from core.domain import EXPENSE, INCOME, Transaction
from core.periods import Period


class CategoryTotal(NamedTuple):
    total: float
    count: int


class MonthlyTotals(NamedTuple):
    period: Period
    income: float
    expenses: float

    @property
    def net(self) -> float:
        return self.income - self.expenses


def category_totals(
    trans: Iterable[Transaction], type: Optional[str] = EXPENSE
) -> dict[str, CategoryTotal]:
    """Group transactions by category into total amount and count.

    Only transactions of ``type`` are counted; pass ``None`` to count all.
    Categories are used verbatim, so "Food" and "food" are two buckets.
    """
    totals: dict[str, float] = defaultdict(float)
    counts: dict[str, int] = defaultdict(int)

    for t in trans:
        if type is not None and t.type != type:
            continue
        totals[t.category] += t.amount
        counts[t.category] += 1

    return {cat: CategoryTotal(totals[cat], counts[cat]) for cat in totals}


def sorted_totals(totals: dict[str, CategoryTotal]) -> list[tuple[str, CategoryTotal]]:
    return sorted(totals.items(), key=lambda item: item[1].total, reverse=True)


def top_categories(totals: dict[str, CategoryTotal], k: int = 3) -> list[tuple[str, float]]:
    return [(cat, ct.total) for cat, ct in sorted_totals(totals)[: max(0, k)]]


def total_amount(trans: Iterable[Transaction], type: str) -> float:
    return sum((t.amount for t in trans if t.type == type), 0.0)


def monthly_overview(trans: Iterable[Transaction]) -> list[MonthlyTotals]:
    """Income and expense totals per month, oldest month first.

    Months without any transaction are not included.
    """
    income: dict[Period, float] = defaultdict(float)
    expenses: dict[Period, float] = defaultdict(float)

    for t in trans:
        key = Period(t.date.year, t.date.month)
        if t.type == INCOME:
            income[key] += t.amount
        else:
            expenses[key] += t.amount

    months = sorted(set(income) | set(expenses))
    return [MonthlyTotals(m, income.get(m, 0.0), expenses.get(m, 0.0)) for m in months]
