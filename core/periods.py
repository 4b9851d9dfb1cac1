from datetime import date
from typing import Callable, Iterable, NamedTuple, TypeVar

from core.domain import Budget

R = TypeVar("R")


class Period(NamedTuple):
    year: int
    month: int

    @property
    def label(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def current_period(today: date) -> Period:
    return Period(today.year, today.month)


def previous_period(period: Period) -> Period:
    if period.month == 1:
        return Period(period.year - 1, 12)
    return Period(period.year, period.month - 1)


def by_period(period: Period) -> Callable[[R], bool]:
    """Predicate matching records whose ``date`` falls in ``period``.

    Only the calendar year and month of the date are compared.
    """
    def _filter(record) -> bool:
        d = record.date
        return d.year == period.year and d.month == period.month

    return _filter


def filter_by_period(records: Iterable[R], period: Period) -> tuple[R, ...]:
    return tuple(filter(by_period(period), records))


def _budget_month(b: Budget) -> int | None:
    try:
        return int(b.month)
    except (TypeError, ValueError):
        return None


def budgets_for_period(budgets: Iterable[Budget], period: Period) -> tuple[Budget, ...]:
    return tuple(
        b for b in budgets
        if b.year == period.year and _budget_month(b) == period.month
    )
