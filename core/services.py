from datetime import date
from typing import Callable, List, Optional

from core.aggregation import (
    CategoryTotal,
    MonthlyTotals,
    category_totals,
    monthly_overview,
    sorted_totals,
)
from core.budgets import BudgetEvaluation, BudgetSummary, evaluate_budgets, sort_by_usage, summarize_budgets
from core.domain import EXPENSE
from core.errors import StorageError
from core.insights import (
    DashboardSummary,
    Insights,
    Recommendation,
    build_insights,
    dashboard_summary,
    recommendations,
)
from core.logging import get_logger
from core.periods import Period, budgets_for_period, current_period, filter_by_period
from core.store import RecordStore

log = get_logger(__name__)

CHART_CATEGORY_LIMIT = 10


class _StoreFacade:

    def __init__(self, store: RecordStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today

    def _snapshot(self):
        try:
            return self.store.snapshot()
        except StorageError:
            log.exception("could not read records from %s", type(self.store).__name__)
            raise

    def _period(self, period: Optional[Period]) -> Period:
        return period if period is not None else current_period(self.today())


class BudgetService(_StoreFacade):
    """Budget vs actual for one month, read from an injected store.

    today: callable returning the reference date; the current month is used
    whenever no period is passed.
    """

    def comparison(self, period: Optional[Period] = None) -> List[BudgetEvaluation]:
        period = self._period(period)
        trans, budgets = self._snapshot()
        totals = category_totals(filter_by_period(trans, period), EXPENSE)
        result = sort_by_usage(evaluate_budgets(budgets_for_period(budgets, period), totals))
        log.debug("budget comparison", extra={"period": period.label, "budgets": len(result)})
        return result

    def summary(self, period: Optional[Period] = None) -> BudgetSummary:
        return summarize_budgets(self.comparison(period))


class ReportService(_StoreFacade):
    """Category breakdowns, monthly overview and insights over a store."""

    def category_breakdown(
        self, period: Optional[Period] = None, type: Optional[str] = EXPENSE
    ) -> List[tuple[str, CategoryTotal]]:
        period = self._period(period)
        trans, _ = self._snapshot()
        return sorted_totals(category_totals(filter_by_period(trans, period), type))

    def top_spending(self, limit: int = CHART_CATEGORY_LIMIT) -> List[tuple[str, CategoryTotal]]:
        """Largest expense categories over every recorded month."""
        trans, _ = self._snapshot()
        return sorted_totals(category_totals(trans, EXPENSE))[:limit]

    def monthly_overview(self) -> List[MonthlyTotals]:
        trans, _ = self._snapshot()
        return monthly_overview(trans)

    def insights(self) -> Insights:
        trans, budgets = self._snapshot()
        result = build_insights(trans, budgets, self.today())
        log.debug(
            "insights computed",
            extra={"savings_rate": result.savings_rate, "alerts": len(result.budget_alerts)},
        )
        return result

    def recommendations(self, currency: str = "USD") -> List[Recommendation]:
        return recommendations(self.insights(), currency)

    def dashboard(self) -> DashboardSummary:
        trans, budgets = self._snapshot()
        return dashboard_summary(trans, budgets, self.today())
