import asyncio
from collections import defaultdict
from typing import Callable, Dict, Iterable, Iterator, Optional, Sequence

from budgetwatch.dates import month_range
from budgetwatch.domain import Budget, MonthlyOverview, MonthlySpend, Transaction, TransactionType


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def in_month(month: str) -> Callable[[Transaction], bool]:
    start, end = month_range(month)

    def _filter(t: Transaction) -> bool:
        return start <= t.date <= end

    return _filter


def is_expense(t: Transaction) -> bool:
    return t.type == TransactionType.EXPENSE


def aggregate(trans: Iterable[Transaction], month: str) -> MonthlySpend:
    """Sum expense amounts for `month`, grouped by exact category name.

    Income never counts toward budget consumption. Category names are not
    normalized, so "Food" and "food " are separate groups.
    """
    within = in_month(month)
    per_category: Dict[str, float] = defaultdict(float)
    total = 0.0

    for t in iter_transactions(trans, lambda t: is_expense(t) and within(t)):
        per_category[t.category] += t.amount
        total += t.amount

    return MonthlySpend(month=month, per_category=dict(per_category), total=total)


def monthly_overview(
    trans: Iterable[Transaction], month: str, budget: Optional[Budget] = None
) -> MonthlyOverview:
    within = in_month(month)
    income = 0.0
    expenses = 0.0
    for t in iter_transactions(trans, within):
        if is_expense(t):
            expenses += t.amount
        else:
            income += t.amount

    limit = budget.total_limit if budget is not None else 0.0
    return MonthlyOverview(
        month=month,
        income=income,
        expenses=expenses,
        net=income - expenses,
        budget_limit=limit,
        remaining_budget=limit - expenses if budget is not None else 0.0,
    )


async def expenses_by_month(trans: Sequence[Transaction], months: Sequence[str]) -> Dict[str, float]:
    """Compute total expenses per month concurrently for the given 'YYYY-MM' keys."""

    async def month_total(month: str) -> tuple[str, float]:
        spend = aggregate(trans, month)
        await asyncio.sleep(0)  # cooperate
        return month, spend.total

    results = await asyncio.gather(*(month_total(m) for m in months))
    return {k: v for k, v in results}
