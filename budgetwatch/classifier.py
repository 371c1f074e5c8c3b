from typing import Iterable, List, Optional, Tuple

from budgetwatch.domain import AlertLevel, Budget, CategoryAlert, MonthlySpend, TotalAlert
from budgetwatch.functional import Maybe, Nothing, Some
from budgetwatch.thresholds import alert_message, as_limit, classify as classify_level, spend_percentage

TOTAL_CATEGORY = "Total"


def find_budget(budgets: Iterable[Budget], month: str) -> Maybe[Budget]:
    """First budget whose month key matches; duplicates after it are ignored."""
    for b in budgets:
        if b.month == month:
            return Some(b)
    return Nothing()


def build_alert(category: str, limit, spent: float) -> Optional[CategoryAlert]:
    """Alert for one limit/spend pair, None when the limit is unusable or the level is safe."""
    percentage = spend_percentage(spent, limit)
    if percentage is None:
        return None

    level = classify_level(percentage)
    if level == AlertLevel.SAFE:
        return None

    usable = as_limit(limit)
    return CategoryAlert(
        category=category,
        budget_limit=usable,
        spent=spent,
        percentage=percentage,
        level=level,
        message=alert_message(level, category, spent, usable),
    )


def classify(
    budget: Optional[Budget], spend: MonthlySpend
) -> Tuple[Tuple[CategoryAlert, ...], Optional[TotalAlert]]:
    """Combine a month's budget with its aggregated spend.

    Category alerts keep the iteration order of ``budget.category_limits``.
    Without a budget the result is empty, which is the "no budget configured"
    state rather than an error.
    """
    if budget is None:
        return (), None

    category_alerts: List[CategoryAlert] = []
    for category, limit in budget.category_limits.items():
        alert = build_alert(category, limit, spend.per_category.get(category, 0.0))
        if alert is not None:
            category_alerts.append(alert)

    total_alert = build_alert(TOTAL_CATEGORY, budget.total_limit, spend.total)
    return tuple(category_alerts), total_alert
