from collections import Counter
from typing import Optional, Sequence

from budgetwatch.domain import AlertLevel, AlertSummary, CategoryAlert, TotalAlert


def summarize(category_alerts: Sequence[CategoryAlert], total_alert: Optional[TotalAlert]) -> AlertSummary:
    alerts = list(category_alerts)
    if total_alert is not None:
        alerts.append(total_alert)

    counts = Counter(a.level for a in alerts)
    critical = counts[AlertLevel.CRITICAL]
    exceeded = counts[AlertLevel.EXCEEDED]

    return AlertSummary(
        safe=counts[AlertLevel.SAFE],
        warning=counts[AlertLevel.WARNING],
        critical=critical,
        exceeded=exceeded,
        total_alerts=len(alerts),
        critical_alerts=critical + exceeded,
    )
