"""Threshold policy: maps a spend percentage to an alert level and message."""
import math
from decimal import Decimal
from typing import Optional

from budgetwatch.domain import AlertLevel
from budgetwatch.notifications import ERROR, WARNING

THRESHOLDS = {
    AlertLevel.WARNING: 80,
    AlertLevel.CRITICAL: 90,
    AlertLevel.EXCEEDED: 100,
}

# Only these levels produce a notification; the value is the channel severity.
NOTIFY_SEVERITY = {
    AlertLevel.CRITICAL: WARNING,
    AlertLevel.EXCEEDED: ERROR,
}


def classify(percentage: float) -> AlertLevel:
    """Lower bound of each tier is inclusive: 90.0 is critical, not warning."""
    if percentage >= THRESHOLDS[AlertLevel.EXCEEDED]:
        return AlertLevel.EXCEEDED
    if percentage >= THRESHOLDS[AlertLevel.CRITICAL]:
        return AlertLevel.CRITICAL
    if percentage >= THRESHOLDS[AlertLevel.WARNING]:
        return AlertLevel.WARNING
    return AlertLevel.SAFE


def as_limit(value) -> Optional[float]:
    """Return a usable positive limit, or None for zero, negative or non-numeric values."""
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return None
    limit = float(value)
    if math.isnan(limit) or limit <= 0:
        return None
    return limit


def spend_percentage(spent: float, limit) -> Optional[float]:
    limit = as_limit(limit)
    if limit is None:
        return None
    return spent / limit * 100


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_money(value: float) -> str:
    """Thousands separators, at most three decimals, trailing zeros dropped: 1,234.5"""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def alert_message(level: AlertLevel, category: str, spent: float, limit: float) -> Optional[str]:
    remaining = limit - spent
    if level == AlertLevel.EXCEEDED:
        return f"{category} budget exceeded by ${format_money(spent - limit)}"
    if level == AlertLevel.CRITICAL:
        pct = round_half_up(spent / limit * 100)
        return f"{category} budget at {pct}% - Only ${format_money(remaining)} remaining"
    if level == AlertLevel.WARNING:
        pct = round_half_up(spent / limit * 100)
        return f"{category} budget at {pct}% - ${format_money(remaining)} remaining"
    return None


def notification_severity(level: AlertLevel) -> Optional[str]:
    return NOTIFY_SEVERITY.get(level)
