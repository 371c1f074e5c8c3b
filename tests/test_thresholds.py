import math
from decimal import Decimal

import pytest

from budgetwatch.domain import AlertLevel
from budgetwatch.thresholds import (
    alert_message, as_limit, classify, format_money, notification_severity, spend_percentage
)


@pytest.mark.parametrize("percentage, level", [
    (0, AlertLevel.SAFE),
    (79.999, AlertLevel.SAFE),
    (80, AlertLevel.WARNING),
    (89.999, AlertLevel.WARNING),
    (90, AlertLevel.CRITICAL),
    (99.999, AlertLevel.CRITICAL),
    (100, AlertLevel.EXCEEDED),
    (150, AlertLevel.EXCEEDED),
])
def test_classify_boundaries(percentage, level):
    assert classify(percentage) == level


def test_classify_is_repeatable():
    assert classify(90) == classify(90)
    assert classify(79.5) is classify(79.5)


def test_alert_levels_are_ordered():
    assert AlertLevel.SAFE < AlertLevel.WARNING < AlertLevel.CRITICAL < AlertLevel.EXCEEDED
    assert max([AlertLevel.WARNING, AlertLevel.EXCEEDED, AlertLevel.CRITICAL]) == AlertLevel.EXCEEDED


def test_exceeded_message():
    assert alert_message(AlertLevel.EXCEEDED, "Food", 650, 500) == "Food budget exceeded by $150"


def test_critical_message_rounds_percentage():
    # 462.5 / 500 = 92.5% rounds half up
    msg = alert_message(AlertLevel.CRITICAL, "Food", 462.5, 500)
    assert msg == "Food budget at 93% - Only $37.5 remaining"


def test_warning_message():
    msg = alert_message(AlertLevel.WARNING, "Transport", 170, 200)
    assert msg == "Transport budget at 85% - $30 remaining"


def test_safe_has_no_message():
    assert alert_message(AlertLevel.SAFE, "Food", 10, 500) is None


def test_format_money_uses_thousands_separator():
    assert format_money(1234.5) == "1,234.5"
    assert format_money(2000) == "2,000"
    assert format_money(0.1 + 0.2) == "0.3"


@pytest.mark.parametrize("value", [0, -5, "abc", None, True, float("nan")])
def test_unusable_limits(value):
    assert as_limit(value) is None


def test_usable_limits():
    assert as_limit(500) == 500.0
    assert as_limit(Decimal("12.5")) == 12.5


def test_spend_percentage_guards_zero_limit():
    assert spend_percentage(500, 0) is None
    assert spend_percentage(50, 200) == 25.0
    assert not math.isinf(spend_percentage(1, 1e-9))


def test_notification_severity():
    assert notification_severity(AlertLevel.EXCEEDED) == "error"
    assert notification_severity(AlertLevel.CRITICAL) == "warning"
    assert notification_severity(AlertLevel.WARNING) is None
    assert notification_severity(AlertLevel.SAFE) is None
