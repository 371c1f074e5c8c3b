from datetime import date

import pytest

import budgetwatch.alerts as alerts_module
from budgetwatch.alerts import BudgetAlertService
from budgetwatch.domain import AlertLevel, Budget, Transaction, TransactionType
from budgetwatch.exceptions import StoreError
from budgetwatch.notifications import RecordingChannel
from budgetwatch.stores import InMemoryRecordStore

EXPENSE = TransactionType.EXPENSE
INCOME = TransactionType.INCOME


def make_tx(id, amount, category="Food", d="2024-03-10", type=EXPENSE):
    return Transaction(id=id, type=type, amount=amount, category=category, date=date.fromisoformat(d))


def make_service(transactions=(), budgets=(), delay=0):
    channel = RecordingChannel()
    service = BudgetAlertService(
        InMemoryRecordStore(Transaction, transactions),
        InMemoryRecordStore(Budget, budgets),
        channel,
        delay=delay,
    )
    return service, channel


def march_budget(total_limit=1000, **limits):
    return Budget(id=1, month="2024-03", year=2024, total_limit=total_limit, category_limits=limits)


class FailingStore:
    async def get_all(self):
        raise StoreError("store unavailable")


@pytest.mark.asyncio
async def test_no_budget_returns_neutral_result():
    service, _ = make_service(transactions=[make_tx(1, 50, d="2099-01-05")], budgets=[march_budget(Food=100)])

    result = await service.calculate_budget_alerts("2099-01")

    assert result.category_alerts == ()
    assert result.total_alert is None
    assert result.summary.counts == {"safe": 0, "warning": 0, "critical": 0, "exceeded": 0}


@pytest.mark.asyncio
async def test_calculate_budget_alerts_end_to_end():
    transactions = [
        make_tx(1, 50, "Food", "2024-03-05"),
        make_tx(2, 40, "Food", "2024-03-20"),
        make_tx(3, 999, "Food", "2024-03-10", type=INCOME),
        make_tx(4, 170, "Transport", "2024-03-11"),
        make_tx(5, 10, "Food", "2024-04-01"),
    ]
    service, _ = make_service(transactions, [march_budget(280, Food=100, Transport=200, Fun=50)])

    result = await service.calculate_budget_alerts("2024-03")

    assert [(a.category, a.level) for a in result.category_alerts] == [
        ("Food", AlertLevel.CRITICAL),
        ("Transport", AlertLevel.WARNING),
    ]
    assert result.total_alert.level == AlertLevel.CRITICAL
    assert result.total_alert.spent == 260
    assert result.summary.total_alerts == 3
    assert result.summary.critical_alerts == 2


@pytest.mark.asyncio
async def test_month_defaults_to_current(monkeypatch):
    monkeypatch.setattr(alerts_module, "current_month", lambda: "2024-03")
    service, _ = make_service([make_tx(1, 120)], [march_budget(Food=100)])

    summary = await service.get_alert_summary()

    assert summary.exceeded == 1
    assert summary.total_alerts == 1


@pytest.mark.asyncio
async def test_upstream_failure_returns_empty_result():
    service = BudgetAlertService(FailingStore(), FailingStore(), RecordingChannel())
    result = await service.calculate_budget_alerts("2024-03")
    assert result.category_alerts == ()
    assert result.total_alert is None
    assert result.summary.total_alerts == 0


@pytest.mark.asyncio
async def test_warning_only_does_not_notify():
    tx = make_tx(1, 85)
    service, channel = make_service([tx], [march_budget(10000, Food=100)])

    result = await service.on_expense_recorded(tx)

    assert result.category_alerts[0].level == AlertLevel.WARNING
    assert channel.notifications == []


@pytest.mark.asyncio
async def test_critical_category_and_total_notify_independently():
    tx = make_tx(1, 95)
    service, channel = make_service([tx], [march_budget(100, Food=100)])

    await service.on_expense_recorded(tx)

    assert [(n.message, n.severity) for n in channel.notifications] == [
        ("Food budget at 95% - Only $5 remaining", "warning"),
        ("Total budget at 95% - Only $5 remaining", "warning"),
    ]


@pytest.mark.asyncio
async def test_exceeded_notifies_with_error_severity():
    tx = make_tx(1, 130)
    service, channel = make_service([tx], [march_budget(1000, Food=100, Rent=100)])

    await service.on_expense_recorded(tx)

    assert len(channel.notifications) == 1
    assert channel.notifications[0].severity == "error"
    assert channel.notifications[0].message == "Food budget exceeded by $30"


@pytest.mark.asyncio
async def test_repeated_writes_renotify():
    tx = make_tx(1, 130)
    service, channel = make_service([tx], [march_budget(1000, Food=100)])

    await service.on_expense_recorded(tx)
    await service.on_expense_recorded(tx)

    assert len(channel.notifications) == 2


@pytest.mark.asyncio
async def test_income_never_triggers():
    tx = make_tx(1, 500, type=INCOME)
    service, channel = make_service([make_tx(2, 130)], [march_budget(1000, Food=100)])

    assert await service.on_expense_recorded(tx) is None
    assert channel.notifications == []


@pytest.mark.asyncio
async def test_trigger_swallows_channel_errors():
    class BrokenChannel:
        def emit(self, message, severity):
            raise RuntimeError("toast backend down")

    tx = make_tx(1, 130)
    service = BudgetAlertService(
        InMemoryRecordStore(Transaction, [tx]),
        InMemoryRecordStore(Budget, [march_budget(1000, Food=100)]),
        BrokenChannel(),
    )
    assert await service.on_expense_recorded(tx) is None


@pytest.mark.asyncio
async def test_check_threshold_crossing_schedules_notification():
    tx = make_tx(1, 130)
    service, channel = make_service([tx], [march_budget(1000, Food=100)], delay=0.01)

    before = await service.check_threshold_crossing(tx)

    assert before.summary.exceeded == 1
    assert service.pending == 1
    assert channel.notifications == []

    await service.drain()

    assert service.pending == 0
    assert len(channel.notifications) == 1
