"""Application wiring: stores are created once here and injected everywhere else."""
from pathlib import Path
from typing import NamedTuple, Optional, Union

from budgetwatch.alerts import BudgetAlertService
from budgetwatch.config import settings
from budgetwatch.domain import Budget, Transaction
from budgetwatch.events import EventBus
from budgetwatch.notifications import EventBusChannel
from budgetwatch.services import BudgetService, TransactionService
from budgetwatch.stores import InMemoryRecordStore, load_seed


class Container(NamedTuple):
    bus: EventBus
    transaction_store: InMemoryRecordStore[Transaction]
    budget_store: InMemoryRecordStore[Budget]
    alerts: BudgetAlertService
    transactions: TransactionService
    budgets: BudgetService


def build_container(
    seed_path: Optional[Union[str, Path]] = None,
    bus: Optional[EventBus] = None,
    alert_delay: Optional[float] = None,
) -> Container:
    seed = load_seed(seed_path or settings.seed_path)
    bus = bus or EventBus()

    transaction_store = InMemoryRecordStore(Transaction, seed.transactions, latency=settings.store_latency)
    budget_store = InMemoryRecordStore(Budget, seed.budgets, latency=settings.store_latency)

    alerts = BudgetAlertService(transaction_store, budget_store, EventBusChannel(bus), delay=alert_delay)
    return Container(
        bus=bus,
        transaction_store=transaction_store,
        budget_store=budget_store,
        alerts=alerts,
        transactions=TransactionService(transaction_store, on_expense=alerts.check_threshold_crossing),
        budgets=BudgetService(budget_store),
    )
