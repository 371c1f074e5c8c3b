import asyncio
import logging
from typing import Optional, Set

from budgetwatch.aggregator import aggregate
from budgetwatch.classifier import classify, find_budget
from budgetwatch.config import settings
from budgetwatch.dates import current_month, month_key
from budgetwatch.domain import AlertSummary, Budget, BudgetAlerts, Transaction
from budgetwatch.notifications import NotificationChannel
from budgetwatch.stores import RecordStore
from budgetwatch.summary import summarize
from budgetwatch.thresholds import notification_severity

logger = logging.getLogger(__name__)


class BudgetAlertService:
    """Computes budget alerts on demand and notifies on expense writes.

    The stores and the notification channel are injected; the service never
    keeps a copy of store state and re-reads both collections on every call.
    """

    def __init__(
        self,
        transaction_store: RecordStore[Transaction],
        budget_store: RecordStore[Budget],
        channel: NotificationChannel,
        delay: Optional[float] = None,
    ):
        self.transaction_store = transaction_store
        self.budget_store = budget_store
        self.channel = channel
        self.delay = settings.alert_check_delay if delay is None else delay
        self._pending: Set[asyncio.Task] = set()

    async def calculate_budget_alerts(self, month: Optional[str] = None) -> BudgetAlerts:
        month = month or current_month()
        try:
            budgets, transactions = await asyncio.gather(
                self.budget_store.get_all(),
                self.transaction_store.get_all(),
            )
            budget = find_budget(budgets, month).get_or_else(None)
            if budget is None:
                return BudgetAlerts.empty()

            category_alerts, total_alert = classify(budget, aggregate(transactions, month))
        except Exception:
            logger.exception("Error calculating budget alerts for %s", month)
            return BudgetAlerts.empty()

        return BudgetAlerts(
            category_alerts=category_alerts,
            total_alert=total_alert,
            summary=summarize(category_alerts, total_alert),
        )

    async def get_alert_summary(self, month: Optional[str] = None) -> AlertSummary:
        alerts = await self.calculate_budget_alerts(month)
        return alerts.summary

    async def on_expense_recorded(self, transaction: Transaction) -> Optional[BudgetAlerts]:
        """Recompute the transaction's month and notify on critical/exceeded alerts.

        Every call re-notifies; there is no memory of what was already sent.
        Never raises, the write that triggered it must not be blocked.
        """
        if not transaction.is_expense:
            return None
        try:
            alerts = await self.calculate_budget_alerts(month_key(transaction.date))
            for alert in alerts.all_alerts:
                severity = notification_severity(alert.level)
                if severity is not None:
                    self.channel.emit(alert.message, severity)
            return alerts
        except Exception:
            logger.exception("Error triggering alert notifications for transaction %s", transaction.id)
            return None

    async def check_threshold_crossing(self, transaction: Transaction) -> Optional[BudgetAlerts]:
        """Snapshot the month's alerts, then schedule notifications after ``delay``.

        The scheduled recomputation is fire-and-forget; use ``drain`` to wait for it.
        """
        try:
            before = await self.calculate_budget_alerts(month_key(transaction.date))
        except Exception:
            logger.exception("Error checking threshold crossing for transaction %s", transaction.id)
            return None

        task = asyncio.create_task(self._delayed_notify(transaction))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return before

    async def _delayed_notify(self, transaction: Transaction) -> None:
        await asyncio.sleep(self.delay)
        await self.on_expense_recorded(transaction)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        while True:
            pending = [t for t in self._pending if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending)
