from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Optional, Tuple


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class AlertLevel(str, Enum):
    """Severity of a spend-to-limit ratio, ordered safe < warning < critical < exceeded."""

    SAFE = "safe"
    WARNING = "warning"
    CRITICAL = "critical"
    EXCEEDED = "exceeded"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    def __lt__(self, other):
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, AlertLevel):
            return NotImplemented
        return self.rank >= other.rank


_LEVEL_RANK = {
    AlertLevel.SAFE: 0,
    AlertLevel.WARNING: 1,
    AlertLevel.CRITICAL: 2,
    AlertLevel.EXCEEDED: 3,
}


@dataclass(frozen=True)
class Transaction:
    id: int
    type: TransactionType
    amount: float        # always positive, sign comes from type
    category: str        # joins to budget.category_limits by exact name
    date: date
    description: str = ""

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


@dataclass(frozen=True)
class Budget:
    id: int
    month: str           # 'YYYY-MM'
    year: int
    total_limit: float
    category_limits: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class CategoryAlert:
    category: str
    budget_limit: float
    spent: float
    percentage: float
    level: AlertLevel
    message: Optional[str]


# Same shape as a category alert, reported under the "Total" category.
TotalAlert = CategoryAlert


@dataclass(frozen=True)
class AlertSummary:
    safe: int = 0
    warning: int = 0
    critical: int = 0
    exceeded: int = 0
    total_alerts: int = 0
    critical_alerts: int = 0

    @property
    def counts(self) -> Dict[str, int]:
        return {
            AlertLevel.SAFE.value: self.safe,
            AlertLevel.WARNING.value: self.warning,
            AlertLevel.CRITICAL.value: self.critical,
            AlertLevel.EXCEEDED.value: self.exceeded,
        }

    def to_dict(self) -> dict:
        return {
            "total_alerts": self.total_alerts,
            "critical_alerts": self.critical_alerts,
            **self.counts,
        }


@dataclass(frozen=True)
class BudgetAlerts:
    category_alerts: Tuple[CategoryAlert, ...]
    total_alert: Optional[TotalAlert]
    summary: AlertSummary

    @classmethod
    def empty(cls) -> "BudgetAlerts":
        return cls(category_alerts=(), total_alert=None, summary=AlertSummary())

    @property
    def all_alerts(self) -> Tuple[CategoryAlert, ...]:
        if self.total_alert is None:
            return self.category_alerts
        return self.category_alerts + (self.total_alert,)


@dataclass(frozen=True)
class MonthlySpend:
    month: str
    per_category: Dict[str, float]
    total: float


@dataclass(frozen=True)
class MonthlyOverview:
    month: str
    income: float
    expenses: float
    net: float
    budget_limit: float
    remaining_budget: float


@dataclass(frozen=True)
class Notification:
    message: str
    severity: str        # 'warning' | 'error'
