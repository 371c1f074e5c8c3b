import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from budgetwatch.classifier import find_budget
from budgetwatch.dates import parse_date, parse_month
from budgetwatch.domain import Budget, Transaction, TransactionType
from budgetwatch.exceptions import ValidationError
from budgetwatch.functional import Either, Left, Right
from budgetwatch.stores import RecordStore

logger = logging.getLogger(__name__)

ExpenseHook = Callable[[Transaction], Awaitable[Any]]


def _check_type(fields: dict) -> Either[dict, dict]:
    try:
        return Right({**fields, "type": TransactionType(fields.get("type"))})
    except ValueError:
        return Left({
            "error": "invalid_type",
            "message": f"Transaction type must be income or expense, got {fields.get('type')!r}",
        })


def _check_amount(fields: dict) -> Either[dict, dict]:
    try:
        amount = float(fields.get("amount"))
    except (TypeError, ValueError):
        amount = 0.0
    if not amount > 0:
        return Left({
            "error": "invalid_amount",
            "message": "Amount must be a positive number",
            "amount": fields.get("amount"),
        })
    return Right({**fields, "amount": amount})


def _check_category(fields: dict) -> Either[dict, dict]:
    if not fields.get("category"):
        return Left({"error": "missing_category", "message": "Category is required"})
    return Right(fields)


def _check_date(fields: dict) -> Either[dict, dict]:
    tx_date = parse_date(fields.get("date"))
    if tx_date is None:
        return Left({
            "error": "invalid_date",
            "message": f"Invalid transaction date {fields.get('date')!r}",
        })
    return Right({**fields, "date": tx_date})


def validate_transaction(data: Dict[str, Any]) -> Either[dict, dict]:
    """Normalize raw transaction fields, or describe the first problem found."""
    return (
        Right(dict(data))
        .bind(_check_type)
        .bind(_check_amount)
        .bind(_check_category)
        .bind(_check_date)
        .bind(lambda f: Right({
            "type": f["type"],
            "amount": f["amount"],
            "category": f["category"],
            "date": f["date"],
            "description": f.get("description") or "",
        }))
    )


def _unwrap(result: Either[dict, dict]) -> dict:
    if result.is_left():
        raise ValidationError(result.error["message"], error_code=result.error["error"])
    return result.value


class TransactionService:
    """Transaction writes with an injected hook run after every expense write."""

    def __init__(self, store: RecordStore[Transaction], on_expense: Optional[ExpenseHook] = None):
        self.store = store
        self.on_expense = on_expense

    async def get_all(self) -> Tuple[Transaction, ...]:
        return await self.store.get_all()

    async def get_by_id(self, transaction_id: int) -> Transaction:
        return await self.store.get_by_id(transaction_id)

    async def create(self, data: Dict[str, Any]) -> Transaction:
        fields = _unwrap(validate_transaction(data))
        transaction = await self.store.create(**fields)
        await self._after_write(transaction)
        return transaction

    async def update(self, transaction_id: int, data: Dict[str, Any]) -> Transaction:
        current = await self.store.get_by_id(transaction_id)
        merged = {
            "type": current.type,
            "amount": current.amount,
            "category": current.category,
            "date": current.date,
            "description": current.description,
            **data,
        }
        fields = _unwrap(validate_transaction(merged))
        transaction = await self.store.update(transaction_id, **fields)
        await self._after_write(transaction)
        return transaction

    async def delete(self, transaction_id: int) -> None:
        await self.store.delete(transaction_id)

    async def _after_write(self, transaction: Transaction) -> None:
        if self.on_expense is None or not transaction.is_expense:
            return
        try:
            await self.on_expense(transaction)
        except Exception:
            logger.exception("Expense hook failed for transaction %s", transaction.id)


class BudgetService:
    def __init__(self, store: RecordStore[Budget]):
        self.store = store

    async def get_all(self) -> Tuple[Budget, ...]:
        return await self.store.get_all()

    async def get_for_month(self, month: str) -> Optional[Budget]:
        budgets = await self.store.get_all()
        return find_budget(budgets, month).get_or_else(None)

    async def save(self, month: str, total_limit: float, category_limits: Dict[str, float]) -> Budget:
        """Create the month's budget, or update it in place when one exists."""
        start = parse_month(month)
        if start is None:
            raise ValidationError(f"Invalid month: {month}", error_code="invalid_month")
        try:
            total_limit = float(total_limit)
        except (TypeError, ValueError):
            total_limit = 0.0
        if not total_limit > 0:
            raise ValidationError("Please enter a valid total budget limit", error_code="invalid_total_limit")

        fields = {
            "month": month,
            "year": start.year,
            "total_limit": total_limit,
            "category_limits": dict(category_limits),
        }
        existing = await self.get_for_month(month)
        if existing is None:
            return await self.store.create(**fields)
        return await self.store.update(existing.id, **fields)

    async def delete(self, budget_id: int) -> None:
        await self.store.delete(budget_id)
