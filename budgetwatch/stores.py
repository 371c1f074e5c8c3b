import asyncio
import dataclasses
import json
import logging
from pathlib import Path
from typing import Callable, Generic, Iterable, NamedTuple, Protocol, Tuple, TypeVar, Union

from budgetwatch.dates import parse_date
from budgetwatch.domain import Budget, Transaction, TransactionType
from budgetwatch.exceptions import NotFoundError, StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RecordStore(Protocol[T]):
    async def get_all(self) -> Tuple[T, ...]:
        ...

    async def get_by_id(self, record_id: int) -> T:
        ...

    async def create(self, **fields) -> T:
        ...

    async def update(self, record_id: int, **changes) -> T:
        ...

    async def delete(self, record_id: int) -> None:
        ...


class InMemoryRecordStore(Generic[T]):
    """Record store over an immutable tuple of frozen dataclass records.

    Every write swaps in a new tuple, so a caller holding the result of
    ``get_all`` keeps a consistent snapshot.
    """

    def __init__(self, factory: Callable[..., T], records: Iterable[T] = (), latency: float = 0.0):
        self._factory = factory
        self._records: Tuple[T, ...] = tuple(records)
        self._latency = latency

    async def _delay(self) -> None:
        await asyncio.sleep(self._latency)

    def _index_of(self, record_id: int) -> int:
        for i, r in enumerate(self._records):
            if r.id == record_id:
                return i
        raise NotFoundError(f"{self._factory.__name__} not found", details=f"id={record_id}")

    async def get_all(self) -> Tuple[T, ...]:
        await self._delay()
        return self._records

    async def get_by_id(self, record_id: int) -> T:
        await self._delay()
        return self._records[self._index_of(int(record_id))]

    async def create(self, **fields) -> T:
        await self._delay()
        next_id = max((r.id for r in self._records), default=0) + 1
        fields.pop("id", None)
        record = self._factory(id=next_id, **fields)
        self._records = self._records + (record,)
        logger.debug("Created %s %s", self._factory.__name__, next_id)
        return record

    async def update(self, record_id: int, **changes) -> T:
        await self._delay()
        record_id = int(record_id)
        i = self._index_of(record_id)
        changes.pop("id", None)
        record = dataclasses.replace(self._records[i], **changes)
        self._records = self._records[:i] + (record,) + self._records[i + 1:]
        return record

    async def delete(self, record_id: int) -> None:
        await self._delay()
        i = self._index_of(int(record_id))
        self._records = self._records[:i] + self._records[i + 1:]


class SeedData(NamedTuple):
    transactions: Tuple[Transaction, ...]
    budgets: Tuple[Budget, ...]


def transaction_from_dict(data: dict) -> Transaction:
    tx_date = parse_date(data["date"])
    if tx_date is None:
        raise ValueError(f"Invalid transaction date: {data['date']!r}")
    return Transaction(
        id=int(data["id"]),
        type=TransactionType(data["type"]),
        amount=float(data["amount"]),
        category=data["category"],
        date=tx_date,
        description=data.get("description", ""),
    )


def budget_from_dict(data: dict) -> Budget:
    month = data["month"]
    return Budget(
        id=int(data["id"]),
        month=month,
        year=int(data.get("year") or month[:4]),
        total_limit=float(data["totalLimit"]),
        category_limits=dict(data.get("categoryLimits", {})),
    )


def load_seed(path: Union[str, Path]) -> SeedData:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        transactions = tuple(transaction_from_dict(t) for t in data.get("transactions", []))
        budgets = tuple(budget_from_dict(b) for b in data.get("budgets", []))
    except (OSError, ValueError, KeyError) as e:
        raise StoreError(f"Could not load seed data from {path}", details=str(e)) from e

    logger.info("Loaded %d transactions and %d budgets from %s", len(transactions), len(budgets), path)
    return SeedData(transactions=transactions, budgets=budgets)
