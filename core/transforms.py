import json
from dataclasses import replace
from datetime import date, datetime, time
from typing import Any, Callable, Iterable, Optional, Tuple, TypeVar

from core.domain import Budget, Transaction

R = TypeVar("R", Transaction, Budget)


def _first(d: dict, *keys: str) -> Any:
    for k in keys:
        if d.get(k) is not None:
            return d[k]
    return None


def _timestamp(value: Any, fallback: datetime) -> datetime:
    if isinstance(value, str) and value:
        # "Z" suffix as written by JavaScript's toISOString()
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if not isinstance(value, datetime):
        return fallback
    # timestamps are kept naive local time throughout
    if value.tzinfo is not None:
        value = value.astimezone().replace(tzinfo=None)
    return value


def transaction_from_dict(d: dict) -> Transaction:
    day = d["date"] if isinstance(d["date"], date) else date.fromisoformat(str(d["date"])[:10])
    fallback = datetime.combine(day, time())
    return Transaction(
        id=str(_first(d, "id", "_id")),
        amount=float(d["amount"]),
        date=day,
        description=d.get("description", ""),
        type=d["type"],
        category=d["category"],
        created_at=_timestamp(_first(d, "created_at", "createdAt"), fallback),
        updated_at=_timestamp(_first(d, "updated_at", "updatedAt"), fallback),
    )


def budget_from_dict(d: dict) -> Budget:
    year = int(d["year"])
    month = f"{int(d['month']):02d}"
    fallback = datetime(year, int(month), 1)
    return Budget(
        id=str(_first(d, "id", "_id")),
        category=d["category"],
        amount=float(d["amount"]),
        month=month,
        year=year,
        created_at=_timestamp(_first(d, "created_at", "createdAt"), fallback),
        updated_at=_timestamp(_first(d, "updated_at", "updatedAt"), fallback),
    )


def transaction_to_dict(t: Transaction) -> dict:
    return {
        "id": t.id,
        "amount": t.amount,
        "date": t.date.isoformat(),
        "description": t.description,
        "type": t.type,
        "category": t.category,
        "created_at": t.created_at.isoformat(),
        "updated_at": t.updated_at.isoformat(),
    }


def budget_to_dict(b: Budget) -> dict:
    return {
        "id": b.id,
        "category": b.category,
        "amount": b.amount,
        "month": b.month,
        "year": b.year,
        "created_at": b.created_at.isoformat(),
        "updated_at": b.updated_at.isoformat(),
    }


def load_records(data: dict) -> Tuple[Tuple[Transaction, ...], Tuple[Budget, ...]]:
    transactions = tuple(transaction_from_dict(t) for t in data.get("transactions", []))
    budgets = tuple(budget_from_dict(b) for b in data.get("budgets", []))
    return transactions, budgets


def dump_records(trans: Tuple[Transaction, ...], budgets: Tuple[Budget, ...]) -> dict:
    return {
        "transactions": [transaction_to_dict(t) for t in trans],
        "budgets": [budget_to_dict(b) for b in budgets],
    }


def load_seed(path: str) -> Tuple[Tuple[Transaction, ...], Tuple[Budget, ...]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return load_records(data)


def add_record(records: Tuple[R, ...], r: R) -> Tuple[R, ...]:
    return records + (r,)


def replace_record(records: Tuple[R, ...], rid: str, update: Callable[[R], R]) -> Tuple[R, ...]:
    return tuple(update(r) if r.id == rid else r for r in records)


def remove_record(records: Tuple[R, ...], rid: str) -> Tuple[R, ...]:
    return tuple(filter(lambda r: r.id != rid, records))


def with_fields(record: R, fields: dict, updated_at: datetime) -> R:
    return replace(record, **fields, updated_at=updated_at)


SORT_BY_DATE = "date"
SORT_BY_AMOUNT = "amount"
SORT_KEYS = (SORT_BY_DATE, SORT_BY_AMOUNT)


def by_type(type: Optional[str]) -> Callable[[Transaction], bool]:
    # None matches every transaction
    return lambda t: type is None or t.type == type


def matching(query: str) -> Callable[[Transaction], bool]:
    needle = query.strip().lower()
    return lambda t: needle in t.description.lower()


def browse_transactions(
    trans: Iterable[Transaction],
    query: str = "",
    type: Optional[str] = None,
    sort_by: str = SORT_BY_DATE,
) -> Tuple[Transaction, ...]:
    """Search descriptions, keep one type and sort for the transaction list.

    Sorting is newest date first or largest amount first; ties keep their
    incoming order.
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {sort_by}")
    is_type, has_text = by_type(type), matching(query)
    found = filter(lambda t: is_type(t) and has_text(t), trans)
    key = (lambda t: t.date) if sort_by == SORT_BY_DATE else (lambda t: t.amount)
    return tuple(sorted(found, key=key, reverse=True))
