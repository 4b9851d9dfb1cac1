"""Record stores for transactions and budgets.

Every write validates its input first (``core.validation``) and raises
``ValidationError`` on bad fields or ``RecordNotFoundError`` on unknown ids.
Reads hand out immutable tuples, so a caller always sees a consistent
snapshot even if the store is written to afterwards.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Tuple
from uuid import uuid4

from core.config import Settings
from core.domain import Budget, Transaction
from core.errors import RecordNotFoundError, StorageError, ValidationError
from core.functional import Maybe, maybe
from core.logging import get_logger
from core.transforms import (
    add_record,
    dump_records,
    load_seed,
    remove_record,
    replace_record,
    with_fields,
)
from core.validation import validate_budget, validate_transaction

log = get_logger(__name__)

TRANSACTION = "transaction"
BUDGET = "budget"


class RecordStore(ABC):

    @abstractmethod
    def add_transaction(self, data: Mapping[str, Any]) -> Transaction: ...

    @abstractmethod
    def find_transaction(self, tid: str) -> Maybe[Transaction]: ...

    @abstractmethod
    def list_transactions(self) -> Tuple[Transaction, ...]: ...

    @abstractmethod
    def update_transaction(self, tid: str, data: Mapping[str, Any]) -> Transaction: ...

    @abstractmethod
    def delete_transaction(self, tid: str) -> Transaction: ...

    @abstractmethod
    def add_budget(self, data: Mapping[str, Any]) -> Budget: ...

    @abstractmethod
    def find_budget(self, bid: str) -> Maybe[Budget]: ...

    @abstractmethod
    def list_budgets(self) -> Tuple[Budget, ...]: ...

    @abstractmethod
    def update_budget(self, bid: str, data: Mapping[str, Any]) -> Budget: ...

    @abstractmethod
    def delete_budget(self, bid: str) -> Budget: ...

    def get_transaction(self, tid: str) -> Transaction:
        found = self.find_transaction(tid)
        if found.is_none():
            raise RecordNotFoundError(TRANSACTION, tid)
        return found.get_or_else(None)

    def get_budget(self, bid: str) -> Budget:
        found = self.find_budget(bid)
        if found.is_none():
            raise RecordNotFoundError(BUDGET, bid)
        return found.get_or_else(None)

    def snapshot(self) -> Tuple[Tuple[Transaction, ...], Tuple[Budget, ...]]:
        return self.list_transactions(), self.list_budgets()


class InMemoryStore(RecordStore):
    """Store backed by two tuples that are swapped out on every write."""

    def __init__(
        self,
        transactions: Tuple[Transaction, ...] = (),
        budgets: Tuple[Budget, ...] = (),
        now: Callable[[], datetime] = datetime.now,
        new_id: Callable[[], str] = lambda: str(uuid4()),
    ):
        self._transactions = tuple(transactions)
        self._budgets = tuple(budgets)
        self._now = now
        self._new_id = new_id

    def _today(self) -> date:
        return self._now().date()

    def _swap(
        self,
        transactions: Optional[Tuple[Transaction, ...]] = None,
        budgets: Optional[Tuple[Budget, ...]] = None,
    ) -> None:
        """Commit the new record tuples, then make them current.

        A failed commit raises before anything is replaced.
        """
        transactions = self._transactions if transactions is None else transactions
        budgets = self._budgets if budgets is None else budgets
        self._commit(transactions, budgets)
        self._transactions, self._budgets = transactions, budgets

    def _commit(self, transactions: Tuple[Transaction, ...], budgets: Tuple[Budget, ...]) -> None:
        """Hook for subclasses that persist after each write."""

    def _stamped(self, record_type, fields: dict):
        ts = self._now()
        return record_type(id=self._new_id(), created_at=ts, updated_at=ts, **fields)

    # transactions

    def add_transaction(self, data: Mapping[str, Any]) -> Transaction:
        t = _checked(validate_transaction(data, self._today()).map(lambda f: self._stamped(Transaction, f)))
        self._swap(transactions=add_record(self._transactions, t))
        log.info("transaction added", extra={"record_id": t.id, "type": t.type, "category": t.category})
        return t

    def find_transaction(self, tid: str) -> Maybe[Transaction]:
        return maybe(next((t for t in self._transactions if t.id == tid), None))

    def list_transactions(self) -> Tuple[Transaction, ...]:
        return tuple(sorted(self._transactions, key=lambda t: t.created_at, reverse=True))

    def update_transaction(self, tid: str, data: Mapping[str, Any]) -> Transaction:
        current = self.get_transaction(tid)
        ts = self._now()
        t = _checked(validate_transaction(data, self._today()).map(lambda f: with_fields(current, f, ts)))
        self._swap(transactions=replace_record(self._transactions, tid, lambda _: t))
        log.info("transaction updated", extra={"record_id": tid})
        return t

    def delete_transaction(self, tid: str) -> Transaction:
        t = self.get_transaction(tid)
        self._swap(transactions=remove_record(self._transactions, tid))
        log.info("transaction deleted", extra={"record_id": tid})
        return t

    # budgets

    def add_budget(self, data: Mapping[str, Any]) -> Budget:
        b = _checked(validate_budget(data).map(lambda f: self._stamped(Budget, f)))
        self._swap(budgets=add_record(self._budgets, b))
        log.info("budget added", extra={"record_id": b.id, "category": b.category})
        return b

    def find_budget(self, bid: str) -> Maybe[Budget]:
        return maybe(next((b for b in self._budgets if b.id == bid), None))

    def list_budgets(self) -> Tuple[Budget, ...]:
        return self._budgets

    def update_budget(self, bid: str, data: Mapping[str, Any]) -> Budget:
        current = self.get_budget(bid)
        ts = self._now()
        b = _checked(validate_budget(data).map(lambda f: with_fields(current, f, ts)))
        self._swap(budgets=replace_record(self._budgets, bid, lambda _: b))
        log.info("budget updated", extra={"record_id": bid})
        return b

    def delete_budget(self, bid: str) -> Budget:
        b = self.get_budget(bid)
        self._swap(budgets=remove_record(self._budgets, bid))
        log.info("budget deleted", extra={"record_id": bid})
        return b


class JsonFileStore(InMemoryStore):
    """In-memory store mirrored to a JSON file after every write.

    The file uses the same layout as the seed data. When it does not exist
    yet the store starts from ``seed_file`` (if given) or empty. A write the
    file cannot take leaves the in-memory records unchanged.
    """

    def __init__(self, path: str | Path, seed_file: Optional[str | Path] = None, **kwargs):
        self.path = Path(path)
        source = self.path if self.path.exists() else (Path(seed_file) if seed_file else None)
        transactions, budgets = (), ()
        if source is not None and source.exists():
            transactions, budgets = _read(source)
        super().__init__(transactions, budgets, **kwargs)

    def _commit(self, transactions: Tuple[Transaction, ...], budgets: Tuple[Budget, ...]) -> None:
        data = dump_records(transactions, budgets)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            log.error("failed to write %s", self.path, exc_info=True)
            raise StorageError(f"Could not write {self.path}: {exc}") from exc


def _checked(result):
    if result.is_left():
        errors = result.get_error()
        log.warning("rejected input", extra={"errors": errors})
        raise ValidationError(errors)
    return result.get_or_else(None)



def _read(path: Path):
    try:
        return load_seed(str(path))
    except (OSError, ValueError, KeyError, TypeError) as exc:
        log.error("failed to read %s", path, exc_info=True)
        raise StorageError(f"Could not read {path}: {exc}") from exc


def build_store(settings: Settings) -> RecordStore:
    if settings.store_backend == "json":
        log.info("using json store", extra={"path": settings.data_file})
        return JsonFileStore(settings.data_file, seed_file=settings.seed_file)

    seed = Path(settings.seed_file)
    if not seed.exists():
        return InMemoryStore()
    transactions, budgets = _read(seed)
    log.info("seeded memory store", extra={"transactions": len(transactions), "budgets": len(budgets)})
    return InMemoryStore(transactions, budgets)
