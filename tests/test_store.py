import json
from datetime import date, datetime
from itertools import count

import pytest

from core.config import Settings
from core.errors import RecordNotFoundError, StorageError, ValidationError
from core.store import InMemoryStore, JsonFileStore, build_store


class Clock:
    """Returns a later timestamp on every call."""

    def __init__(self, start=datetime(2025, 3, 10, 9, 0)):
        self.ticks = count()
        self.start = start

    def __call__(self):
        return self.start.replace(minute=next(self.ticks))


def ids():
    n = count(1)
    return lambda: f"id{next(n)}"


def make_store(**kwargs):
    return InMemoryStore(now=Clock(), new_id=ids(), **kwargs)


def tx_input(**overrides):
    data = {"amount": 25.0, "date": "2025-03-05", "description": "Lunch", "type": "expense", "category": "Food"}
    data.update(overrides)
    return data


def budget_input(**overrides):
    data = {"category": "Food", "amount": 300, "month": "03", "year": 2025}
    data.update(overrides)
    return data


def test_add_and_get_transaction():
    store = make_store()
    t = store.add_transaction(tx_input())
    assert t.id == "id1"
    assert t.amount == 25.0
    assert t.date == date(2025, 3, 5)
    assert t.created_at == t.updated_at
    assert store.get_transaction("id1") == t
    assert store.find_transaction("id1").is_some()


def test_list_transactions_newest_first():
    store = make_store()
    store.add_transaction(tx_input(description="first"))
    store.add_transaction(tx_input(description="second"))
    store.add_transaction(tx_input(description="third"))
    assert [t.description for t in store.list_transactions()] == ["third", "second", "first"]


def test_invalid_transaction_is_rejected():
    store = make_store()
    with pytest.raises(ValidationError) as exc:
        store.add_transaction(tx_input(amount=0, date="2025-04-01"))
    assert set(exc.value.errors) == {"amount", "date"}
    assert store.list_transactions() == ()


def test_update_transaction_keeps_id_and_created_at():
    store = make_store()
    t = store.add_transaction(tx_input())
    updated = store.update_transaction(t.id, tx_input(amount=40.0, category="Transport"))
    assert updated.id == t.id
    assert updated.created_at == t.created_at
    assert updated.updated_at > t.updated_at
    assert updated.amount == 40.0
    assert updated.category == "Transport"


def test_update_with_bad_input_leaves_record_alone():
    store = make_store()
    t = store.add_transaction(tx_input())
    with pytest.raises(ValidationError):
        store.update_transaction(t.id, tx_input(type="gift"))
    assert store.get_transaction(t.id) == t


def test_missing_transaction():
    store = make_store()
    assert store.find_transaction("nope").is_none()
    with pytest.raises(RecordNotFoundError) as exc:
        store.get_transaction("nope")
    assert str(exc.value) == "Transaction not found: nope"
    with pytest.raises(RecordNotFoundError):
        store.update_transaction("nope", tx_input())
    with pytest.raises(RecordNotFoundError):
        store.delete_transaction("nope")


def test_delete_transaction_returns_removed_record():
    store = make_store()
    t = store.add_transaction(tx_input())
    assert store.delete_transaction(t.id) == t
    assert store.list_transactions() == ()


def test_snapshot_is_not_affected_by_later_writes():
    store = make_store()
    store.add_transaction(tx_input())
    trans, budgets = store.snapshot()
    store.add_transaction(tx_input(description="later"))
    store.add_budget(budget_input())
    assert len(trans) == 1
    assert budgets == ()


def test_budget_crud():
    store = make_store()
    b = store.add_budget(budget_input(month=3, year="2025"))
    assert b.month == "03"
    assert b.year == 2025
    assert store.list_budgets() == (b,)

    updated = store.update_budget(b.id, budget_input(amount=450))
    assert updated.amount == 450.0
    assert updated.created_at == b.created_at

    assert store.delete_budget(b.id) == updated
    with pytest.raises(RecordNotFoundError) as exc:
        store.get_budget(b.id)
    assert exc.value.kind == "budget"


def test_invalid_budget_is_rejected():
    store = make_store()
    with pytest.raises(ValidationError) as exc:
        store.add_budget(budget_input(month="13", amount=-1))
    assert exc.value.errors == {
        "month": "Month must be between 01 and 12",
        "amount": "Amount must be positive",
    }


def test_json_store_persists_writes(tmp_path):
    path = tmp_path / "finance.json"
    store = JsonFileStore(path, now=Clock(), new_id=ids())
    t = store.add_transaction(tx_input())
    store.add_budget(budget_input())

    data = json.loads(path.read_text(encoding="utf-8"))
    assert [r["id"] for r in data["transactions"]] == [t.id]
    assert data["budgets"][0]["month"] == "03"

    reopened = JsonFileStore(path)
    assert reopened.get_transaction(t.id) == t
    assert len(reopened.list_budgets()) == 1


def test_json_store_starts_from_seed(tmp_path):
    seed = tmp_path / "seed.json"
    seed.write_text(json.dumps({"transactions": [], "budgets": [
        {"id": "b1", "category": "Food", "amount": 100, "month": "10", "year": 2026},
    ]}), encoding="utf-8")
    store = JsonFileStore(tmp_path / "data" / "finance.json", seed_file=seed)
    assert [b.id for b in store.list_budgets()] == ["b1"]
    assert not (tmp_path / "data" / "finance.json").exists()


def test_json_store_with_broken_file(tmp_path):
    path = tmp_path / "finance.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(StorageError):
        JsonFileStore(path)


def test_build_store_memory_from_seed(tmp_path):
    seed = tmp_path / "seed.json"
    seed.write_text(json.dumps({"transactions": [
        {"id": "t1", "amount": 5, "date": "2025-01-02", "description": "Tea", "type": "expense", "category": "Food"},
    ]}), encoding="utf-8")
    store = build_store(Settings(store_backend="memory", seed_file=str(seed)))
    assert isinstance(store, InMemoryStore)
    assert not isinstance(store, JsonFileStore)
    assert [t.id for t in store.list_transactions()] == ["t1"]


def test_build_store_memory_without_seed(tmp_path):
    store = build_store(Settings(store_backend="memory", seed_file=str(tmp_path / "missing.json")))
    assert store.snapshot() == ((), ())


def test_build_store_json(tmp_path):
    settings = Settings(
        store_backend="json",
        data_file=str(tmp_path / "finance.json"),
        seed_file=str(tmp_path / "missing.json"),
    )
    assert isinstance(build_store(settings), JsonFileStore)


def test_json_store_failed_write_keeps_memory_unchanged(tmp_path):
    path = tmp_path / "finance.json"
    store = JsonFileStore(path, now=Clock(), new_id=ids())
    path.mkdir()
    with pytest.raises(StorageError):
        store.add_transaction(tx_input())
    with pytest.raises(StorageError):
        store.add_budget(budget_input())
    assert store.snapshot() == ((), ())


def test_json_store_failed_update_and_delete_keep_records(tmp_path):
    path = tmp_path / "finance.json"
    store = JsonFileStore(path, now=Clock(), new_id=ids())
    t = store.add_transaction(tx_input())
    b = store.add_budget(budget_input())
    path.unlink()
    path.mkdir()

    with pytest.raises(StorageError):
        store.update_transaction(t.id, tx_input(amount=99.0))
    with pytest.raises(StorageError):
        store.delete_budget(b.id)
    assert store.get_transaction(t.id) == t
    assert store.list_budgets() == (b,)
