'''
    File Name: test_db.py
    Version: 3.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
import json

import pytest

from database.db_manager import DatabaseManager
from database.repositories import (
    CategoryRepository,
    Snapshot,
    TransactionRepository,
    UserRepositories,
)
from models.category import Category
from models.establishment import Establishment
from models.group import Group, Subgroup
from models.transaction import Transaction

EMAIL = "ana@example.com"


@pytest.fixture
def dm(tmp_path):
    manager = DatabaseManager(tmp_path / "test.db")
    manager.ensure_database()
    return manager


def test_ensure_and_get_missing(tmp_path):
    db_path = tmp_path / "test.db"
    dm = DatabaseManager(db_path)
    dm.ensure_database()
    dm.ensure_database()
    assert db_path.exists()
    assert dm.get("nothing") is None
    assert dm.keys() == []


def test_set_get_overwrite(dm):
    assert dm.set("k", "one")
    assert dm.get("k") == "one"
    assert dm.set("k", "two")
    assert dm.get("k") == "two"
    assert dm.keys() == ["k"]


def test_remove_and_keys_prefix(dm):
    dm.set("transactions_a@x", "[]")
    dm.set("categories_a@x", "[]")
    dm.set("transactions_b@x", "[]")
    assert dm.keys("transactions_") == ["transactions_a@x", "transactions_b@x"]
    assert dm.remove(["transactions_a@x", "missing"]) == 1
    assert dm.remove([]) == 0
    assert dm.get("transactions_a@x") is None
    assert dm.get("categories_a@x") == "[]"


def test_get_without_schema_returns_none(tmp_path):
    dm = DatabaseManager(tmp_path / "empty.db")
    assert dm.get("k") is None
    assert dm.set("k", "v") is False


def test_repository_key_is_scoped_per_user(dm):
    repo = TransactionRepository(dm, EMAIL)
    assert repo.key == f"transactions_{EMAIL}"
    with pytest.raises(ValueError):
        TransactionRepository(dm, "")


def test_transaction_crud(dm):
    repo = TransactionRepository(dm, EMAIL)
    tx = Transaction(id="1", type="expense", amount=12.5, date="2024-03-01", category_id="c1", description="Lunch")
    assert repo.load() == []
    assert repo.add(tx)

    stored = json.loads(dm.get(repo.key))
    assert stored[0]["categoryId"] == "c1"
    assert stored[0]["establishmentId"] == ""
    assert stored[0]["groupId"] == ""

    loaded = repo.load()
    assert len(loaded) == 1
    assert loaded[0].description == "Lunch"
    assert loaded[0].amount == 12.5

    edited = Transaction(id="1", type="expense", amount="20", date="2024-03-02")
    assert repo.update(edited)
    fetched = repo.get("1")
    assert fetched.amount == "20"
    assert fetched.updated_at != ""

    assert not repo.update(Transaction(id="nope", type="income", amount=1, date="2024-01-01"))
    assert repo.delete("1")
    assert not repo.delete("1")
    assert repo.load() == []


def test_users_do_not_see_each_other(dm):
    TransactionRepository(dm, "a@x").add(Transaction(id="1", type="income", amount=1, date="2024-01-01"))
    assert TransactionRepository(dm, "b@x").load() == []


def test_load_skips_malformed_rows(dm):
    repo = CategoryRepository(dm, EMAIL)
    dm.set(repo.key, json.dumps([{"id": "c1", "description": "Food"}, "garbage", 3]))
    assert [c.description for c in repo.load()] == ["Food"]

    dm.set(repo.key, "{not json")
    assert repo.load() == []

    dm.set(repo.key, json.dumps({"id": "c1"}))
    assert repo.load() == []


def test_from_dict_tolerates_missing_fields():
    tx = Transaction.from_dict({"id": 7, "type": "income", "amount": "3", "date": "2024-01-01", "categoryId": ""})
    assert tx.id == "7"
    assert tx.category_id is None
    assert tx.establishment_id is None
    assert tx.description == ""
    assert tx.frequency == "variable"
    assert Category.from_dict({"id": "c", "name": "Legacy"}).description == "Legacy"


def test_transaction_validate():
    ok = Transaction(id="1", type="expense", amount=10, date="2024-03-01")
    assert ok.validate() == []
    bad = Transaction(id="2", type="gift", amount="x", date="03/01/2024", frequency="daily")
    assert len(bad.validate()) == 4
    assert Transaction(id="3", type="income", amount=0, date="2024-03-01").validate()


def test_validate_shares_the_engine_amount_policy():
    def amount_ok(value):
        return Transaction(id="1", type="expense", amount=value, date="2024-03-01").validate() == []

    assert amount_ok("12,50")
    assert amount_ok("12.50")
    assert not amount_ok("inf")
    assert not amount_ok(float("nan"))
    assert not amount_ok(-3)
    assert not amount_ok(True)
    assert Transaction.from_dict(
        Transaction(id="2", type="income", amount=1, date="2024-03-01").to_dict()
    ).establishment_id is None


def test_load_snapshot(dm):
    repos = UserRepositories(dm, EMAIL)
    repos.transactions.add(Transaction(id="t1", type="income", amount=100, date="2024-03-01"))
    repos.categories.add(Category(id="c1", description="Food"))
    repos.groups.add(Group(id="g1", name="Home", category_id="c1"))
    repos.subgroups.add(Subgroup(id="s1", name="Market", group_id="g1"))
    repos.establishments.add(Establishment(id="e1", name="Shop"))

    snap = repos.load_snapshot()
    assert isinstance(snap, Snapshot)
    assert [t.id for t in snap.transactions] == ["t1"]
    assert snap.groups[0].category_id == "c1"
    assert snap.subgroups[0].group_id == "g1"
    assert snap.establishments[0].name == "Shop"
    assert repos.storage_keys() == [
        f"transactions_{EMAIL}",
        f"categories_{EMAIL}",
        f"groups_{EMAIL}",
        f"subgroups_{EMAIL}",
        f"establishments_{EMAIL}",
    ]


def test_stored_keys_lists_only_present_user_keys(dm):
    repos = UserRepositories(dm, EMAIL)
    assert repos.stored_keys() == []
    repos.establishments.add(Establishment(id="e1", name="Shop"))
    repos.transactions.add(Transaction(id="t1", type="income", amount=1, date="2024-03-01"))
    dm.set("transactions_other@x", "[]")
    assert repos.stored_keys() == [f"transactions_{EMAIL}", f"establishments_{EMAIL}"]
