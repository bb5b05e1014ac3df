'''
    File Name: repositories.py
    Version: 1.0.0
    Date: 12/01/2026
    Author: Pablo Bartolomé Molina
'''
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Generic, List, Optional, TypeVar

from models.category import Category
from models.establishment import Establishment
from models.group import Group, Subgroup
from models.transaction import Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EntityRepository(Generic[T]):
    """Typed access to one entity collection of one user.

    The whole collection lives as a JSON array under the key
    "{entity}_{user_email}" of the key-value store.
    """

    entity: str = ""
    model: Any = None

    def __init__(self, store, user_email: str):
        if not user_email:
            raise ValueError("A user email is required to scope storage")
        self.store = store
        self.user_email = user_email

    @property
    def key(self) -> str:
        return f"{self.entity}_{self.user_email}"

    def load(self) -> List[T]:
        """Return every stored record; malformed rows are logged and skipped."""
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            rows = json.loads(raw)
        except (TypeError, ValueError):
            logger.exception("Stored %s for %s is not valid JSON", self.entity, self.user_email)
            return []
        if not isinstance(rows, list):
            logger.warning("Stored %s for %s is not a list; ignoring", self.entity, self.user_email)
            return []
        items: List[T] = []
        for row in rows:
            if not isinstance(row, dict):
                logger.warning("Skipping malformed %s row: %r", self.entity, row)
                continue
            items.append(self.model.from_dict(row))
        return items

    def save(self, items: List[T]) -> bool:
        payload = json.dumps([item.to_dict() for item in items], ensure_ascii=False)
        return self.store.set(self.key, payload)

    def get(self, item_id: str) -> Optional[T]:
        for item in self.load():
            if item.id == item_id:
                return item
        return None

    def add(self, item: T) -> bool:
        items = self.load()
        items.append(item)
        return self.save(items)

    def update(self, item: T) -> bool:
        """Replace the stored record with the same id. Returns False if it does not exist."""
        items = self.load()
        for idx, existing in enumerate(items):
            if existing.id == item.id:
                items[idx] = item.touched()
                return self.save(items)
        return False

    def delete(self, item_id: str) -> bool:
        items = self.load()
        kept = [item for item in items if item.id != item_id]
        if len(kept) == len(items):
            return False
        return self.save(kept)

    def clear(self) -> int:
        return self.store.remove([self.key])


class TransactionRepository(EntityRepository[Transaction]):
    entity = "transactions"
    model = Transaction


class CategoryRepository(EntityRepository[Category]):
    entity = "categories"
    model = Category


class GroupRepository(EntityRepository[Group]):
    entity = "groups"
    model = Group


class SubgroupRepository(EntityRepository[Subgroup]):
    entity = "subgroups"
    model = Subgroup


class EstablishmentRepository(EntityRepository[Establishment]):
    entity = "establishments"
    model = Establishment


@dataclass(frozen=True)
class Snapshot:
    """All collections of one user, read together before any computation."""
    transactions: List[Transaction] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)
    subgroups: List[Subgroup] = field(default_factory=list)
    establishments: List[Establishment] = field(default_factory=list)


class UserRepositories:
    """The repositories of one user, sharing a single store."""

    def __init__(self, store, user_email: str):
        self.store = store
        self.user_email = user_email
        self.transactions = TransactionRepository(store, user_email)
        self.categories = CategoryRepository(store, user_email)
        self.groups = GroupRepository(store, user_email)
        self.subgroups = SubgroupRepository(store, user_email)
        self.establishments = EstablishmentRepository(store, user_email)

    def all(self) -> List[EntityRepository]:
        return [self.transactions, self.categories, self.groups, self.subgroups, self.establishments]

    def storage_keys(self) -> List[str]:
        return [repo.key for repo in self.all()]

    def stored_keys(self) -> List[str]:
        """The user's keys that currently hold data, in `storage_keys()` order."""
        present = set(self.store.keys())
        return [key for key in self.storage_keys() if key in present]

    def load_snapshot(self) -> Snapshot:
        snapshot = Snapshot(
            transactions=self.transactions.load(),
            categories=self.categories.load(),
            groups=self.groups.load(),
            subgroups=self.subgroups.load(),
            establishments=self.establishments.load(),
        )
        logger.debug(
            "Loaded snapshot for %s: %d transactions, %d categories, %d establishments",
            self.user_email, len(snapshot.transactions), len(snapshot.categories), len(snapshot.establishments),
        )
        return snapshot
