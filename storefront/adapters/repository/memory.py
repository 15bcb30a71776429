"""
In-memory repository adapters - Implement the repository ports without a database.

Used for local development (STORAGE_BACKEND=memory) and tests. Records are
copied on the way in and out so callers never share mutable state with the
store, mirroring what a real database round-trip gives.
"""

import threading
import uuid
from copy import deepcopy
from dataclasses import replace
from typing import Any

from storefront.domain.exceptions import EmailAlreadyRegistered
from storefront.domain.ports import Account, Product


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with a dict keyed by id.

    A lock makes each operation atomic, and insert enforces email
    uniqueness the same way the database constraint does.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Account | None:
        with self._lock:
            for account in self._accounts.values():
                if account.email == email:
                    return deepcopy(account)
        return None

    def find_by_id(self, account_id: str) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return deepcopy(account) if account is not None else None

    def insert(self, account: Account) -> Account:
        with self._lock:
            if any(existing.email == account.email for existing in self._accounts.values()):
                raise EmailAlreadyRegistered()
            stored = replace(deepcopy(account), id=uuid.uuid4().hex)
            self._accounts[stored.id] = stored
            return deepcopy(stored)

    def update_fields(self, account_id: str, changes: dict[str, Any]) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None
            unknown = [name for name in changes if name == "id" or not hasattr(account, name)]
            if unknown:
                raise ValueError(f"Unknown account columns: {sorted(unknown)}")
            updated = replace(account, **deepcopy(changes))
            self._accounts[account_id] = updated
            return deepcopy(updated)


class InMemoryProductRepository:
    """Implements ProductRepository protocol, preserving insertion order."""

    def __init__(self) -> None:
        self._products: dict[str, Product] = {}
        self._lock = threading.Lock()

    def search(self, query: str) -> list[Product]:
        needle = query.lower()
        with self._lock:
            return [
                deepcopy(product)
                for product in self._products.values()
                if needle in product.name.lower()
            ]

    def get(self, product_id: str) -> Product | None:
        with self._lock:
            product = self._products.get(product_id)
            return deepcopy(product) if product is not None else None

    def insert(self, product: Product) -> Product:
        with self._lock:
            stored = replace(deepcopy(product), id=uuid.uuid4().hex)
            self._products[stored.id] = stored
            return deepcopy(stored)

    def update_fields(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                return None
            updated = replace(product, **deepcopy(changes))
            self._products[product_id] = updated
            return deepcopy(updated)

    def delete(self, product_id: str) -> bool:
        with self._lock:
            return self._products.pop(product_id, None) is not None
