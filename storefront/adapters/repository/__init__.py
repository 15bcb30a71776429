"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryAccountRepository, InMemoryProductRepository
from .postgres import PostgresAccountRepository, PostgresProductRepository, run_migrations

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryProductRepository",
    "PostgresAccountRepository",
    "PostgresProductRepository",
    "run_migrations",
]
