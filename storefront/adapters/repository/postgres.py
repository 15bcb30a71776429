"""
PostgreSQL repository adapters - Implement AccountRepository and ProductRepository.

This module provides the PostgreSQL implementation of the domain's
repository ports using psycopg3 with raw SQL.

Concurrency Design:
-------------------
Registration reads by email and then inserts. Two concurrent registrations
for the same new email both pass the read; the UNIQUE constraint on
accounts.email rejects the second INSERT with UniqueViolation, which is
reported to the domain as EmailAlreadyRegistered (retryable by the client).

Every state transition is a single UPDATE statement, so a reader never
observes a partially applied transition.
"""

import logging
import uuid
from pathlib import Path
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from storefront.domain.exceptions import EmailAlreadyRegistered, StoreError
from storefront.domain.ports import Account, AuthType, Product, Role

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = (
    "email",
    "password_hash",
    "first_name",
    "last_name",
    "is_verified",
    "role",
    "auth_type",
    "otp",
    "otp_expires",
    "reset_otp",
    "reset_otp_expires",
    "dob",
    "gender",
    "experience",
    "profile_image",
)

_PRODUCT_COLUMNS = (
    "name",
    "price",
    "description",
    "image",
    "extra_images",
    "category",
    "sub_category",
)


def _parse_id(value: str) -> uuid.UUID | None:
    """Identifiers are UUIDs; anything else cannot match a row."""
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _db_value(value: Any) -> Any:
    if isinstance(value, (Role, AuthType)):
        return value.value
    return value


def _update_statement(table: str, columns: list[str]) -> sql.Composed:
    assignments = sql.SQL(", ").join(
        sql.SQL("{} = %s").format(sql.Identifier(column)) for column in columns
    )
    return sql.SQL("UPDATE {} SET {} WHERE id = %s RETURNING *").format(
        sql.Identifier(table), assignments
    )


def _row_to_account(row: dict[str, Any]) -> Account:
    return Account(
        id=str(row["id"]),
        email=row["email"],
        password_hash=row["password_hash"],
        first_name=row["first_name"] or "",
        last_name=row["last_name"] or "",
        is_verified=row["is_verified"],
        role=Role(row["role"]),
        auth_type=AuthType(row["auth_type"]),
        otp=row["otp"],
        otp_expires=row["otp_expires"],
        reset_otp=row["reset_otp"],
        reset_otp_expires=row["reset_otp_expires"],
        dob=row["dob"],
        gender=row["gender"],
        experience=row["experience"],
        profile_image=row["profile_image"],
    )


def _row_to_product(row: dict[str, Any]) -> Product:
    return Product(
        id=str(row["id"]),
        name=row["name"],
        price=float(row["price"]),
        description=row["description"] or "",
        image=row["image"],
        extra_images=list(row["extra_images"] or []),
        category=row["category"],
        sub_category=row["sub_category"],
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def find_by_email(self, email: str) -> Account | None:
        return self._fetch_one("SELECT * FROM accounts WHERE email = %s", (email,))

    def find_by_id(self, account_id: str) -> Account | None:
        parsed = _parse_id(account_id)
        if parsed is None:
            return None
        return self._fetch_one("SELECT * FROM accounts WHERE id = %s", (parsed,))

    def insert(self, account: Account) -> Account:
        """
        Insert a new account row.

        Raises:
            EmailAlreadyRegistered: The email UNIQUE constraint rejected the row
            StoreError: Any other database failure
        """
        columns = list(_ACCOUNT_COLUMNS)
        statement = sql.SQL("INSERT INTO accounts ({}) VALUES ({}) RETURNING *").format(
            sql.SQL(", ").join(sql.Identifier(column) for column in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )
        values = [_db_value(getattr(account, column)) for column in columns]

        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(statement, values)
                row = cursor.fetchone()
                conn.commit()
        except psycopg.errors.UniqueViolation:
            logger.info("Insert for %s lost the email uniqueness race", account.email)
            raise EmailAlreadyRegistered() from None
        except psycopg.Error as e:
            logger.error("Account insert failed: %s", e)
            raise StoreError() from e
        return _row_to_account(row)

    def update_fields(self, account_id: str, changes: dict[str, Any]) -> Account | None:
        """
        Overwrite the given columns in one UPDATE statement.

        Column names are checked against the account schema and quoted as
        identifiers; values are always bound parameters.
        """
        parsed = _parse_id(account_id)
        if parsed is None:
            return None
        columns = list(changes)
        unknown = set(columns) - set(_ACCOUNT_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown account columns: {sorted(unknown)}")

        values = [_db_value(changes[column]) for column in columns] + [parsed]
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(_update_statement("accounts", columns), values)
                row = cursor.fetchone()
                conn.commit()
        except psycopg.errors.UniqueViolation:
            raise EmailAlreadyRegistered() from None
        except psycopg.Error as e:
            logger.error("Account update failed: %s", e)
            raise StoreError() from e
        return _row_to_account(row) if row is not None else None

    def _fetch_one(self, query: str, params: tuple) -> Account | None:
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(query, params)
                row = cursor.fetchone()
        except psycopg.Error as e:
            logger.error("Account lookup failed: %s", e)
            raise StoreError() from e
        return _row_to_account(row) if row is not None else None


class PostgresProductRepository:
    """Implements ProductRepository protocol via psycopg3."""

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def search(self, query: str) -> list[Product]:
        # ILIKE with escaped wildcards gives a literal substring match
        pattern = "%" + query.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_") + "%"
        rows = self._execute(
            "SELECT * FROM products WHERE name ILIKE %s ORDER BY created_at, id",
            (pattern,),
            fetch="all",
        )
        return [_row_to_product(row) for row in rows]

    def get(self, product_id: str) -> Product | None:
        parsed = _parse_id(product_id)
        if parsed is None:
            return None
        row = self._execute("SELECT * FROM products WHERE id = %s", (parsed,))
        return _row_to_product(row) if row is not None else None

    def insert(self, product: Product) -> Product:
        columns = list(_PRODUCT_COLUMNS)
        statement = sql.SQL("INSERT INTO products ({}) VALUES ({}) RETURNING *").format(
            sql.SQL(", ").join(sql.Identifier(column) for column in columns),
            sql.SQL(", ").join(sql.Placeholder() for _ in columns),
        )
        row = self._execute(statement, [getattr(product, column) for column in columns], commit=True)
        return _row_to_product(row)

    def update_fields(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        parsed = _parse_id(product_id)
        if parsed is None:
            return None
        columns = list(changes)
        unknown = set(columns) - set(_PRODUCT_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown product columns: {sorted(unknown)}")

        row = self._execute(
            _update_statement("products", columns),
            [changes[column] for column in columns] + [parsed],
            commit=True,
        )
        return _row_to_product(row) if row is not None else None

    def delete(self, product_id: str) -> bool:
        parsed = _parse_id(product_id)
        if parsed is None:
            return False
        row = self._execute(
            "DELETE FROM products WHERE id = %s RETURNING id", (parsed,), commit=True
        )
        return row is not None

    def _execute(self, query, params, fetch: str = "one", commit: bool = False) -> Any:
        try:
            with self._pool.connection() as conn, conn.cursor(row_factory=dict_row) as cursor:
                cursor.execute(query, params)
                result = cursor.fetchall() if fetch == "all" else cursor.fetchone()
                if commit:
                    conn.commit()
        except psycopg.Error as e:
            logger.error("Product query failed: %s", e)
            raise StoreError() from e
        return result


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: storefront/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning(f"Migrations directory not found: {migrations_dir}")
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info(f"Running {len(sql_files)} migration(s)")

    for sql_file in sql_files:
        logger.info(f"Executing migration: {sql_file.name}")
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info(f"Migration complete: {sql_file.name}")
        except Exception as e:
            logger.error(f"Migration failed: {sql_file.name} - {e}")
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
