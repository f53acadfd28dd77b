"""Database repository for account data."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Protocol

from psycopg import errors
from psycopg.rows import tuple_row
from psycopg_pool import AsyncConnectionPool

from .domain.account import Account
from .domain.errors import AccountNotFoundError, ConflictError, InvalidArgumentError

logger = logging.getLogger(__name__)

_COLUMNS = (
    "account_id, first_name, last_name, birth_date, is_active, city, "
    "email, pet_count, created_at, updated_at"
)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS accounts (
    account_id SERIAL PRIMARY KEY,
    first_name VARCHAR(100) NOT NULL,
    last_name VARCHAR(100) NOT NULL,
    birth_date DATE NOT NULL,
    is_active BOOLEAN NOT NULL DEFAULT TRUE,
    city VARCHAR(100) NOT NULL DEFAULT '',
    email VARCHAR(255) NOT NULL,
    pet_count INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);
CREATE UNIQUE INDEX IF NOT EXISTS ux_accounts_email ON accounts (lower(email));
"""


class AccountGateway(Protocol):
    """Storage contract used by the account workflow and service."""

    async def add(self, account: Account) -> Account:
        """Persist a new account, raising ``ConflictError`` on a duplicate email."""
        ...

    async def get_by_id(self, account_id: int) -> Account | None:
        ...

    async def get_by_email(self, email: str) -> Account | None:
        ...

    async def get_all(self) -> list[Account]:
        ...

    async def get_active(self) -> list[Account]:
        ...

    async def update(self, account: Account) -> Account:
        """Overwrite the mutable fields of an existing account."""
        ...

    async def delete(self, account_id: int) -> bool:
        """Remove an account, returning whether a record was actually deleted."""
        ...

    async def email_exists(self, email: str) -> bool:
        ...


def require_positive_id(account_id: int) -> None:
    """Raise ``InvalidArgumentError`` unless ``account_id`` is a persisted identifier."""
    if account_id <= 0:
        raise InvalidArgumentError("Account ID must be greater than 0")


def require_email(email: str | None) -> None:
    """Raise ``InvalidArgumentError`` when ``email`` is empty or whitespace."""
    if email is None or not email.strip():
        raise InvalidArgumentError("Email address cannot be empty")


class PostgresAccountRepository:
    """Postgres-backed account persistence."""

    def __init__(self, pool: AsyncConnectionPool) -> None:
        """Store the connection pool used for all database interactions."""
        self._pool = pool

    async def ensure_schema(self) -> None:
        """Create the accounts table and its unique email index when missing."""
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(SCHEMA_SQL)
            await conn.commit()

    async def add(self, account: Account) -> Account:
        """Insert an account and return it re-read with generated values populated."""
        now = datetime.now(timezone.utc)
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=tuple_row) as cur:
                await cur.execute(
                    "SELECT 1 FROM accounts WHERE lower(email) = lower(%s)",
                    (account.email,),
                )
                if await cur.fetchone():
                    raise ConflictError(
                        f"An account with email '{account.email}' already exists."
                    )
                try:
                    await cur.execute(
                        """
                        INSERT INTO accounts (first_name, last_name, birth_date, is_active, city,
                                              email, pet_count, created_at, updated_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                        RETURNING account_id
                        """,
                        (
                            account.first_name,
                            account.last_name,
                            account.birth_date,
                            account.is_active,
                            account.city or "",
                            account.email,
                            account.pet_count,
                            account.created_at or now,
                            account.updated_at or now,
                        ),
                    )
                except errors.UniqueViolation as exc:
                    await conn.rollback()
                    raise ConflictError(
                        f"An account with email '{account.email}' already exists."
                    ) from exc
                (account_id,) = await cur.fetchone()
                await cur.execute(
                    f"SELECT {_COLUMNS} FROM accounts WHERE account_id = %s",
                    (account_id,),
                )
                row = await cur.fetchone()
            await conn.commit()
        logger.debug("inserted account %s", account_id)
        return self._map_record(row)

    async def get_by_id(self, account_id: int) -> Account | None:
        """Fetch an account by identifier or return ``None``."""
        require_positive_id(account_id)
        return await self._fetch_one(
            f"SELECT {_COLUMNS} FROM accounts WHERE account_id = %s", (account_id,)
        )

    async def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by email address or return ``None``."""
        require_email(email)
        return await self._fetch_one(
            f"SELECT {_COLUMNS} FROM accounts WHERE lower(email) = lower(%s)", (email,)
        )

    async def get_all(self) -> list[Account]:
        return await self._fetch_all(f"SELECT {_COLUMNS} FROM accounts", ())

    async def get_active(self) -> list[Account]:
        return await self._fetch_all(
            f"SELECT {_COLUMNS} FROM accounts WHERE is_active", ()
        )

    async def update(self, account: Account) -> Account:
        """Overwrite mutable fields of an existing account and return the stored row."""
        now = datetime.now(timezone.utc)
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=tuple_row) as cur:
                try:
                    await cur.execute(
                        f"""
                        UPDATE accounts
                        SET first_name = %s, last_name = %s, birth_date = %s, is_active = %s,
                            city = %s, email = %s, pet_count = %s, updated_at = %s
                        WHERE account_id = %s
                        RETURNING {_COLUMNS}
                        """,
                        (
                            account.first_name,
                            account.last_name,
                            account.birth_date,
                            account.is_active,
                            account.city or "",
                            account.email,
                            account.pet_count,
                            now,
                            account.account_id,
                        ),
                    )
                except errors.UniqueViolation as exc:
                    await conn.rollback()
                    raise ConflictError(
                        f"An account with email '{account.email}' already exists."
                    ) from exc
                row = await cur.fetchone()
            if row is None:
                raise AccountNotFoundError(f"Account with ID {account.account_id} not found.")
            await conn.commit()
        return self._map_record(row)

    async def delete(self, account_id: int) -> bool:
        """Delete an account by identifier, returning ``False`` when it did not exist."""
        require_positive_id(account_id)
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("DELETE FROM accounts WHERE account_id = %s", (account_id,))
                deleted = cur.rowcount > 0
            await conn.commit()
        return deleted

    async def email_exists(self, email: str) -> bool:
        require_email(email)
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=tuple_row) as cur:
                await cur.execute(
                    "SELECT 1 FROM accounts WHERE lower(email) = lower(%s)", (email,)
                )
                return await cur.fetchone() is not None

    async def _fetch_one(self, query: str, params: tuple) -> Account | None:
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=tuple_row) as cur:
                await cur.execute(query, params)
                row = await cur.fetchone()
        if not row:
            return None
        return self._map_record(row)

    async def _fetch_all(self, query: str, params: tuple) -> list[Account]:
        async with self._pool.connection() as conn:
            async with conn.cursor(row_factory=tuple_row) as cur:
                await cur.execute(query, params)
                rows = await cur.fetchall()
        return [self._map_record(row) for row in rows]

    @staticmethod
    def _map_record(row: tuple) -> Account:
        """Convert a raw database tuple into the domain ``Account`` dataclass."""
        return Account(
            account_id=row[0],
            first_name=row[1],
            last_name=row[2],
            birth_date=row[3],
            is_active=row[4],
            city=row[5],
            email=row[6],
            pet_count=row[7],
            created_at=row[8],
            updated_at=row[9],
        )
