"""Tests for the Postgres repository against a scripted connection pool."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import date, datetime, timezone

import pytest
from psycopg import errors

from account_service.domain.account import Account
from account_service.domain.errors import AccountNotFoundError, ConflictError, InvalidArgumentError
from account_service.repository import PostgresAccountRepository

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)
ROW = (7, "Ada", "Lovelace", date(1980, 12, 10), True, "London", "ada@example.com", 2, NOW, NOW)


class FakeCursor:
    """Cursor that returns queued results in order and records executed SQL."""

    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool
        self.rowcount = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query, params=None):
        statement = " ".join(query.split())
        self._pool.executed.append((statement, params))
        if self._pool.unique_violation_on and statement.startswith(self._pool.unique_violation_on):
            raise errors.UniqueViolation("duplicate key value violates unique constraint")
        self.rowcount = self._pool.rowcount

    async def fetchone(self):
        return self._pool.results.pop(0)

    async def fetchall(self):
        return self._pool.results.pop(0)


class FakeConnection:
    def __init__(self, pool: "FakePool") -> None:
        self._pool = pool

    def cursor(self, row_factory=None):
        return FakeCursor(self._pool)

    async def commit(self):
        self._pool.commits += 1

    async def rollback(self):
        self._pool.rollbacks += 1


class FakePool:
    def __init__(self, results=None, rowcount: int = 0, unique_violation_on: str | None = None) -> None:
        self.results = list(results or [])
        self.rowcount = rowcount
        self.executed: list[tuple[str, object]] = []
        self.commits = 0
        self.rollbacks = 0
        self.unique_violation_on = unique_violation_on

    @asynccontextmanager
    async def connection(self):
        yield FakeConnection(self)


@pytest.mark.asyncio
async def test_add_inserts_and_rereads_record():
    pool = FakePool(results=[None, (7,), ROW])
    repo = PostgresAccountRepository(pool)

    account = await repo.add(
        Account(first_name="Ada", last_name="Lovelace", email="ada@example.com", birth_date=date(1980, 12, 10))
    )

    assert account.account_id == 7
    assert account.created_at == NOW
    assert pool.executed[1][0].startswith("INSERT INTO accounts")
    assert pool.commits == 1


@pytest.mark.asyncio
async def test_add_duplicate_email_raises_conflict():
    pool = FakePool(results=[(1,)])
    repo = PostgresAccountRepository(pool)

    with pytest.raises(ConflictError):
        await repo.add(Account(email="ada@example.com"))

    assert len(pool.executed) == 1
    assert pool.commits == 0


@pytest.mark.asyncio
async def test_get_by_id_maps_row_and_handles_absence():
    repo = PostgresAccountRepository(FakePool(results=[ROW, None]))

    found = await repo.get_by_id(7)
    missing = await repo.get_by_id(8)

    assert found == Account(
        account_id=7,
        first_name="Ada",
        last_name="Lovelace",
        birth_date=date(1980, 12, 10),
        is_active=True,
        city="London",
        email="ada@example.com",
        pet_count=2,
        created_at=NOW,
        updated_at=NOW,
    )
    assert missing is None


@pytest.mark.asyncio
async def test_argument_checks_happen_before_querying():
    pool = FakePool()
    repo = PostgresAccountRepository(pool)

    with pytest.raises(InvalidArgumentError):
        await repo.get_by_id(0)
    with pytest.raises(InvalidArgumentError):
        await repo.delete(0)
    with pytest.raises(InvalidArgumentError):
        await repo.email_exists("")

    assert pool.executed == []


@pytest.mark.asyncio
async def test_get_active_filters_on_flag():
    pool = FakePool(results=[[ROW]])
    repo = PostgresAccountRepository(pool)

    accounts = await repo.get_active()

    assert [a.account_id for a in accounts] == [7]
    assert pool.executed[0][0].endswith("WHERE is_active")


@pytest.mark.asyncio
async def test_update_unknown_account_raises_not_found():
    repo = PostgresAccountRepository(FakePool(results=[None]))

    with pytest.raises(AccountNotFoundError):
        await repo.update(Account(account_id=99, email="x@example.com"))


@pytest.mark.asyncio
async def test_delete_uses_rowcount():
    assert await PostgresAccountRepository(FakePool(rowcount=1)).delete(7) is True
    assert await PostgresAccountRepository(FakePool(rowcount=0)).delete(7) is False


@pytest.mark.asyncio
async def test_ensure_schema_creates_table_and_unique_index():
    pool = FakePool()

    await PostgresAccountRepository(pool).ensure_schema()

    statement = pool.executed[0][0]
    assert "CREATE TABLE IF NOT EXISTS accounts" in statement
    assert "ON accounts (lower(email))" in statement


@pytest.mark.asyncio
async def test_add_translates_racing_unique_violation_to_conflict():
    pool = FakePool(results=[None], unique_violation_on="INSERT INTO accounts")
    repo = PostgresAccountRepository(pool)

    with pytest.raises(ConflictError):
        await repo.add(Account(email="ada@example.com", birth_date=date(1980, 12, 10)))

    assert pool.commits == 0
    assert pool.rollbacks == 1


@pytest.mark.asyncio
async def test_update_translates_unique_violation_to_conflict():
    pool = FakePool(unique_violation_on="UPDATE accounts")
    repo = PostgresAccountRepository(pool)

    with pytest.raises(ConflictError):
        await repo.update(Account(account_id=7, email="taken@example.com"))

    assert pool.commits == 0
    assert pool.rollbacks == 1
