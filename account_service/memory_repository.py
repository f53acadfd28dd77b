"""In-memory account repository used for local runs, the demo and tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from itertools import count

from .domain.account import Account
from .domain.errors import AccountNotFoundError, ConflictError
from .repository import require_email, require_positive_id


class InMemoryAccountRepository:
    """Dictionary-backed store mimicking the Postgres repository behaviour.

    Records are copied on the way in and out so callers never hold a reference
    to stored state.
    """

    def __init__(self) -> None:
        self._accounts: dict[int, Account] = {}
        self._ids = count(1)

    async def add(self, account: Account) -> Account:
        if self._find_by_email(account.email) is not None:
            raise ConflictError(f"An account with email '{account.email}' already exists.")
        now = datetime.now(timezone.utc)
        stored = replace(
            account,
            account_id=next(self._ids),
            city=account.city or "",
            created_at=account.created_at or now,
            updated_at=account.updated_at or now,
        )
        self._accounts[stored.account_id] = stored
        return replace(self._accounts[stored.account_id])

    async def get_by_id(self, account_id: int) -> Account | None:
        require_positive_id(account_id)
        stored = self._accounts.get(account_id)
        return replace(stored) if stored else None

    async def get_by_email(self, email: str) -> Account | None:
        require_email(email)
        stored = self._find_by_email(email)
        return replace(stored) if stored else None

    async def get_all(self) -> list[Account]:
        return [replace(account) for account in self._accounts.values()]

    async def get_active(self) -> list[Account]:
        return [replace(account) for account in self._accounts.values() if account.is_active]

    async def update(self, account: Account) -> Account:
        existing = self._accounts.get(account.account_id)
        if existing is None:
            raise AccountNotFoundError(f"Account with ID {account.account_id} not found.")
        owner = self._find_by_email(account.email)
        if owner is not None and owner.account_id != account.account_id:
            raise ConflictError(f"An account with email '{account.email}' already exists.")
        existing.first_name = account.first_name
        existing.last_name = account.last_name
        existing.birth_date = account.birth_date
        existing.email = account.email
        existing.city = account.city or ""
        existing.pet_count = account.pet_count
        existing.is_active = account.is_active
        existing.updated_at = datetime.now(timezone.utc)
        return replace(existing)

    async def delete(self, account_id: int) -> bool:
        require_positive_id(account_id)
        return self._accounts.pop(account_id, None) is not None

    async def email_exists(self, email: str) -> bool:
        require_email(email)
        return self._find_by_email(email) is not None

    def _find_by_email(self, email: str) -> Account | None:
        needle = email.lower()
        for account in self._accounts.values():
            if account.email.lower() == needle:
                return account
        return None
