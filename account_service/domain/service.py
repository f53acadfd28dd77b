"""Account service orchestrating validation, persistence and auditing."""

from __future__ import annotations

import logging

from ..repository import AccountGateway, require_email, require_positive_id
from .account import Account
from .actions import create_account, ensure_valid, normalize_account
from .audit import AuditSink
from .errors import AccountNotFoundError, ConflictError

logger = logging.getLogger(__name__)


class AccountService:
    """Single entry point for account workflows backed by an ``AccountGateway``."""

    def __init__(self, repository: AccountGateway, *, audit_sink: AuditSink | None = None) -> None:
        """Store the repository and the sink that receives audit records."""
        self._repository = repository
        self._audit_sink = audit_sink

    async def create_account(self, account: Account) -> Account:
        """Validate and persist a new account, returning it with its ID populated."""
        created = await create_account(account, self._repository, audit_sink=self._audit_sink)
        logger.info("created account %s", created.account_id)
        return created

    async def get_account(self, account_id: int) -> Account | None:
        """Retrieve an account by identifier."""
        require_positive_id(account_id)
        return await self._repository.get_by_id(account_id)

    async def get_account_by_email(self, email: str) -> Account | None:
        """Retrieve an account by email, ignoring surrounding whitespace and case."""
        require_email(email)
        return await self._repository.get_by_email(email.strip().lower())

    async def get_all_accounts(self) -> list[Account]:
        return await self._repository.get_all()

    async def get_active_accounts(self) -> list[Account]:
        return await self._repository.get_active()

    async def update_account(self, account: Account) -> Account:
        """Replace the mutable fields of an existing account.

        Raises
        ------
        InvalidArgumentError
            When the account identifier is not positive.
        AccountNotFoundError
            When no account exists with the identifier.
        AccountValidationError
            When the incoming values violate the validation rules.
        ConflictError
            When the new email already belongs to a different account.
        """
        require_positive_id(account.account_id)
        existing = await self._repository.get_by_id(account.account_id)
        if existing is None:
            raise AccountNotFoundError(f"Account with ID {account.account_id} not found.")

        normalize_account(account)
        ensure_valid(account)
        account.email = account.email.lower()

        if existing.email.lower() != account.email:
            if await self._repository.email_exists(account.email):
                raise ConflictError(f"An account with email '{account.email}' already exists.")

        updated = await self._repository.update(account)
        logger.info("updated account %s", updated.account_id)
        return updated

    async def delete_account(self, account_id: int) -> bool:
        """Delete an account; returns ``False`` when nothing was removed."""
        require_positive_id(account_id)
        deleted = await self._repository.delete(account_id)
        if not deleted:
            logger.debug("delete requested for missing account %s", account_id)
        return deleted
