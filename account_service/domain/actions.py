"""Business actions that wrap validation, persistence and auditing around a use case."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from ..repository import AccountGateway
from .account import Account
from .audit import AuditRecord, AuditSink, log_audit_record
from .errors import AccountValidationError
from .rules import validate_account

logger = logging.getLogger(__name__)

CREATE_ACCOUNT_ACTION = "CreateAccountAction"


def normalize_account(account: Account) -> Account:
    """Trim the free-text fields of ``account`` in place and return it."""
    account.first_name = (account.first_name or "").strip()
    account.last_name = (account.last_name or "").strip()
    account.email = (account.email or "").strip()
    account.city = (account.city or "").strip()
    return account


def ensure_valid(account: Account) -> None:
    """Raise ``AccountValidationError`` carrying every violated rule message."""
    errors = validate_account(account)
    if errors:
        logger.info("account rejected by %d validation rule(s)", len(errors))
        raise AccountValidationError(errors)


async def create_account(
    account: Account,
    repository: AccountGateway,
    *,
    audit_sink: AuditSink | None = None,
    clock: Callable[[], datetime] | None = None,
) -> Account:
    """Normalize, validate, persist and audit a new account.

    Validation failures abort before anything is written or audited. Errors
    raised by the repository (for example a duplicate email) propagate as-is.
    """
    normalize_account(account)
    ensure_valid(account)

    now = (clock or _utc_now)()
    account.email = account.email.lower()
    account.created_at = now
    account.updated_at = now
    created = await repository.add(account)

    (audit_sink or log_audit_record)(
        AuditRecord(
            action=CREATE_ACCOUNT_ACTION,
            result_type=type(created).__name__,
            context={
                "AccountId": created.account_id,
                "FullName": created.full_name,
                "Email": created.email,
                "CreatedAt": created.created_at,
            },
        )
    )
    return created


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)
