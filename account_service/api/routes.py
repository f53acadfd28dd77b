"""HTTP route definitions for the account service."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel

from ..domain.account import Account
from ..domain.errors import (
    AccountError,
    AccountNotFoundError,
    AccountValidationError,
    ConflictError,
    InvalidArgumentError,
)
from ..domain.service import AccountService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1")

HTTP_422_VALIDATION_FAILED = 422


class AccountPayload(BaseModel):
    """Caller-supplied account fields for create and update requests."""

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    birth_date: date | None = None
    city: str = ""
    pet_count: int = 0
    is_active: bool = True

    def to_domain(self, account_id: int = 0) -> Account:
        return Account(
            account_id=account_id,
            first_name=self.first_name,
            last_name=self.last_name,
            email=self.email,
            birth_date=self.birth_date,
            city=self.city,
            pet_count=self.pet_count,
            is_active=self.is_active,
        )


class AccountResponse(BaseModel):
    """Serialised representation of an `Account` aggregate."""

    account_id: int
    first_name: str
    last_name: str
    email: str
    birth_date: date | None
    city: str
    pet_count: int
    is_active: bool
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        """Build a response model from the domain aggregate."""
        return cls(
            account_id=account.account_id,
            first_name=account.first_name,
            last_name=account.last_name,
            email=account.email,
            birth_date=account.birth_date,
            city=account.city,
            pet_count=account.pet_count,
            is_active=account.is_active,
            created_at=account.created_at.isoformat() if account.created_at else None,
            updated_at=account.updated_at.isoformat() if account.updated_at else None,
        )


class DeleteAccountResponse(BaseModel):
    deleted: bool


def get_service(request: Request) -> AccountService:
    """Resolve the `AccountService` stored on the FastAPI application state."""
    service: AccountService = request.app.state.account_service
    return service


@router.post("/accounts", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    payload: AccountPayload,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Validate and create an account."""
    try:
        account = await service.create_account(payload.to_domain())
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.get("/accounts", response_model=list[AccountResponse])
async def list_accounts(
    active: bool = Query(default=False),
    service: AccountService = Depends(get_service),
) -> list[AccountResponse]:
    """List every account, or only active ones when ``active=true``."""
    accounts = await (service.get_active_accounts() if active else service.get_all_accounts())
    return [AccountResponse.from_domain(account) for account in accounts]


@router.get("/accounts/by-email", response_model=AccountResponse)
async def get_account_by_email(
    email: str = Query(default=""),
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Look up an account by email address."""
    try:
        account = await service.get_account_by_email(email)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="account not found")
    return AccountResponse.from_domain(account)


@router.get("/accounts/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Retrieve an account by identifier."""
    try:
        account = await service.get_account(account_id)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="account not found")
    return AccountResponse.from_domain(account)


@router.put("/accounts/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    payload: AccountPayload,
    service: AccountService = Depends(get_service),
) -> AccountResponse:
    """Replace the mutable fields of an existing account."""
    try:
        account = await service.update_account(payload.to_domain(account_id))
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return AccountResponse.from_domain(account)


@router.delete("/accounts/{account_id}", response_model=DeleteAccountResponse)
async def delete_account(
    account_id: int,
    service: AccountService = Depends(get_service),
) -> DeleteAccountResponse:
    try:
        deleted = await service.delete_account(account_id)
    except AccountError as exc:
        raise _http_error_from_account_error(exc) from exc
    return DeleteAccountResponse(deleted=deleted)


def _http_error_from_account_error(exc: AccountError) -> HTTPException:
    if isinstance(exc, AccountValidationError):
        return HTTPException(
            status_code=HTTP_422_VALIDATION_FAILED,
            detail={"errors": exc.errors},
        )
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, AccountNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, InvalidArgumentError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    logger.error("unhandled account error: %s", exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
