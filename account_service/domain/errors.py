"""Error taxonomy shared by the repository, workflow and service layers."""

from __future__ import annotations


class AccountError(Exception):
    """Base class for all account domain errors."""


class AccountValidationError(AccountError, ValueError):
    """One or more validation rules rejected an account."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Validation failed: " + " ".join(self.errors))


class InvalidArgumentError(AccountError, ValueError):
    """Malformed caller input such as a non-positive ID or a blank email."""


class ConflictError(AccountError):
    """An email address is already owned by another account."""


class AccountNotFoundError(AccountError, LookupError):
    """No account exists with the requested identifier."""
