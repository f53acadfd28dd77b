"""Declarative validation rules applied to accounts before they are persisted.

Each rule is an independent predicate paired with the message reported when
the predicate matches. Every rule is evaluated on every pass so callers receive
the complete list of violations rather than the first one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable

from .account import Account

NAME_MAX_LENGTH = 100
CITY_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 255
MINIMUM_AGE = 18
MAXIMUM_AGE = 120
MAXIMUM_PET_COUNT = 100

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9_+&*-]+(?:\.[a-zA-Z0-9_+&*-]+)*@(?:[a-zA-Z0-9-]+\.)+[a-zA-Z]{2,}",
    re.IGNORECASE | re.ASCII,
)

Predicate = Callable[[Account, date], bool]


@dataclass(frozen=True, slots=True)
class ValidationRule:
    """A named predicate that reports ``message`` when it matches an account."""

    name: str
    message: str
    predicate: Predicate

    def check(self, account: Account, today: date | None = None) -> str | None:
        """Return the rule message if the account violates this rule."""
        if self.predicate(account, today or _utc_today()):
            return self.message
        return None


def calculate_age(birth_date: date, today: date) -> int:
    """Return the number of completed years between ``birth_date`` and ``today``."""
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _too_long(value: str | None, limit: int) -> bool:
    return not _blank(value) and len(value) > limit


def _bad_email_format(account: Account, _today: date) -> bool:
    email = account.email
    return not _blank(email) and ("@" not in email or "." not in email)


def _bad_email_syntax(account: Account, _today: date) -> bool:
    email = account.email
    return not _blank(email) and EMAIL_PATTERN.fullmatch(email) is None


def _age_below_minimum(account: Account, today: date) -> bool:
    return account.birth_date is not None and calculate_age(account.birth_date, today) < MINIMUM_AGE


def _age_above_maximum(account: Account, today: date) -> bool:
    return account.birth_date is not None and calculate_age(account.birth_date, today) > MAXIMUM_AGE


ACCOUNT_RULES: tuple[ValidationRule, ...] = (
    ValidationRule(
        "first_name_required",
        "FirstName is required.",
        lambda a, _: _blank(a.first_name),
    ),
    ValidationRule(
        "first_name_max_length",
        f"FirstName must be {NAME_MAX_LENGTH} characters or less.",
        lambda a, _: _too_long(a.first_name, NAME_MAX_LENGTH),
    ),
    ValidationRule(
        "last_name_required",
        "LastName is required.",
        lambda a, _: _blank(a.last_name),
    ),
    ValidationRule(
        "last_name_max_length",
        f"LastName must be {NAME_MAX_LENGTH} characters or less.",
        lambda a, _: _too_long(a.last_name, NAME_MAX_LENGTH),
    ),
    ValidationRule(
        "email_required",
        "Email address is required.",
        lambda a, _: _blank(a.email),
    ),
    ValidationRule(
        "email_format",
        "Email address must contain @ and . characters.",
        _bad_email_format,
    ),
    ValidationRule(
        "email_syntax",
        "Email address does not match valid email syntax.",
        _bad_email_syntax,
    ),
    ValidationRule(
        "email_max_length",
        f"Email address must be {EMAIL_MAX_LENGTH} characters or less.",
        lambda a, _: _too_long(a.email, EMAIL_MAX_LENGTH),
    ),
    ValidationRule(
        "birth_date_required",
        "Birth date is required.",
        lambda a, _: a.birth_date is None,
    ),
    ValidationRule(
        "minimum_age",
        f"Account holder must be at least {MINIMUM_AGE} years old.",
        _age_below_minimum,
    ),
    ValidationRule(
        "maximum_age",
        f"Birth date must be realistic (age cannot exceed {MAXIMUM_AGE} years).",
        _age_above_maximum,
    ),
    ValidationRule(
        "pet_count_non_negative",
        "Pet count must be a non-negative number.",
        lambda a, _: a.pet_count < 0,
    ),
    ValidationRule(
        "pet_count_maximum",
        f"Pet count seems unrealistic (maximum {MAXIMUM_PET_COUNT}).",
        lambda a, _: a.pet_count > MAXIMUM_PET_COUNT,
    ),
    ValidationRule(
        "city_max_length",
        f"City must be {CITY_MAX_LENGTH} characters or less.",
        lambda a, _: _too_long(a.city, CITY_MAX_LENGTH),
    ),
)


def validate_account(
    account: Account,
    today: date | None = None,
    rules: tuple[ValidationRule, ...] = ACCOUNT_RULES,
) -> list[str]:
    """Evaluate every rule against ``account`` and return the violated messages."""
    today = today or _utc_today()
    return [rule.message for rule in rules if rule.predicate(account, today)]
