from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(slots=True)
class Account:
    """Aggregate root for a single account holder.

    ``account_id`` is zero until the persistence gateway assigns one.
    """

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    birth_date: date | None = None
    city: str = ""
    pet_count: int = 0
    is_active: bool = True
    account_id: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
