"""Console demo: create a sample account through the service and print it."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from .config import get_settings
from .domain.account import Account
from .domain.service import AccountService
from .logging_setup import configure_logging
from .main import open_repository


async def run_demo() -> Account:
    settings = get_settings()
    async with open_repository(settings) as repository:
        service = AccountService(repository)
        today = datetime.now(timezone.utc).date()
        account = Account(
            first_name="Demo",
            last_name="User",
            email="demo.user@example.com",
            birth_date=today.replace(year=today.year - 30, day=min(today.day, 28)),
            is_active=True,
        )
        created = await service.create_account(account)
        print(f"Created account Id: {created.account_id}, Email: {created.email}")
        return created


def main() -> None:
    configure_logging(get_settings().log_level)
    asyncio.run(run_demo())


if __name__ == "__main__":
    main()
