"""Create an admin account from the command line."""

from __future__ import annotations

import argparse
import asyncio
import getpass

from barberbook.core.config import get_settings
from barberbook.db.session import get_sessionmaker
from barberbook.services.auth_service import create_admin, get_admin_by_email


async def main(email: str, password: str, full_name: str | None) -> None:
    settings = get_settings()
    sessionmaker = get_sessionmaker(settings.database_url)
    async with sessionmaker() as session:
        if await get_admin_by_email(session, email=email) is not None:
            print(f"Admin {email} already exists")
            return
        admin = await create_admin(
            session, email=email, password=password, full_name=full_name
        )
        print(f"Created admin {admin.email}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("--name", default=None)
    args = parser.parse_args()
    secret = getpass.getpass("Password: ")
    asyncio.run(main(args.email, secret, args.name))
