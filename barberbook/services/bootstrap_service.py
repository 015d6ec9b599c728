"""Bootstrap helpers for default data."""

from __future__ import annotations

import logging

from barberbook.core.config import get_settings
from barberbook.db.session import get_sessionmaker
from barberbook.services.auth_service import create_admin, get_admin_by_email

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_NAME = "Shop Admin"


async def ensure_default_admin() -> None:
    """Create the configured admin account if it does not yet exist."""

    settings = get_settings()
    if not settings.admin_email or not settings.admin_password:
        logger.debug("ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin bootstrap")
        return

    sessionmaker = get_sessionmaker(settings.database_url)
    async with sessionmaker() as session:
        existing = await get_admin_by_email(session, email=settings.admin_email)
        if existing is not None:
            return
        await create_admin(
            session,
            email=settings.admin_email,
            password=settings.admin_password,
            full_name=DEFAULT_ADMIN_NAME,
        )
        logger.info("Created default admin account %s", settings.admin_email)
