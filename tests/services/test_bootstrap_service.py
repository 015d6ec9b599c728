"""Admin bootstrap tests."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.core.config import get_settings
from barberbook.core.security import verify_password
from barberbook.services.auth_service import get_admin_by_email
from barberbook.services.bootstrap_service import ensure_default_admin

pytestmark = pytest.mark.asyncio


async def test_default_admin_is_created_once(
    session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("ADMIN_EMAIL", "Boss@Barber.example.com")
    monkeypatch.setenv("ADMIN_PASSWORD", "Fade&Taper1")
    get_settings.cache_clear()
    try:
        await ensure_default_admin()
        await ensure_default_admin()
    finally:
        monkeypatch.delenv("ADMIN_EMAIL")
        monkeypatch.delenv("ADMIN_PASSWORD")
        get_settings.cache_clear()

    admin = await get_admin_by_email(session, email="boss@barber.example.com")
    assert admin is not None
    assert verify_password("Fade&Taper1", admin.hashed_password)


async def test_bootstrap_is_skipped_without_credentials(session: AsyncSession) -> None:
    await ensure_default_admin()
    assert await get_admin_by_email(session, email="boss@barber.example.com") is None
