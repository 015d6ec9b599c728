"""Authentication service helpers."""

from __future__ import annotations

import uuid

from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.core.errors import AuthError
from barberbook.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from barberbook.models.admin_user import AdminUser

ADMIN_ROLE = "admin"


async def get_admin_by_email(session: AsyncSession, *, email: str) -> AdminUser | None:
    result = await session.execute(
        select(AdminUser).where(AdminUser.email == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def authenticate_admin(
    session: AsyncSession, email: str, password: str
) -> AdminUser | None:
    """Validate credentials and return the admin if correct."""
    admin = await get_admin_by_email(session, email=email)
    if admin is None or not admin.is_active:
        return None
    if not verify_password(password, admin.hashed_password):
        return None
    return admin


def create_access_token_for_admin(admin: AdminUser) -> str:
    """Generate a JWT for an admin."""
    return create_access_token(str(admin.id), role=ADMIN_ROLE)


async def verify(session: AsyncSession, token: str) -> AdminUser:
    """Resolve a bearer token to an active admin or raise :class:`AuthError`."""
    try:
        payload = decode_access_token(token)
    except JWTError as exc:
        raise AuthError() from exc

    if payload.get("role") != ADMIN_ROLE:
        raise AuthError()
    try:
        admin_id = uuid.UUID(str(payload.get("sub")))
    except (ValueError, TypeError) as exc:
        raise AuthError() from exc

    admin = await session.get(AdminUser, admin_id)
    if admin is None or not admin.is_active:
        raise AuthError()
    return admin


async def create_admin(
    session: AsyncSession,
    *,
    email: str,
    password: str,
    full_name: str | None = None,
) -> AdminUser:
    admin = AdminUser(
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        full_name=full_name,
        is_active=True,
    )
    session.add(admin)
    await session.commit()
    await session.refresh(admin)
    return admin
