"""Authentication endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.api import deps
from barberbook.api.rate_limit import LOGIN_RATE_DEP
from barberbook.models.admin_user import AdminUser
from barberbook.schemas.auth import AdminRead, Token
from barberbook.services import audit_service
from barberbook.services.auth_service import (
    authenticate_admin,
    create_access_token_for_admin,
)

router = APIRouter()


@router.post(
    "/token",
    response_model=Token,
    summary="Obtain access token",
    dependencies=[LOGIN_RATE_DEP],
)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    request: Request,
) -> Token:
    """Validate credentials and issue a bearer token."""
    admin = await authenticate_admin(
        session, email=form_data.username, password=form_data.password
    )
    if not admin:
        await audit_service.record_event(
            session,
            event_type="auth.login.failed",
            actor=form_data.username.lower(),
            description="Rejected admin login",
            ip_address=deps.client_ip(request),
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token_for_admin(admin)
    await audit_service.record_event(
        session,
        event_type="auth.login",
        actor=admin.email,
        description="Successful login",
        payload={"admin_id": str(admin.id)},
        ip_address=deps.client_ip(request),
    )
    return Token(access_token=access_token)


@router.get("/me", response_model=AdminRead, summary="Current admin")
async def read_current_admin(
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
) -> AdminRead:
    return AdminRead.model_validate(admin)
