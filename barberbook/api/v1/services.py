"""Service catalog endpoints."""

from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from barberbook.api import deps
from barberbook.models.admin_user import AdminUser
from barberbook.schemas.service_offering import (
    ServiceOfferingCreate,
    ServiceOfferingRead,
    ServiceOfferingUpdate,
)
from barberbook.services import service_catalog_service

router = APIRouter()
admin_router = APIRouter()


@router.get(
    "", response_model=list[ServiceOfferingRead], summary="List offered services"
)
async def list_services(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
) -> list[ServiceOfferingRead]:
    offerings = await service_catalog_service.list_offerings(session)
    return [ServiceOfferingRead.model_validate(item) for item in offerings]


@admin_router.get(
    "", response_model=list[ServiceOfferingRead], summary="List all services"
)
async def admin_list_services(
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
    include_inactive: bool = Query(default=True),
) -> list[ServiceOfferingRead]:
    offerings = await service_catalog_service.list_offerings(
        session, include_inactive=include_inactive
    )
    return [ServiceOfferingRead.model_validate(item) for item in offerings]


@admin_router.post(
    "",
    response_model=ServiceOfferingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create service",
)
async def create_service(
    payload: ServiceOfferingCreate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
) -> ServiceOfferingRead:
    offering = await service_catalog_service.create_offering(session, payload=payload)
    return ServiceOfferingRead.model_validate(offering)


@admin_router.patch(
    "/{offering_id}", response_model=ServiceOfferingRead, summary="Update service"
)
async def update_service(
    offering_id: uuid.UUID,
    payload: ServiceOfferingUpdate,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
) -> ServiceOfferingRead:
    offering = await service_catalog_service.update_offering(
        session, offering_id=offering_id, payload=payload
    )
    return ServiceOfferingRead.model_validate(offering)


@admin_router.delete(
    "/{offering_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete service",
)
async def delete_service(
    offering_id: uuid.UUID,
    session: Annotated[AsyncSession, Depends(deps.get_db_session)],
    admin: Annotated[AdminUser, Depends(deps.get_current_admin)],
) -> None:
    await service_catalog_service.delete_offering(session, offering_id=offering_id)
