"""Service layer exports."""
from barberbook.services import (
    audit_service,
    auth_service,
    service_catalog_service,
)

__all__ = [
    "audit_service",
    "auth_service",
    "service_catalog_service",
]
