"""Authentication schemas."""
from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict


class Token(BaseModel):
    """Response body for access tokens."""

    access_token: str
    token_type: str = "bearer"


class AdminRead(BaseModel):
    """Public view of an admin account."""

    id: uuid.UUID
    email: str
    full_name: str | None = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)
