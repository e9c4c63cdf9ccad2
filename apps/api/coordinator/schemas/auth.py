"""Caller context schemas."""

from uuid import UUID

from pydantic import BaseModel

from coordinator.db.enums import Role


class CallerContext(BaseModel):
    """
    Identity of the caller, resolved upstream.

    Built per request by get_caller; nothing in the core keeps an ambient
    "current role".
    """
    user_id: UUID
    org_id: UUID | None = None
    role: Role
