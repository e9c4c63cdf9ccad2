"""FastAPI dependencies for caller context and database access."""

from typing import Generator
from uuid import UUID

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from coordinator.db.enums import Role
from coordinator.db.session import SessionLocal
from coordinator.schemas.auth import CallerContext


# Headers set by the authenticating gateway
USER_HEADER = "X-User-Id"
ORG_HEADER = "X-Org-Id"
ROLE_HEADER = "X-Role"


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _parse_uuid(value: str | None, header: str) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Invalid {header} header")


def get_caller(request: Request) -> CallerContext:
    """
    Caller identity from upstream headers.

    Raises:
        HTTPException 401: Missing or malformed identity
        HTTPException 403: Unknown role
    """
    user_id = _parse_uuid(request.headers.get(USER_HEADER), USER_HEADER)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    role = request.headers.get(ROLE_HEADER, "")
    # Validate role is a known enum value - return 403 not 500
    if not Role.has_value(role):
        raise HTTPException(status_code=403, detail=f"Unknown role '{role}'")

    return CallerContext(
        user_id=user_id,
        org_id=_parse_uuid(request.headers.get(ORG_HEADER), ORG_HEADER),
        role=Role(role),
    )


def require_roles(allowed_roles: list[Role]):
    """
    Dependency factory for role-based authorization.

    Usage:
        caller: CallerContext = Depends(require_roles([Role.CONTRACTOR]))
    """
    def dependency(caller: CallerContext = Depends(get_caller)) -> CallerContext:
        if caller.role not in allowed_roles:
            raise HTTPException(
                status_code=403,
                detail=f"Role '{caller.role.value}' not authorized for this action",
            )
        return caller
    return dependency


def require_org(caller: CallerContext) -> UUID:
    """org_id for query scoping; org-scoped endpoints need one."""
    if caller.org_id is None:
        raise HTTPException(status_code=403, detail="No organization in caller context")
    return caller.org_id
