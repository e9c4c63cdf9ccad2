"""Approval policy endpoints (owner/admin)."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coordinator.core.deps import get_db, require_org, require_roles
from coordinator.db.enums import Role
from coordinator.schemas.auth import CallerContext
from coordinator.schemas.policy import ApprovalPolicyRead, ApprovalPolicyWrite
from coordinator.services import approval_policy_service

router = APIRouter()

POLICY_ROLES = [Role.OWNER, Role.ADMIN]


@router.get("", response_model=ApprovalPolicyRead)
def get_policy(
    caller: CallerContext = Depends(require_roles(POLICY_ROLES)),
    db: Session = Depends(get_db),
):
    """The organization's active policy."""
    policy = approval_policy_service.get_active_policy(db, require_org(caller))
    if policy is None:
        raise HTTPException(status_code=404, detail="No active approval policy")
    return policy


@router.put("", response_model=ApprovalPolicyRead)
def put_policy(
    data: ApprovalPolicyWrite,
    caller: CallerContext = Depends(require_roles(POLICY_ROLES)),
    db: Session = Depends(get_db),
):
    """Replace the active policy; the previous one is kept, inactive."""
    org_id = require_org(caller)
    try:
        return approval_policy_service.save_policy(db, org_id, **data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
