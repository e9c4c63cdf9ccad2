"""Contractor marketplace endpoints: job listing and acceptance."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coordinator.core.constants import REASON_JOB_NOT_FOUND
from coordinator.core.deps import get_db, require_roles
from coordinator.db.enums import Role
from coordinator.schemas.auth import CallerContext
from coordinator.schemas.job import AcceptJobResponse, MarketplaceJobRead
from coordinator.services import acceptance_service, eligibility_service

router = APIRouter()


@router.get("/jobs", response_model=list[MarketplaceJobRead])
def list_jobs(
    org_id: UUID | None = None,
    is_urgent: bool | None = None,
    caller: CallerContext = Depends(require_roles([Role.CONTRACTOR])),
    db: Session = Depends(get_db),
):
    """Unassigned jobs visible to the calling contractor, highest priority first."""
    return eligibility_service.list_marketplace_jobs(
        db, caller.user_id, org_id=org_id, is_urgent=is_urgent
    )


@router.post("/jobs/{job_id}/accept", response_model=AcceptJobResponse)
def accept_job(
    job_id: UUID,
    caller: CallerContext = Depends(require_roles([Role.CONTRACTOR])),
    db: Session = Depends(get_db),
):
    """Take an unassigned job. Losing a race reports "already assigned"."""
    result = acceptance_service.accept_job(db, caller.user_id, job_id)
    if not result.success:
        if result.error == REASON_JOB_NOT_FOUND:
            raise HTTPException(status_code=404, detail=result.error)
        raise HTTPException(status_code=409, detail=result.error)
    return AcceptJobResponse(success=True, job_id=job_id)
