"""Calendar endpoints: day columns and drag-to-reschedule."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from coordinator.core.deps import get_db, require_org, require_roles
from coordinator.db.enums import Role
from coordinator.db.models import Organization
from coordinator.schemas.auth import CallerContext
from coordinator.schemas.calendar import RescheduleRequest, ScheduledJobRead
from coordinator.services import calendar_service

router = APIRouter()

CALENDAR_ROLES = [Role.OWNER, Role.ADMIN, Role.CONTRACTOR]


def _org_timezone(db: Session, org_id: UUID) -> str | None:
    org = db.get(Organization, org_id)
    if org is None:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org.timezone


@router.get("/day", response_model=list[ScheduledJobRead])
def get_day(
    day: date,
    team_id: UUID | None = None,
    caller: CallerContext = Depends(require_roles(CALENDAR_ROLES)),
    db: Session = Depends(get_db),
):
    """Jobs occupying any part of a day, in the organization's timezone."""
    org_id = require_org(caller)
    return calendar_service.list_day_jobs(
        db, org_id, day, _org_timezone(db, org_id), team_id=team_id
    )


@router.post("/jobs/{scheduled_job_id}/reschedule", response_model=ScheduledJobRead)
def reschedule(
    scheduled_job_id: UUID,
    data: RescheduleRequest,
    caller: CallerContext = Depends(require_roles([Role.OWNER, Role.ADMIN])),
    db: Session = Depends(get_db),
):
    """Move a job to another day, keeping time of day and duration."""
    org_id = require_org(caller)
    job = calendar_service.get_scheduled_job(db, org_id, scheduled_job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Scheduled job not found")
    return calendar_service.reschedule_job(db, job, data.target_day, _org_timezone(db, org_id))
