"""Calendar schemas."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel


class ScheduledJobRead(BaseModel):
    id: UUID
    org_id: UUID
    team_id: UUID
    job_id: UUID | None
    title: str
    scheduled_start_at: datetime | None
    scheduled_end_at: datetime | None
    is_all_day: bool
    duration_days: int
    status: str
    tenant_confirmed: bool

    model_config = {"from_attributes": True}


class RescheduleRequest(BaseModel):
    """Drop a job on a calendar day (organization-local date)."""
    target_day: date
