"""Calendar service - placing scheduled jobs on day columns and moving them.

Day boundaries come from the organization's timezone; every offset and
duration is computed on absolute instants, never by rebuilding hour/minute
fields, so repeated moves cannot drift.
"""

import json
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, NamedTuple
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError
from sqlalchemy import and_, or_, select
from sqlalchemy.orm import Session

from coordinator.core.config import settings
from coordinator.db.enums import ScheduledJobStatus
from coordinator.db.models import ScheduledJob
from coordinator.utils.dates import (
    day_bounds,
    end_of_day,
    ensure_aware,
    get_timezone,
    local_date,
    start_of_day,
)

logger = logging.getLogger(__name__)


class TimePreference(BaseModel):
    """Preferred placement of a timed job that has never been scheduled."""
    start_minute_of_day: int = Field(ge=0, lt=24 * 60)
    duration_minutes: int = Field(gt=0)


class ScheduleWindow(NamedTuple):
    start: datetime
    end: datetime


def default_time_preference() -> TimePreference:
    return TimePreference(
        start_minute_of_day=settings.DEFAULT_JOB_START_MINUTE,
        duration_minutes=settings.DEFAULT_JOB_DURATION_MINUTES,
    )


def parse_legacy_time_preference(notes: str | None) -> TimePreference | None:
    """
    Decode a {"timePreferences": {"startTime": "HH:MM", "duration": N}} notes blob.

    Anything else (plain text, malformed JSON, bad fields) yields None.
    """
    if not notes:
        return None
    try:
        payload = json.loads(notes)
    except ValueError:
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("timePreferences"), dict):
        return None

    raw = payload["timePreferences"]
    start_time = raw.get("startTime", "08:00")
    try:
        hour, minute = (int(part) for part in str(start_time).split(":", 1))
        if not (0 <= hour < 24 and 0 <= minute < 60):
            return None
        return TimePreference(
            start_minute_of_day=hour * 60 + minute,
            duration_minutes=int(raw.get("duration", settings.DEFAULT_JOB_DURATION_MINUTES)),
        )
    except (TypeError, ValueError, ValidationError):
        return None


# =============================================================================
# Day placement
# =============================================================================

def is_on_day(job: ScheduledJob, day_start: datetime, day_end: datetime) -> bool:
    """Half-open overlap: start < day_end and end > day_start (end defaults to start)."""
    if job.scheduled_start_at is None:
        return False
    job_start = ensure_aware(job.scheduled_start_at)
    job_end = ensure_aware(job.scheduled_end_at) if job.scheduled_end_at else job_start
    return job_start < day_end and job_end > day_start


def jobs_on_day(
    jobs: Iterable[ScheduledJob],
    day: date,
    timezone_name: str | None = None,
) -> list[ScheduledJob]:
    """
    Jobs occupying any part of a local calendar day.

    A job ending exactly at midnight belongs to the day before, not the day
    that starts at that midnight.
    """
    day_start, day_end = day_bounds(day, get_timezone(timezone_name))
    return [job for job in jobs if is_on_day(job, day_start, day_end)]


def list_day_jobs(
    db: Session,
    org_id: UUID,
    day: date,
    timezone_name: str | None = None,
    team_id: UUID | None = None,
) -> list[ScheduledJob]:
    """Load an organization's scheduled jobs for one day column, ordered by start."""
    day_start, day_end = day_bounds(day, get_timezone(timezone_name))
    query = select(ScheduledJob).where(
        ScheduledJob.org_id == org_id,
        ScheduledJob.scheduled_start_at.is_not(None),
        ScheduledJob.scheduled_start_at < day_end,
        or_(
            ScheduledJob.scheduled_end_at > day_start,
            and_(
                ScheduledJob.scheduled_end_at.is_(None),
                ScheduledJob.scheduled_start_at > day_start,
            ),
        ),
    )
    if team_id:
        query = query.where(ScheduledJob.team_id == team_id)
    candidates = db.execute(query.order_by(ScheduledJob.scheduled_start_at)).scalars().all()
    return jobs_on_day(candidates, day, timezone_name)


# =============================================================================
# Rescheduling
# =============================================================================

def compute_reschedule(
    job: ScheduledJob,
    target_day: date,
    timezone_name: str | None = None,
) -> ScheduleWindow:
    """New start/end when a job is dropped on target_day."""
    tz = get_timezone(timezone_name)

    if job.scheduled_start_at is None:
        if job.is_all_day:
            return ScheduleWindow(start_of_day(target_day, tz), end_of_day(target_day, tz))
        if job.time_preference:
            preference = TimePreference.model_validate(job.time_preference)
        else:
            preference = default_time_preference()
        start = start_of_day(target_day, tz) + timedelta(minutes=preference.start_minute_of_day)
        return ScheduleWindow(start, start + timedelta(minutes=preference.duration_minutes))

    # Subtract in UTC: same-zone aware datetimes subtract as wall clock
    original_start = ensure_aware(job.scheduled_start_at).astimezone(timezone.utc)
    original_end = (
        ensure_aware(job.scheduled_end_at).astimezone(timezone.utc)
        if job.scheduled_end_at
        else original_start
    )
    offset = original_start - start_of_day(local_date(original_start, tz), tz)
    duration = original_end - original_start

    new_start = start_of_day(target_day, tz) + offset
    return ScheduleWindow(new_start, new_start + duration)


def reschedule_job(
    db: Session,
    job: ScheduledJob,
    target_day: date,
    timezone_name: str | None = None,
) -> ScheduledJob:
    """Move a job to target_day; the tenant must confirm again."""
    window = compute_reschedule(job, target_day, timezone_name)
    job.scheduled_start_at = window.start
    job.scheduled_end_at = window.end
    job.status = ScheduledJobStatus.SCHEDULED.value
    job.tenant_confirmed = False
    db.commit()
    db.refresh(job)
    logger.info("Rescheduled job %s to %s", job.id, target_day.isoformat())
    return job


# =============================================================================
# Lifecycle
# =============================================================================

def create_scheduled_job(
    db: Session,
    org_id: UUID,
    team_id: UUID,
    title: str,
    job_id: UUID | None = None,
    notes: str | None = None,
    is_all_day: bool = True,
    duration_days: int = 1,
    time_preference: TimePreference | None = None,
    scheduled_start_at: datetime | None = None,
    scheduled_end_at: datetime | None = None,
) -> ScheduledJob:
    """
    Create a calendar entry.

    The time preference is decoded once here; when none is given it is read
    from a legacy notes payload if one is present.
    """
    if duration_days < 1:
        raise ValueError("duration_days must be at least 1")
    if scheduled_start_at is None and scheduled_end_at is not None:
        raise ValueError("scheduled_end_at requires scheduled_start_at")
    if scheduled_start_at and scheduled_end_at and scheduled_end_at < scheduled_start_at:
        raise ValueError("scheduled_end_at must not be before scheduled_start_at")

    preference = time_preference or parse_legacy_time_preference(notes)
    job = ScheduledJob(
        org_id=org_id,
        team_id=team_id,
        job_id=job_id,
        title=title,
        notes=notes,
        is_all_day=is_all_day,
        duration_days=duration_days,
        time_preference=preference.model_dump() if preference else None,
        scheduled_start_at=scheduled_start_at,
        scheduled_end_at=scheduled_end_at,
        status=(
            ScheduledJobStatus.SCHEDULED.value
            if scheduled_start_at
            else ScheduledJobStatus.UNSCHEDULED.value
        ),
        tenant_confirmed=False,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def unschedule_job(db: Session, job: ScheduledJob) -> ScheduledJob:
    """Take a job off the calendar."""
    job.scheduled_start_at = None
    job.scheduled_end_at = None
    job.status = ScheduledJobStatus.UNSCHEDULED.value
    job.tenant_confirmed = False
    db.commit()
    db.refresh(job)
    return job


def get_scheduled_job(db: Session, org_id: UUID, scheduled_job_id: UUID) -> ScheduledJob | None:
    return db.execute(
        select(ScheduledJob).where(
            ScheduledJob.id == scheduled_job_id,
            ScheduledJob.org_id == org_id,
        )
    ).scalar_one_or_none()
