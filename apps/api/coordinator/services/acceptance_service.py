"""Acceptance service - atomic hand-off of an unassigned job to a contractor.

The conditional UPDATE (WHERE assigned_contractor_id IS NULL) is the only
concurrency guard: when several contractors race for the same job exactly one
statement matches a row. Eligibility is checked first for a precise reason,
but a passing check never implies the update will win.
"""

import logging
from datetime import datetime
from typing import NamedTuple
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from coordinator.core.constants import REASON_ALREADY_ASSIGNED, REASON_JOB_NOT_FOUND
from coordinator.core.structured_logging import build_log_context
from coordinator.db.enums import JobStatus, OrgLinkStatus
from coordinator.db.models import ContractorOrgLink, Job
from coordinator.services import eligibility_service
from coordinator.utils.dates import utcnow

logger = logging.getLogger(__name__)

# Status a job moves to when a contractor takes it
ACCEPTED_JOB_STATUS = JobStatus.IN_PROGRESS


class AcceptanceResult(NamedTuple):
    """Outcome of an accept attempt. error is the user-facing reason."""
    success: bool
    error: str | None = None


def accept_job(
    db: Session,
    contractor_id: UUID,
    job_id: UUID,
    now: datetime | None = None,
) -> AcceptanceResult:
    """
    Assign an unassigned job to a contractor.

    A lost race reports "already assigned", same as a stale read.
    The org link refresh afterwards is best-effort.
    """
    job = db.get(Job, job_id)
    if job is None:
        return AcceptanceResult(False, REASON_JOB_NOT_FOUND)

    eligibility = eligibility_service.can_accept(db, contractor_id, job)
    if not eligibility.ok:
        return AcceptanceResult(False, eligibility.reason)

    now = now or utcnow()
    org_id = job.org_id

    result = db.execute(
        update(Job)
        .where(Job.id == job_id, Job.assigned_contractor_id.is_(None))
        .values(
            assigned_contractor_id=contractor_id,
            status=ACCEPTED_JOB_STATUS.value,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        db.rollback()
        logger.info(
            "Job acceptance lost race",
            extra=build_log_context(contractor_id=contractor_id, job_id=job_id),
        )
        return AcceptanceResult(False, REASON_ALREADY_ASSIGNED)

    db.commit()
    logger.info(
        "Job accepted",
        extra=build_log_context(contractor_id=contractor_id, job_id=job_id, org_id=org_id),
    )

    if org_id is not None:
        _refresh_org_link(db, contractor_id, org_id, now)

    return AcceptanceResult(True)


# =============================================================================
# Org links
# =============================================================================

def upsert_org_link(
    db: Session,
    contractor_id: UUID,
    org_id: UUID,
    now: datetime,
) -> ContractorOrgLink:
    """Create or re-activate the contractor ↔ org link (flushes, no commit)."""
    link = db.execute(
        select(ContractorOrgLink).where(
            ContractorOrgLink.contractor_id == contractor_id,
            ContractorOrgLink.org_id == org_id,
        )
    ).scalar_one_or_none()

    if link:
        link.last_job_at = now
        link.status = OrgLinkStatus.ACTIVE.value
    else:
        link = ContractorOrgLink(
            contractor_id=contractor_id,
            org_id=org_id,
            status=OrgLinkStatus.ACTIVE.value,
            last_job_at=now,
        )
        db.add(link)
    db.flush()
    return link


def _refresh_org_link(db: Session, contractor_id: UUID, org_id: UUID, now: datetime) -> None:
    """Upsert the org link without ever failing the acceptance."""
    context = build_log_context(contractor_id=contractor_id, org_id=org_id)
    for _ in range(2):
        try:
            upsert_org_link(db, contractor_id, org_id, now)
            db.commit()
            return
        except IntegrityError:
            # A concurrent acceptance inserted the link first; retry as update
            db.rollback()
        except SQLAlchemyError:
            db.rollback()
            logger.exception("Failed to refresh contractor org link", extra=context)
            return
    logger.warning("Gave up refreshing contractor org link", extra=context)
