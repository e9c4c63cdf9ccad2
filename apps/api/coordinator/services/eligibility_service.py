"""Eligibility service - which contractor may see and accept which job.

Rules, in order (first failure wins):
1. Job must be unassigned
2. Contractor profile must exist and be available (acceptance only)
3. Org jobs need an active contractor ↔ org link
4. Favorites-only jobs need the contractor to be an org favorite, unless urgent
5. Specialty matching (pass-through)

Visibility applies rules 1, 3 and 4 so contractors can browse while their
availability toggle is off.
"""

from typing import NamedTuple
from uuid import UUID

from sqlalchemy import case, select
from sqlalchemy.orm import Session

from coordinator.core.constants import (
    REASON_ALREADY_ASSIGNED,
    REASON_CONTRACTOR_NOT_AVAILABLE,
    REASON_NO_ORG_RELATIONSHIP,
    REASON_RESTRICTED_TO_FAVORITES,
)
from coordinator.db.enums import JobPriority, OrgLinkStatus
from coordinator.db.models import ContractorOrgLink, ContractorProfile, FavoriteContractor, Job


class EligibilityResult(NamedTuple):
    """Outcome of an eligibility check. reason is set only when ok is False."""
    ok: bool
    reason: str | None = None


ELIGIBLE = EligibilityResult(ok=True)


# =============================================================================
# Individual rules
# =============================================================================

def _check_unassigned(job: Job) -> EligibilityResult:
    if job.assigned_contractor_id is not None:
        return EligibilityResult(False, REASON_ALREADY_ASSIGNED)
    return ELIGIBLE


def _check_profile_available(db: Session, contractor_id: UUID) -> EligibilityResult:
    profile = db.execute(
        select(ContractorProfile).where(ContractorProfile.user_id == contractor_id)
    ).scalar_one_or_none()
    if profile is None or not profile.is_available:
        return EligibilityResult(False, REASON_CONTRACTOR_NOT_AVAILABLE)
    return ELIGIBLE


def has_active_org_link(db: Session, contractor_id: UUID, org_id: UUID) -> bool:
    """True if the contractor has an active relationship with the org."""
    link_id = db.execute(
        select(ContractorOrgLink.id).where(
            ContractorOrgLink.contractor_id == contractor_id,
            ContractorOrgLink.org_id == org_id,
            ContractorOrgLink.status == OrgLinkStatus.ACTIVE.value,
        )
    ).first()
    return link_id is not None


def is_favorite(db: Session, contractor_id: UUID, org_id: UUID) -> bool:
    """True if the org marked the contractor as a favorite."""
    favorite_id = db.execute(
        select(FavoriteContractor.id).where(
            FavoriteContractor.org_id == org_id,
            FavoriteContractor.contractor_id == contractor_id,
        )
    ).first()
    return favorite_id is not None


def _check_org_link(db: Session, contractor_id: UUID, job: Job) -> EligibilityResult:
    # Legacy org-less jobs are open to any eligible contractor
    if job.org_id is None:
        return ELIGIBLE
    if not has_active_org_link(db, contractor_id, job.org_id):
        return EligibilityResult(False, REASON_NO_ORG_RELATIONSHIP)
    return ELIGIBLE


def _check_favorites(db: Session, contractor_id: UUID, job: Job) -> EligibilityResult:
    # Urgent jobs are never blocked by the favorites gate
    if not job.restrict_to_favorites or job.is_urgent or job.org_id is None:
        return ELIGIBLE
    if not is_favorite(db, contractor_id, job.org_id):
        return EligibilityResult(False, REASON_RESTRICTED_TO_FAVORITES)
    return ELIGIBLE


def _check_specialty(contractor_id: UUID, job: Job) -> EligibilityResult:
    # No-op: jobs carry only a free-text category and there is no agreed
    # mapping to contractor specialties, so every contractor matches.
    return ELIGIBLE


# =============================================================================
# Public API
# =============================================================================

def check_visibility(db: Session, contractor_id: UUID, job: Job) -> EligibilityResult:
    """Visibility rules (1, 3, 4) with the first failing reason."""
    result = _check_unassigned(job)
    if not result.ok:
        return result
    result = _check_org_link(db, contractor_id, job)
    if not result.ok:
        return result
    return _check_favorites(db, contractor_id, job)


def is_visible(db: Session, contractor_id: UUID, job: Job) -> bool:
    """Whether the job shows up in the contractor's marketplace."""
    return check_visibility(db, contractor_id, job).ok


def can_accept(db: Session, contractor_id: UUID, job: Job) -> EligibilityResult:
    """Full acceptance check (rules 1-5)."""
    result = _check_unassigned(job)
    if not result.ok:
        return result
    result = _check_profile_available(db, contractor_id)
    if not result.ok:
        return result
    result = _check_org_link(db, contractor_id, job)
    if not result.ok:
        return result
    result = _check_favorites(db, contractor_id, job)
    if not result.ok:
        return result
    return _check_specialty(contractor_id, job)


def list_marketplace_jobs(
    db: Session,
    contractor_id: UUID,
    org_id: UUID | None = None,
    is_urgent: bool | None = None,
) -> list[Job]:
    """
    Unassigned jobs visible to a contractor.

    Ordered by priority (Urgent first), then most recently posted.
    """
    priority_rank = case(
        {p.value: p.rank for p in JobPriority},
        value=Job.priority,
        else_=JobPriority.MEDIUM.rank,
    )
    query = select(Job).where(Job.assigned_contractor_id.is_(None))
    if org_id is not None:
        query = query.where(Job.org_id == org_id)
    if is_urgent is not None:
        query = query.where(Job.is_urgent == is_urgent)
    query = query.order_by(priority_rank.desc(), Job.posted_at.desc())

    jobs = db.execute(query).scalars().all()
    return [job for job in jobs if is_visible(db, contractor_id, job)]
