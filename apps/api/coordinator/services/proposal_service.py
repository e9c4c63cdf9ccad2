"""Proposal service - multi-slot appointment negotiation.

Handles:
- Proposal creation, limited to the assignee or an eligible contractor, with
  per-slot conflict annotation (blackouts, weekly availability); conflicting
  slots stay visible, flagged for the tenant
- Job status only moves forward (an accepted job stays In Progress)
- Slot selection: single-selection invariant, approval policy evaluation,
  appointment creation, owner-review notification
- Decline and counter
- Lazy expiry: a pending proposal past expires_at is expired on every read
  and refuses every write, with or without the bulk sweep having run
"""

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import NamedTuple, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from coordinator.core.config import settings
from coordinator.core.constants import (
    CONFLICT_BLACKOUT,
    CONFLICT_OUTSIDE_AVAILABILITY,
    REASON_ASSIGNED_TO_OTHER,
    REASON_JOB_NOT_FOUND,
    REASON_PROPOSAL_EXPIRED,
    REASON_PROPOSAL_NOT_FOUND,
    REASON_PROPOSAL_NOT_PENDING,
    REASON_SLOT_NOT_FOUND,
)
from coordinator.core.structured_logging import build_log_context
from coordinator.db.enums import JobStatus, ProposalStatus, SelectionOutcome, SlotStatus
from coordinator.db.models import (
    Appointment,
    AppointmentProposal,
    ContractorAvailability,
    ContractorBlackout,
    Job,
    ProposalSlot,
)
from coordinator.services import (
    approval_evaluator,
    approval_policy_service,
    eligibility_service,
    notification_facade,
)
from coordinator.services.approval_evaluator import AppointmentCandidate, ApprovalDecision
from coordinator.utils.dates import ensure_aware, get_timezone, utcnow

logger = logging.getLogger(__name__)


# =============================================================================
# Types
# =============================================================================

class SlotInput(NamedTuple):
    """A candidate window offered by the contractor."""
    start: datetime
    end: datetime


class ProposalResult(NamedTuple):
    """Outcome of proposal creation."""
    success: bool
    proposal: AppointmentProposal | None = None
    error: str | None = None


class NegotiationResult(NamedTuple):
    """Outcome of a tenant action on a proposal (select, decline, counter)."""
    outcome: SelectionOutcome
    proposal: AppointmentProposal | None = None
    appointment: Appointment | None = None
    decision: ApprovalDecision | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.outcome in (
            SelectionOutcome.SELECTED,
            SelectionOutcome.DECLINED,
            SelectionOutcome.COUNTERED,
        )


class ProposalView(NamedTuple):
    """A proposal as presented to readers, with lazily derived status."""
    proposal: AppointmentProposal
    status: ProposalStatus


def proposal_ttl() -> timedelta:
    return timedelta(hours=settings.PROPOSAL_TTL_HOURS)


# =============================================================================
# Expiry
# =============================================================================

def effective_status(proposal: AppointmentProposal, now: datetime | None = None) -> ProposalStatus:
    """Stored status, except a pending proposal at or past expires_at is expired."""
    now = now or utcnow()
    status = ProposalStatus(proposal.status)
    if status == ProposalStatus.PENDING and now >= ensure_aware(proposal.expires_at):
        return ProposalStatus.EXPIRED
    return status


def expire_stale_proposals(
    db: Session,
    now: datetime | None = None,
    job_id: UUID | None = None,
) -> int:
    """Persist expiry for pending proposals past their TTL. Returns rows updated."""
    now = now or utcnow()
    query = (
        update(AppointmentProposal)
        .where(
            AppointmentProposal.status == ProposalStatus.PENDING.value,
            AppointmentProposal.expires_at <= now,
        )
        .values(status=ProposalStatus.EXPIRED.value, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if job_id:
        query = query.where(AppointmentProposal.job_id == job_id)
    updated = db.execute(query).rowcount
    if updated:
        db.commit()
        logger.info("Expired %d stale appointment proposals", updated)
    return updated


def _flush_expiry(db: Session, proposal: AppointmentProposal, now: datetime) -> None:
    proposal.status = ProposalStatus.EXPIRED.value
    proposal.updated_at = now
    db.commit()


# =============================================================================
# Conflict detection
# =============================================================================

def _fits_window(window: ContractorAvailability, start: datetime, end: datetime) -> bool:
    tz = get_timezone(window.timezone)
    local_start = start.astimezone(tz)
    local_end = end.astimezone(tz)
    if local_start.weekday() != window.day_of_week:
        return False
    if local_end.date() != local_start.date():
        return False
    return window.start_time <= local_start.time() and local_end.time() <= window.end_time


def find_slot_conflict(
    db: Session,
    contractor_id: UUID,
    start: datetime,
    end: datetime,
) -> str | None:
    """
    Why a contractor cannot take [start, end), or None.

    Blackouts are half-open. A contractor with no active weekly windows is
    treated as unrestricted.
    """
    blackout = db.execute(
        select(ContractorBlackout)
        .where(
            ContractorBlackout.contractor_id == contractor_id,
            ContractorBlackout.start_at < end,
            ContractorBlackout.end_at > start,
        )
        .order_by(ContractorBlackout.start_at)
        .limit(1)
    ).scalar_one_or_none()
    if blackout:
        if blackout.reason:
            return f"{CONFLICT_BLACKOUT}: {blackout.reason}"
        return CONFLICT_BLACKOUT

    windows = db.execute(
        select(ContractorAvailability).where(
            ContractorAvailability.contractor_id == contractor_id,
            ContractorAvailability.is_active.is_(True),
        )
    ).scalars().all()
    if windows and not any(_fits_window(w, start, end) for w in windows):
        return CONFLICT_OUTSIDE_AVAILABILITY
    return None


# =============================================================================
# Creation
# =============================================================================

def _validate_slots(slots: Sequence[SlotInput]) -> list[SlotInput]:
    if not 1 <= len(slots) <= settings.MAX_PROPOSAL_SLOTS:
        raise ValueError(
            f"A proposal needs between 1 and {settings.MAX_PROPOSAL_SLOTS} slots"
        )
    normalized = []
    for slot in slots:
        start = ensure_aware(slot.start)
        end = ensure_aware(slot.end)
        if end <= start:
            raise ValueError("Slot end must be after slot start")
        normalized.append(SlotInput(start, end))
    return normalized


def check_can_propose(db: Session, contractor_id: UUID, job: Job) -> eligibility_service.EligibilityResult:
    """
    Whether the contractor may offer times for the job.

    An assigned job takes proposals from its assignee only; an open job from
    any contractor who could accept it.
    """
    if job.assigned_contractor_id is not None:
        if job.assigned_contractor_id != contractor_id:
            return eligibility_service.EligibilityResult(False, REASON_ASSIGNED_TO_OTHER)
        return eligibility_service.ELIGIBLE
    return eligibility_service.can_accept(db, contractor_id, job)


def _advance_job_status(job: Job, target: JobStatus) -> None:
    """Move the job forward in its lifecycle, never back."""
    if JobStatus.has_value(job.status) and JobStatus(job.status).rank < target.rank:
        job.status = target.value


def create_proposal(
    db: Session,
    contractor_id: UUID,
    job_id: UUID,
    slots: Sequence[SlotInput],
    estimated_cost: Decimal | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> ProposalResult:
    """
    Offer 1-3 appointment windows for a job.

    Replaces the contractor's own pending proposal for the same job.
    Moves an earlier job to In Review and notifies the reporter. Fails
    without writing when the contractor may not work the job.
    """
    slots = _validate_slots(slots)
    now = now or utcnow()

    expire_stale_proposals(db, now=now, job_id=job_id)

    job = db.get(Job, job_id)
    if job is None:
        return ProposalResult(False, error=REASON_JOB_NOT_FOUND)

    eligibility = check_can_propose(db, contractor_id, job)
    if not eligibility.ok:
        return ProposalResult(False, error=eligibility.reason)

    superseded = db.execute(
        select(AppointmentProposal).where(
            AppointmentProposal.job_id == job_id,
            AppointmentProposal.contractor_id == contractor_id,
            AppointmentProposal.status == ProposalStatus.PENDING.value,
        )
    ).scalars().all()
    for old in superseded:
        db.delete(old)
    if superseded:
        db.flush()
        logger.info(
            "Replaced %d pending proposal(s)",
            len(superseded),
            extra=build_log_context(contractor_id=contractor_id, job_id=job_id),
        )

    first = slots[0]
    proposal = AppointmentProposal(
        job_id=job_id,
        contractor_id=contractor_id,
        status=ProposalStatus.PENDING.value,
        estimated_cost=estimated_cost,
        estimated_duration_minutes=int((first.end - first.start).total_seconds() // 60),
        notes=notes,
        expires_at=now + proposal_ttl(),
    )
    for number, slot in enumerate(slots, start=1):
        conflict = find_slot_conflict(db, contractor_id, slot.start, slot.end)
        proposal.slots.append(
            ProposalSlot(
                slot_number=number,
                start_time=slot.start,
                end_time=slot.end,
                status=SlotStatus.PENDING.value,
                is_available_for_tenant=conflict is None,
                conflict_reason=conflict,
            )
        )
    db.add(proposal)
    _advance_job_status(job, JobStatus.IN_REVIEW)
    db.commit()
    db.refresh(proposal)

    notification_facade.notify_proposal_submitted(
        reporter_user_id=job.reporter_user_id,
        job_id=job.id,
        job_title=job.title,
        proposal_id=proposal.id,
        slot_count=len(proposal.slots),
    )
    return ProposalResult(True, proposal=proposal)


# =============================================================================
# Reads
# =============================================================================

def get_proposal(
    db: Session,
    proposal_id: UUID,
    now: datetime | None = None,
) -> ProposalView | None:
    """Load a proposal with its effective status."""
    proposal = db.get(AppointmentProposal, proposal_id)
    if proposal is None:
        return None
    return ProposalView(proposal=proposal, status=effective_status(proposal, now))


def list_job_proposals(
    db: Session,
    job_id: UUID,
    now: datetime | None = None,
) -> list[ProposalView]:
    """All proposals for a job, newest first, with effective status."""
    proposals = db.execute(
        select(AppointmentProposal)
        .where(AppointmentProposal.job_id == job_id)
        .order_by(AppointmentProposal.created_at.desc())
    ).scalars().all()
    return [ProposalView(p, effective_status(p, now)) for p in proposals]


# =============================================================================
# Tenant actions
# =============================================================================

def _load_for_write(
    db: Session,
    proposal_id: UUID,
    now: datetime,
) -> tuple[AppointmentProposal | None, NegotiationResult | None]:
    """Lock a proposal for a tenant action; return a failure result if it cannot proceed."""
    proposal = db.execute(
        select(AppointmentProposal)
        .where(AppointmentProposal.id == proposal_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one_or_none()
    if proposal is None:
        return None, NegotiationResult(SelectionOutcome.NOT_FOUND, error=REASON_PROPOSAL_NOT_FOUND)

    status = effective_status(proposal, now)
    if status == ProposalStatus.EXPIRED:
        if proposal.status != ProposalStatus.EXPIRED.value:
            _flush_expiry(db, proposal, now)
        return None, NegotiationResult(
            SelectionOutcome.EXPIRED, proposal=proposal, error=REASON_PROPOSAL_EXPIRED
        )
    if status != ProposalStatus.PENDING:
        db.rollback()
        return None, NegotiationResult(
            SelectionOutcome.NOT_PENDING, proposal=proposal, error=REASON_PROPOSAL_NOT_PENDING
        )
    return proposal, None


def select_slot(
    db: Session,
    proposal_id: UUID,
    slot_id: UUID,
    now: datetime | None = None,
) -> NegotiationResult:
    """
    Tenant picks one slot.

    The chosen slot becomes Selected and every sibling Declined in the same
    transaction as the appointment insert. The proposal is accepted either
    way; the policy decision only sets the appointment's approval flag.
    """
    now = now or utcnow()
    proposal, failure = _load_for_write(db, proposal_id, now)
    if failure:
        return failure

    slot = next((s for s in proposal.slots if s.id == slot_id), None)
    if slot is None:
        db.rollback()
        return NegotiationResult(
            SelectionOutcome.NOT_FOUND, proposal=proposal, error=REASON_SLOT_NOT_FOUND
        )

    for sibling in proposal.slots:
        sibling.status = (
            SlotStatus.SELECTED.value if sibling.id == slot.id else SlotStatus.DECLINED.value
        )
    slot.selected_at = now
    proposal.selected_slot_id = slot.id
    proposal.status = ProposalStatus.ACCEPTED.value

    job = proposal.job
    org = job.organization if job.org_id else None
    policies = approval_policy_service.list_policies(db, job.org_id) if job.org_id else []
    decision = approval_evaluator.evaluate_for_org(
        policies,
        AppointmentCandidate(
            contractor_id=proposal.contractor_id,
            proposed_start=slot.start_time,
            estimated_cost=proposal.estimated_cost,
            is_urgent=job.is_urgent,
        ),
        org.timezone if org else None,
    )
    proposal.auto_approved = decision.auto_approve
    proposal.auto_approval_reason = decision.reason

    appointment = Appointment(
        job_id=job.id,
        contractor_id=proposal.contractor_id,
        org_id=job.org_id,
        proposal_id=proposal.id,
        title=job.title,
        scheduled_start_at=slot.start_time,
        scheduled_end_at=slot.end_time,
        notes=proposal.notes,
        tenant_approved=decision.auto_approve,
        tenant_approved_at=now if decision.auto_approve else None,
    )
    db.add(appointment)
    _advance_job_status(
        job, JobStatus.SCHEDULED if decision.auto_approve else JobStatus.IN_REVIEW
    )
    db.commit()
    db.refresh(appointment)

    logger.info(
        "Proposal slot selected (auto_approved=%s, reason=%s)",
        decision.auto_approve,
        decision.reason,
        extra=build_log_context(proposal_id=proposal.id, job_id=job.id, org_id=job.org_id),
    )

    if not decision.auto_approve:
        notification_facade.notify_owner_review_required(
            owner_user_id=org.owner_user_id if org else None,
            job_id=job.id,
            job_title=job.title,
            proposal_id=proposal.id,
            appointment_id=appointment.id,
            reason=decision.reason,
        )

    return NegotiationResult(
        SelectionOutcome.SELECTED,
        proposal=proposal,
        appointment=appointment,
        decision=decision,
    )


def decline_all(
    db: Session,
    proposal_id: UUID,
    reason: str | None = None,
    now: datetime | None = None,
) -> NegotiationResult:
    """Tenant rejects every slot."""
    now = now or utcnow()
    proposal, failure = _load_for_write(db, proposal_id, now)
    if failure:
        return failure

    for slot in proposal.slots:
        slot.status = SlotStatus.DECLINED.value
    proposal.status = ProposalStatus.DECLINED.value
    proposal.decline_reason = reason
    db.commit()
    db.refresh(proposal)
    return NegotiationResult(SelectionOutcome.DECLINED, proposal=proposal)


def counter_proposal(
    db: Session,
    proposal_id: UUID,
    reason: str | None = None,
    now: datetime | None = None,
) -> NegotiationResult:
    """
    Tenant asks for other times.

    The row is labelled countered; the contractor answers with a new
    proposal, which starts pending again.
    """
    now = now or utcnow()
    proposal, failure = _load_for_write(db, proposal_id, now)
    if failure:
        return failure

    for slot in proposal.slots:
        slot.status = SlotStatus.DECLINED.value
    proposal.status = ProposalStatus.COUNTERED.value
    proposal.decline_reason = reason
    db.commit()
    db.refresh(proposal)
    return NegotiationResult(SelectionOutcome.COUNTERED, proposal=proposal)
