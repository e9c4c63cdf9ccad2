"""Appointment proposal endpoints.

Contractors create proposals; tenants (or the organization's owner/admin)
select a slot or decline.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from coordinator.core.constants import REASON_ASSIGNED_TO_OTHER, REASON_JOB_NOT_FOUND
from coordinator.core.deps import get_db, get_caller, require_roles
from coordinator.db.enums import Role, SelectionOutcome
from coordinator.schemas.auth import CallerContext
from coordinator.schemas.proposal import (
    AppointmentRead,
    ProposalCreate,
    ProposalDecline,
    ProposalRead,
    ProposalSlotRead,
    SlotSelectionResponse,
)
from coordinator.services import proposal_service
from coordinator.services.proposal_service import NegotiationResult, ProposalView, SlotInput

router = APIRouter()

TENANT_SIDE_ROLES = [Role.TENANT, Role.OWNER, Role.ADMIN]

_OUTCOME_STATUS = {
    SelectionOutcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    SelectionOutcome.EXPIRED: status.HTTP_410_GONE,
    SelectionOutcome.NOT_PENDING: status.HTTP_409_CONFLICT,
}

# Any other creation failure is an eligibility refusal (403)
_CREATE_ERROR_STATUS = {
    REASON_JOB_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    REASON_ASSIGNED_TO_OTHER: status.HTTP_409_CONFLICT,
}


def _to_read(view: ProposalView) -> ProposalRead:
    proposal = view.proposal
    return ProposalRead(
        id=proposal.id,
        job_id=proposal.job_id,
        contractor_id=proposal.contractor_id,
        status=view.status.value,
        estimated_cost=proposal.estimated_cost,
        estimated_duration_minutes=proposal.estimated_duration_minutes,
        notes=proposal.notes,
        selected_slot_id=proposal.selected_slot_id,
        decline_reason=proposal.decline_reason,
        auto_approved=proposal.auto_approved,
        auto_approval_reason=proposal.auto_approval_reason,
        expires_at=proposal.expires_at,
        created_at=proposal.created_at,
        slots=[ProposalSlotRead.model_validate(slot) for slot in proposal.slots],
    )


def _raise_for_outcome(result: NegotiationResult) -> None:
    code = _OUTCOME_STATUS.get(result.outcome)
    if code is not None:
        raise HTTPException(status_code=code, detail=result.error)


def _is_party(caller: CallerContext, proposal) -> bool:
    job = proposal.job
    if caller.role == Role.CONTRACTOR:
        return proposal.contractor_id == caller.user_id
    if caller.role == Role.TENANT:
        return job.reporter_user_id == caller.user_id
    return job.org_id is not None and job.org_id == caller.org_id


def _load_visible(db: Session, caller: CallerContext, proposal_id: UUID) -> ProposalView:
    """Load a proposal the caller is a party to; 404 otherwise."""
    view = proposal_service.get_proposal(db, proposal_id)
    if view is None or not _is_party(caller, view.proposal):
        raise HTTPException(status_code=404, detail="Proposal not found")
    return view


# =============================================================================
# Contractor side
# =============================================================================

@router.post(
    "/jobs/{job_id}/proposals",
    response_model=ProposalRead,
    status_code=status.HTTP_201_CREATED,
)
def create_proposal(
    job_id: UUID,
    data: ProposalCreate,
    caller: CallerContext = Depends(require_roles([Role.CONTRACTOR])),
    db: Session = Depends(get_db),
):
    """
    Offer 1-3 appointment windows; replaces the caller's pending proposal.

    Raises:
        HTTPException 403: Caller may not work this job
        HTTPException 404: Job not found
        HTTPException 409: Job is assigned to another contractor
    """
    try:
        result = proposal_service.create_proposal(
            db,
            contractor_id=caller.user_id,
            job_id=job_id,
            slots=[SlotInput(s.start, s.end) for s in data.slots],
            estimated_cost=data.estimated_cost,
            notes=data.notes,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not result.success:
        raise HTTPException(
            status_code=_CREATE_ERROR_STATUS.get(result.error, status.HTTP_403_FORBIDDEN),
            detail=result.error,
        )
    return _to_read(ProposalView(result.proposal, proposal_service.effective_status(result.proposal)))


@router.get("/jobs/{job_id}/proposals", response_model=list[ProposalRead])
def list_job_proposals(
    job_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Proposals for a job that the caller is a party to."""
    views = proposal_service.list_job_proposals(db, job_id)
    return [_to_read(view) for view in views if _is_party(caller, view.proposal)]


@router.get("/proposals/{proposal_id}", response_model=ProposalRead)
def get_proposal(
    proposal_id: UUID,
    caller: CallerContext = Depends(get_caller),
    db: Session = Depends(get_db),
):
    """Get a proposal; a lapsed pending proposal reads as expired."""
    return _to_read(_load_visible(db, caller, proposal_id))


# =============================================================================
# Tenant side
# =============================================================================

@router.post(
    "/proposals/{proposal_id}/slots/{slot_id}/select",
    response_model=SlotSelectionResponse,
)
def select_slot(
    proposal_id: UUID,
    slot_id: UUID,
    caller: CallerContext = Depends(require_roles(TENANT_SIDE_ROLES)),
    db: Session = Depends(get_db),
):
    """Pick one slot; 410 when the proposal has expired."""
    _load_visible(db, caller, proposal_id)
    result = proposal_service.select_slot(db, proposal_id, slot_id)
    _raise_for_outcome(result)

    view = ProposalView(result.proposal, proposal_service.effective_status(result.proposal))
    return SlotSelectionResponse(
        outcome=result.outcome.value,
        auto_approved=result.decision.auto_approve,
        reason=result.decision.reason,
        proposal=_to_read(view),
        appointment=AppointmentRead.model_validate(result.appointment),
    )


@router.post("/proposals/{proposal_id}/decline", response_model=ProposalRead)
def decline_proposal(
    proposal_id: UUID,
    data: ProposalDecline,
    caller: CallerContext = Depends(require_roles(TENANT_SIDE_ROLES)),
    db: Session = Depends(get_db),
):
    """Reject every slot."""
    _load_visible(db, caller, proposal_id)
    result = proposal_service.decline_all(db, proposal_id, data.reason)
    _raise_for_outcome(result)
    return _to_read(ProposalView(result.proposal, proposal_service.effective_status(result.proposal)))


@router.post("/proposals/{proposal_id}/counter", response_model=ProposalRead)
def counter_proposal(
    proposal_id: UUID,
    data: ProposalDecline,
    caller: CallerContext = Depends(require_roles(TENANT_SIDE_ROLES)),
    db: Session = Depends(get_db),
):
    """Ask the contractor for other times."""
    _load_visible(db, caller, proposal_id)
    result = proposal_service.counter_proposal(db, proposal_id, data.reason)
    _raise_for_outcome(result)
    return _to_read(ProposalView(result.proposal, proposal_service.effective_status(result.proposal)))
