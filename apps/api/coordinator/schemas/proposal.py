"""Appointment proposal schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# Requests
# =============================================================================

class SlotCreate(BaseModel):
    start: datetime
    end: datetime

    @model_validator(mode="after")
    def _check_order(self):
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class ProposalCreate(BaseModel):
    """Contractor offers 1-3 windows for a job."""
    slots: list[SlotCreate] = Field(..., min_length=1, max_length=3)
    estimated_cost: Decimal | None = Field(None, ge=0)
    notes: str | None = Field(None, max_length=5000)


class ProposalDecline(BaseModel):
    reason: str | None = Field(None, max_length=2000)


# =============================================================================
# Responses
# =============================================================================

class ProposalSlotRead(BaseModel):
    id: UUID
    slot_number: int
    start_time: datetime
    end_time: datetime
    status: str
    is_available_for_tenant: bool
    conflict_reason: str | None
    selected_at: datetime | None

    model_config = {"from_attributes": True}


class ProposalRead(BaseModel):
    """Proposal with effective status; a lapsed pending proposal reads as expired."""
    id: UUID
    job_id: UUID
    contractor_id: UUID
    status: str
    estimated_cost: Decimal | None
    estimated_duration_minutes: int | None
    notes: str | None
    selected_slot_id: UUID | None
    decline_reason: str | None
    auto_approved: bool
    auto_approval_reason: str | None
    expires_at: datetime
    created_at: datetime
    slots: list[ProposalSlotRead]


class AppointmentRead(BaseModel):
    id: UUID
    job_id: UUID
    contractor_id: UUID
    org_id: UUID | None
    proposal_id: UUID | None
    scheduled_start_at: datetime
    scheduled_end_at: datetime
    status: str
    tenant_approved: bool
    tenant_approved_at: datetime | None

    model_config = {"from_attributes": True}


class SlotSelectionResponse(BaseModel):
    """Outcome of a tenant selecting a slot."""
    outcome: str
    auto_approved: bool
    reason: str
    proposal: ProposalRead
    appointment: AppointmentRead
