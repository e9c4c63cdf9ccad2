"""Appointment proposal, proposal slot, and appointment models."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coordinator.db.base import Base
from coordinator.db.enums import AppointmentStatus, ProposalStatus, SlotStatus
from coordinator.utils.dates import utcnow

if TYPE_CHECKING:
    from coordinator.db.models import Job


class AppointmentProposal(Base):
    """
    A contractor's offer of 1-3 candidate appointment windows for a job.

    Lifecycle: pending → accepted/declined/countered/expired.
    A pending proposal past expires_at is expired whether or not the row has
    been updated yet.
    """

    __tablename__ = "appointment_proposals"
    __table_args__ = (
        Index("idx_appointment_proposals_job", "job_id", "contractor_id"),
        Index("idx_appointment_proposals_pending_expiry", "status", "expires_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    job_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False
    )
    contractor_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=ProposalStatus.PENDING.value,
        server_default=text(f"'{ProposalStatus.PENDING.value}'"),
        nullable=False,
    )
    estimated_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    estimated_duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    selected_slot_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    decline_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Auto-approval result (set on selection)
    auto_approved: Mapped[bool] = mapped_column(default=False, nullable=False)
    auto_approval_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    expires_at: Mapped[datetime] = mapped_column(nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )

    job: Mapped["Job"] = relationship()
    slots: Mapped[list["ProposalSlot"]] = relationship(
        back_populates="proposal",
        cascade="all, delete-orphan",
        order_by="ProposalSlot.slot_number",
    )


class ProposalSlot(Base):
    """One candidate window within a proposal. Owned by its proposal."""

    __tablename__ = "proposal_slots"
    __table_args__ = (
        UniqueConstraint("proposal_id", "slot_number", name="uq_proposal_slot_number"),
        CheckConstraint("slot_number BETWEEN 1 AND 3", name="ck_proposal_slot_number"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    proposal_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("appointment_proposals.id", ondelete="CASCADE"), nullable=False
    )
    slot_number: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[datetime] = mapped_column(nullable=False)
    end_time: Mapped[datetime] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=SlotStatus.PENDING.value,
        server_default=text(f"'{SlotStatus.PENDING.value}'"),
        nullable=False,
    )
    # Conflicting slots stay visible to the tenant, deprioritized
    is_available_for_tenant: Mapped[bool] = mapped_column(default=True, nullable=False)
    conflict_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    selected_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    proposal: Mapped["AppointmentProposal"] = relationship(back_populates="slots")


class Appointment(Base):
    """
    Booked visit created when a tenant selects a proposal slot.

    tenant_approved is True when the owner's approval policy auto-approved
    the booking; otherwise the owner still has to review it.
    """

    __tablename__ = "appointments"
    __table_args__ = (
        Index("idx_appointments_contractor_start", "contractor_id", "scheduled_start_at"),
        Index("idx_appointments_job", "job_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    job_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False
    )
    contractor_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True
    )
    proposal_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("appointment_proposals.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    scheduled_start_at: Mapped[datetime] = mapped_column(nullable=False)
    scheduled_end_at: Mapped[datetime] = mapped_column(nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        default=AppointmentStatus.SCHEDULED.value,
        server_default=text(f"'{AppointmentStatus.SCHEDULED.value}'"),
        nullable=False,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    tenant_approved: Mapped[bool] = mapped_column(default=False, nullable=False)
    tenant_approved_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
