"""Approval policy model."""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import JSON, Date, ForeignKey, Index, Numeric, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from coordinator.db.base import Base
from coordinator.db.enums import InvolvementMode
from coordinator.utils.dates import utcnow


class ApprovalPolicy(Base):
    """
    Organization-level auto-approval rules for proposed appointments.

    At most one active policy per organization (partial unique index).
    involvement_mode only seeds the other fields; the evaluator ignores it.
    """

    __tablename__ = "approval_policies"
    __table_args__ = (
        Index(
            "uq_approval_policies_one_active",
            "org_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(
        default=True, server_default=text("true"), nullable=False
    )

    # Contractor ids (as strings) whose bookings auto-approve
    trusted_contractor_ids: Mapped[list[str]] = mapped_column(
        JSON, default=list, nullable=False
    )

    # Time windows
    auto_approve_weekdays: Mapped[bool] = mapped_column(default=True, nullable=False)
    auto_approve_weekends: Mapped[bool] = mapped_column(default=False, nullable=False)
    auto_approve_evenings: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Vacation relax-mode: approve everything inside the window
    block_vacation_dates: Mapped[bool] = mapped_column(default=False, nullable=False)
    vacation_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    vacation_end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Cost thresholds
    auto_approve_cost_limit: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True
    )
    require_approval_over: Mapped[Decimal | None] = mapped_column(
        Numeric(10, 2), nullable=True
    )

    auto_approve_emergencies: Mapped[bool] = mapped_column(default=True, nullable=False)

    involvement_mode: Mapped[str] = mapped_column(
        String(20),
        default=InvolvementMode.BALANCED.value,
        server_default=text(f"'{InvolvementMode.BALANCED.value}'"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )
