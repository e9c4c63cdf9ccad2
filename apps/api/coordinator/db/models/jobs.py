"""Maintenance job model."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Numeric, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coordinator.db.base import Base
from coordinator.db.enums import JobPriority, JobStatus
from coordinator.utils.dates import utcnow

if TYPE_CHECKING:
    from coordinator.db.models import Organization


class Job(Base):
    """
    A maintenance case eligible for contractor assignment.

    assigned_contractor_id only ever moves from NULL to a contractor here;
    reassignment belongs to other flows.
    """

    __tablename__ = "jobs"
    __table_args__ = (
        Index("idx_jobs_unassigned", "org_id", "assigned_contractor_id"),
        Index("idx_jobs_org_status", "org_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    # NULL for legacy org-less jobs
    org_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    reporter_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    assigned_contractor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    is_urgent: Mapped[bool] = mapped_column(
        default=False, server_default=text("false"), nullable=False
    )
    restrict_to_favorites: Mapped[bool] = mapped_column(
        default=False, server_default=text("false"), nullable=False
    )
    priority: Mapped[str] = mapped_column(
        String(20),
        default=JobPriority.MEDIUM.value,
        server_default=text(f"'{JobPriority.MEDIUM.value}'"),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=JobStatus.NEW.value,
        server_default=text(f"'{JobStatus.NEW.value}'"),
        nullable=False,
    )
    estimated_cost: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    posted_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )

    organization: Mapped["Organization"] = relationship()
