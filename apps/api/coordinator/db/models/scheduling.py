"""Calendar and contractor availability models."""

from __future__ import annotations

import uuid
from datetime import datetime, time

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Time,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coordinator.db.base import Base
from coordinator.db.enums import ScheduledJobStatus
from coordinator.utils.dates import utcnow


class Team(Base):
    """A crew that calendar entries are assigned to."""

    __tablename__ = "teams"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)


class ScheduledJob(Base):
    """
    Calendar entry for a job (1:1 with Job in practice).

    No start means status Unscheduled. Every reschedule resets
    tenant_confirmed.
    """

    __tablename__ = "scheduled_jobs"
    __table_args__ = (
        Index("idx_scheduled_jobs_org_start", "org_id", "scheduled_start_at"),
        CheckConstraint(
            "scheduled_start_at IS NOT NULL OR status = 'Unscheduled'",
            name="ck_scheduled_jobs_unscheduled_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False
    )
    job_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("jobs.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    # {"start_minute_of_day": int, "duration_minutes": int}; decoded at write time
    time_preference: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    scheduled_start_at: Mapped[datetime | None] = mapped_column(nullable=True)
    scheduled_end_at: Mapped[datetime | None] = mapped_column(nullable=True)
    is_all_day: Mapped[bool] = mapped_column(default=True, nullable=False)
    duration_days: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=ScheduledJobStatus.UNSCHEDULED.value,
        server_default=text(f"'{ScheduledJobStatus.UNSCHEDULED.value}'"),
        nullable=False,
    )
    tenant_confirmed: Mapped[bool] = mapped_column(default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow, onupdate=utcnow, nullable=False
    )

    team: Mapped["Team"] = relationship()


class ContractorAvailability(Base):
    """Recurring weekly working window for a contractor (Monday=0, Sunday=6)."""

    __tablename__ = "contractor_availability"
    __table_args__ = (
        Index("idx_contractor_availability_contractor", "contractor_id", "day_of_week"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_availability_day"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contractor_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    # IANA zone the wall-clock times are expressed in
    timezone: Mapped[str] = mapped_column(String(50), nullable=False, default="UTC")
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)


class ContractorBlackout(Base):
    """One-off unavailable period for a contractor, half-open [start_at, end_at)."""

    __tablename__ = "contractor_blackouts"
    __table_args__ = (
        Index("idx_contractor_blackouts_contractor", "contractor_id", "start_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contractor_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    start_at: Mapped[datetime] = mapped_column(nullable=False)
    end_at: Mapped[datetime] = mapped_column(nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
