"""Organization and contractor relationship models."""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from coordinator.db.base import Base
from coordinator.db.enums import OrgLinkStatus
from coordinator.utils.dates import utcnow


class Organization(Base):
    """
    A tenant/company in the multi-tenant system.

    Jobs, calendar entries and approval policies belong to an organization
    and must be scoped by org_id in all queries.
    """

    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Receives owner-review notifications
    owner_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    timezone: Mapped[str] = mapped_column(
        String(50),
        default="America/Los_Angeles",
        server_default=text("'America/Los_Angeles'"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)


class ContractorProfile(Base):
    """Contractor account profile. is_available is the contractor's own toggle."""

    __tablename__ = "contractor_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, unique=True, nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_available: Mapped[bool] = mapped_column(
        default=True, server_default=text("true"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)


class ContractorOrgLink(Base):
    """
    Established working relationship between a contractor and an organization.

    Created lazily on first acceptance and refreshed on later ones.
    At most one row per (contractor, org).
    """

    __tablename__ = "contractor_org_links"
    __table_args__ = (
        UniqueConstraint("contractor_id", "org_id", name="uq_contractor_org_link"),
        Index("idx_contractor_org_links_org_status", "org_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    contractor_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default=OrgLinkStatus.ACTIVE.value,
        server_default=text(f"'{OrgLinkStatus.ACTIVE.value}'"),
        nullable=False,
    )
    last_job_at: Mapped[datetime | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    organization: Mapped["Organization"] = relationship()


class FavoriteContractor(Base):
    """A contractor trusted by an organization; gates favorites-only jobs."""

    __tablename__ = "favorite_contractors"
    __table_args__ = (
        UniqueConstraint("org_id", "contractor_id", name="uq_favorite_contractor"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    contractor_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
