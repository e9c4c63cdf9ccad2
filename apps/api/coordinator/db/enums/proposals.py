"""Appointment proposal and appointment enums."""

from enum import Enum


class ProposalStatus(str, Enum):
    """
    Appointment proposal status.

    Flow: pending → accepted
              ↘ declined
              ↘ countered (tenant asked for other terms; re-enters pending)
              ↘ expired (past expires_at, applied lazily)
    """

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    COUNTERED = "countered"
    EXPIRED = "expired"


class SlotStatus(str, Enum):
    """Per-slot status within a proposal."""

    PENDING = "Pending"
    SELECTED = "Selected"
    DECLINED = "Declined"


class AppointmentStatus(str, Enum):
    """Appointment lifecycle status."""

    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "No Show"


class SelectionOutcome(str, Enum):
    """Result of a tenant action on a proposal (select, decline, counter)."""

    SELECTED = "selected"
    DECLINED = "declined"
    COUNTERED = "countered"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"
    NOT_PENDING = "not_pending"


# Default proposal status
DEFAULT_PROPOSAL_STATUS = ProposalStatus.PENDING
