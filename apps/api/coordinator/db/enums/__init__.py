"""Enum definitions for application constants."""

from coordinator.db.enums.jobs import JobPriority, JobStatus
from coordinator.db.enums.organizations import InvolvementMode, OrgLinkStatus, Role
from coordinator.db.enums.proposals import (
    DEFAULT_PROPOSAL_STATUS,
    AppointmentStatus,
    ProposalStatus,
    SelectionOutcome,
    SlotStatus,
)
from coordinator.db.enums.scheduling import ScheduledJobStatus

__all__ = [
    "AppointmentStatus",
    "DEFAULT_PROPOSAL_STATUS",
    "InvolvementMode",
    "JobPriority",
    "JobStatus",
    "OrgLinkStatus",
    "ProposalStatus",
    "Role",
    "ScheduledJobStatus",
    "SelectionOutcome",
    "SlotStatus",
]
