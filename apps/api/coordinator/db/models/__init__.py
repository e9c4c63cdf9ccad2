"""SQLAlchemy ORM models."""

from coordinator.db.models.organizations import (
    ContractorOrgLink,
    ContractorProfile,
    FavoriteContractor,
    Organization,
)
from coordinator.db.models.jobs import Job
from coordinator.db.models.policies import ApprovalPolicy
from coordinator.db.models.proposals import Appointment, AppointmentProposal, ProposalSlot
from coordinator.db.models.scheduling import (
    ContractorAvailability,
    ContractorBlackout,
    ScheduledJob,
    Team,
)

__all__ = [
    "Appointment",
    "AppointmentProposal",
    "ApprovalPolicy",
    "ContractorAvailability",
    "ContractorBlackout",
    "ContractorOrgLink",
    "ContractorProfile",
    "FavoriteContractor",
    "Job",
    "Organization",
    "ProposalSlot",
    "ScheduledJob",
    "Team",
]
