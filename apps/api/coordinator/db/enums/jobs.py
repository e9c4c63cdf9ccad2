"""Maintenance job enums."""

from enum import Enum


class JobStatus(str, Enum):
    """
    Maintenance job lifecycle status.

    Flow: New → In Review → Scheduled → In Progress → On Hold → Resolved → Closed

    Other flows (case management) also write this column; never assume this
    service is the only writer.
    """

    NEW = "New"
    IN_REVIEW = "In Review"
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    ON_HOLD = "On Hold"
    RESOLVED = "Resolved"
    CLOSED = "Closed"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a known lifecycle status."""
        return value in cls._value2member_map_

    @property
    def rank(self) -> int:
        """Position in the lifecycle flow."""
        return _STATUS_RANK[self]


class JobPriority(str, Enum):
    """Job priority, lowest to highest."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    JobPriority.LOW: 0,
    JobPriority.MEDIUM: 1,
    JobPriority.HIGH: 2,
    JobPriority.URGENT: 3,
}


_STATUS_RANK = {status: rank for rank, status in enumerate(JobStatus)}
