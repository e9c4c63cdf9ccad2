"""Calendar scheduling enums."""

from enum import Enum


class ScheduledJobStatus(str, Enum):
    """
    Calendar entry lifecycle status.

    Flow: Unscheduled → Scheduled → Needs Review → Confirmed → In Progress
              → Completed
              ↘ Cancelled

    Tenant confirmation is tracked separately (tenant_confirmed).
    """

    UNSCHEDULED = "Unscheduled"
    SCHEDULED = "Scheduled"
    NEEDS_REVIEW = "Needs Review"
    CONFIRMED = "Confirmed"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
