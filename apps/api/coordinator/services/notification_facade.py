"""Notification facade for domain services.

Delivery (in-app, email, SMS) lives outside this service. Domain code calls
the functions below; they hand off to whichever Notifier is installed and
never raise, so a delivery outage cannot fail a booking.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import UUID

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Outbound notification dispatch, implemented by the host application."""

    def notify(self, user_id: UUID, message: str, metadata: dict[str, Any] | None = None) -> None:
        ...


class LoggingNotifier:
    """Default notifier: records the dispatch in the log only."""

    def notify(self, user_id: UUID, message: str, metadata: dict[str, Any] | None = None) -> None:
        logger.info(
            "Notification for user %s: %s (%s)",
            user_id,
            message,
            (metadata or {}).get("type", "generic"),
        )


_notifier: Notifier = LoggingNotifier()


def set_notifier(notifier: Notifier) -> Notifier:
    """Install a notifier; returns the previous one."""
    global _notifier
    previous = _notifier
    _notifier = notifier
    return previous


def get_notifier() -> Notifier:
    return _notifier


def notify(user_id: UUID | None, message: str, metadata: dict[str, Any] | None = None) -> bool:
    """
    Fire-and-forget dispatch.

    Returns False if there was nobody to notify or delivery failed.
    Failures are logged, never raised.
    """
    if user_id is None:
        return False
    try:
        _notifier.notify(user_id, message, metadata or {})
    except Exception:
        logger.exception(
            "Notifier failed for user %s (%s)",
            user_id,
            (metadata or {}).get("type", "generic"),
        )
        return False
    return True


# =============================================================================
# Domain notifications
# =============================================================================

def notify_proposal_submitted(
    reporter_user_id: UUID | None,
    job_id: UUID,
    job_title: str,
    proposal_id: UUID,
    slot_count: int,
) -> bool:
    """Tell the tenant a contractor proposed appointment options."""
    return notify(
        reporter_user_id,
        f"A contractor proposed {slot_count} time option(s) for your request: {job_title}",
        {
            "type": "proposal_submitted",
            "job_id": str(job_id),
            "proposal_id": str(proposal_id),
        },
    )


def notify_owner_review_required(
    owner_user_id: UUID | None,
    job_id: UUID,
    job_title: str,
    proposal_id: UUID,
    appointment_id: UUID,
    reason: str,
) -> bool:
    """Ask the owner to review an appointment the policy did not auto-approve."""
    return notify(
        owner_user_id,
        f"Appointment for '{job_title}' needs your approval",
        {
            "type": "appointment_review_required",
            "job_id": str(job_id),
            "proposal_id": str(proposal_id),
            "appointment_id": str(appointment_id),
            "reason": reason,
        },
    )
