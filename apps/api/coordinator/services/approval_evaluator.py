"""Approval policy evaluator - pure auto-approve / review decision.

Callers fetch the organization's policies and pass them in; nothing here
touches the database. Rules are tried in priority order and the first match
decides:

1. Emergency override (urgent job + auto_approve_emergencies)
2. Vacation relax-mode (start date inside the vacation window)
3. Trusted contractor
4. Cost above require_approval_over → review
5. Cost below auto_approve_cost_limit → approve
6. Time windows (weekday / weekend / evening, local org time)
7. Default → review

involvement_mode is not an input: it only seeds the fields above.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, NamedTuple, Protocol
from uuid import UUID

from coordinator.core.config import settings
from coordinator.core.constants import (
    REASON_COST_OVER_REVIEW,
    REASON_EMERGENCY_OVERRIDE,
    REASON_EVENING_WINDOW,
    REASON_NO_ACTIVE_POLICY,
    REASON_NO_RULE_MATCHED,
    REASON_TRUSTED_CONTRACTOR,
    REASON_UNDER_COST_LIMIT,
    REASON_VACATION_RELAX_MODE,
    REASON_WEEKDAY_WINDOW,
    REASON_WEEKEND_WINDOW,
)
from coordinator.utils.dates import ensure_aware, get_timezone

logger = logging.getLogger(__name__)


class PolicyLike(Protocol):
    """Fields of ApprovalPolicy the evaluator reads."""
    is_active: bool
    trusted_contractor_ids: list[str]
    auto_approve_weekdays: bool
    auto_approve_weekends: bool
    auto_approve_evenings: bool
    block_vacation_dates: bool
    vacation_start_date: date | None
    vacation_end_date: date | None
    auto_approve_cost_limit: Decimal | None
    require_approval_over: Decimal | None
    auto_approve_emergencies: bool


@dataclass(frozen=True)
class AppointmentCandidate:
    """An appointment about to be booked, as seen by the policy."""
    contractor_id: UUID
    proposed_start: datetime
    estimated_cost: Decimal | None = None
    is_urgent: bool = False


class ApprovalDecision(NamedTuple):
    """Verdict with a short, stable reason."""
    auto_approve: bool
    reason: str


def _approve(reason: str) -> ApprovalDecision:
    return ApprovalDecision(auto_approve=True, reason=reason)


def _review(reason: str) -> ApprovalDecision:
    return ApprovalDecision(auto_approve=False, reason=reason)


# =============================================================================
# Rule predicates
# =============================================================================

def _in_vacation(policy: PolicyLike, local_day: date) -> bool:
    if not policy.block_vacation_dates:
        return False
    if policy.vacation_start_date is None or policy.vacation_end_date is None:
        return False
    return policy.vacation_start_date <= local_day <= policy.vacation_end_date


def _is_trusted(policy: PolicyLike, contractor_id: UUID) -> bool:
    trusted = policy.trusted_contractor_ids or []
    return str(contractor_id) in {str(c) for c in trusted}


def _cost_over_review(policy: PolicyLike, cost: Decimal | None) -> bool:
    if policy.require_approval_over is None or cost is None:
        return False
    return Decimal(cost) > Decimal(policy.require_approval_over)


def _cost_under_limit(policy: PolicyLike, cost: Decimal | None) -> bool:
    if policy.auto_approve_cost_limit is None or cost is None:
        return False
    return Decimal(cost) < Decimal(policy.auto_approve_cost_limit)


def classify_time(local_start: datetime) -> tuple[bool, bool]:
    """Return (is_weekend, is_evening) for a local start time."""
    is_weekend = local_start.weekday() >= 5
    is_evening = local_start.hour >= settings.EVENING_START_HOUR
    return is_weekend, is_evening


def _time_window(policy: PolicyLike, local_start: datetime) -> ApprovalDecision | None:
    """Approve when every flag for the start's classification is on."""
    is_weekend, is_evening = classify_time(local_start)
    day_allowed = policy.auto_approve_weekends if is_weekend else policy.auto_approve_weekdays
    if not day_allowed:
        return None
    if is_evening:
        return _approve(REASON_EVENING_WINDOW) if policy.auto_approve_evenings else None
    return _approve(REASON_WEEKEND_WINDOW if is_weekend else REASON_WEEKDAY_WINDOW)


# =============================================================================
# Public API
# =============================================================================

def evaluate(
    policy: PolicyLike | None,
    appointment: AppointmentCandidate,
    timezone_name: str | None = None,
    *,
    cost_review_overrides_trusted: bool = False,
) -> ApprovalDecision:
    """
    Decide whether an appointment can be booked without owner review.

    timezone_name is the organization's zone; weekday, evening and vacation
    checks use local time there.

    By default a trusted contractor auto-approves even above
    require_approval_over. Pass cost_review_overrides_trusted=True to let the
    review threshold win instead.
    """
    if policy is None or not policy.is_active:
        return _review(REASON_NO_ACTIVE_POLICY)

    tz = get_timezone(timezone_name)
    local_start = ensure_aware(appointment.proposed_start).astimezone(tz)

    if appointment.is_urgent and policy.auto_approve_emergencies:
        return _approve(REASON_EMERGENCY_OVERRIDE)

    if _in_vacation(policy, local_start.date()):
        return _approve(REASON_VACATION_RELAX_MODE)

    over_review = _cost_over_review(policy, appointment.estimated_cost)
    if over_review and cost_review_overrides_trusted:
        return _review(REASON_COST_OVER_REVIEW)

    if _is_trusted(policy, appointment.contractor_id):
        return _approve(REASON_TRUSTED_CONTRACTOR)

    if over_review:
        return _review(REASON_COST_OVER_REVIEW)

    if _cost_under_limit(policy, appointment.estimated_cost):
        return _approve(REASON_UNDER_COST_LIMIT)

    window = _time_window(policy, local_start)
    if window is not None:
        return window

    return _review(REASON_NO_RULE_MATCHED)


def _updated_timestamp(policy: PolicyLike) -> float:
    updated_at = getattr(policy, "updated_at", None)
    return ensure_aware(updated_at).timestamp() if updated_at else 0.0


def select_active_policy(policies: Iterable[PolicyLike]) -> PolicyLike | None:
    """
    Pick the policy to evaluate from an organization's policies.

    Writes keep at most one active policy per org. Legacy rows may hold
    several; the most recently updated one wins.
    """
    active = [p for p in policies if p.is_active]
    if not active:
        return None
    if len(active) > 1:
        logger.warning("Organization has %d active approval policies", len(active))
        active.sort(key=_updated_timestamp, reverse=True)
    return active[0]


def evaluate_for_org(
    policies: Iterable[PolicyLike],
    appointment: AppointmentCandidate,
    timezone_name: str | None = None,
    *,
    cost_review_overrides_trusted: bool = False,
) -> ApprovalDecision:
    """Evaluate against an organization's policy set; none active fails closed."""
    return evaluate(
        select_active_policy(policies),
        appointment,
        timezone_name,
        cost_review_overrides_trusted=cost_review_overrides_trusted,
    )
