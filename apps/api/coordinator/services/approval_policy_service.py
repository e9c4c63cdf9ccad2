"""Approval policy service - loading and saving organization policies.

Handles:
- Involvement-mode presets (seed defaults only)
- Single active policy per organization, enforced on write
"""

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from coordinator.db.enums import InvolvementMode
from coordinator.db.models import ApprovalPolicy

logger = logging.getLogger(__name__)


_PRESETS: dict[InvolvementMode, dict[str, bool]] = {
    InvolvementMode.HANDS_OFF: {
        "auto_approve_weekdays": True,
        "auto_approve_weekends": True,
        "auto_approve_evenings": True,
        "auto_approve_emergencies": True,
    },
    InvolvementMode.BALANCED: {
        "auto_approve_weekdays": True,
        "auto_approve_weekends": False,
        "auto_approve_evenings": False,
        "auto_approve_emergencies": True,
    },
    InvolvementMode.HANDS_ON: {
        "auto_approve_weekdays": False,
        "auto_approve_weekends": False,
        "auto_approve_evenings": False,
        "auto_approve_emergencies": False,
    },
}


def policy_defaults(mode: str) -> dict[str, bool]:
    """Default window/emergency flags for an involvement mode."""
    try:
        return dict(_PRESETS[InvolvementMode(mode)])
    except ValueError:
        raise ValueError(f"Unknown involvement mode: {mode}") from None


def list_policies(db: Session, org_id: UUID) -> list[ApprovalPolicy]:
    """All policies for an organization, most recently updated first."""
    return list(
        db.execute(
            select(ApprovalPolicy)
            .where(ApprovalPolicy.org_id == org_id)
            .order_by(ApprovalPolicy.updated_at.desc())
        ).scalars()
    )


def get_active_policy(db: Session, org_id: UUID) -> ApprovalPolicy | None:
    """The organization's active policy, if any."""
    return db.execute(
        select(ApprovalPolicy)
        .where(ApprovalPolicy.org_id == org_id, ApprovalPolicy.is_active.is_(True))
        .order_by(ApprovalPolicy.updated_at.desc())
        .limit(1)
    ).scalar_one_or_none()


def save_policy(
    db: Session,
    org_id: UUID,
    name: str,
    involvement_mode: str = InvolvementMode.BALANCED.value,
    policy_id: UUID | None = None,
    is_active: bool = True,
    trusted_contractor_ids: list[UUID | str] | None = None,
    auto_approve_weekdays: bool | None = None,
    auto_approve_weekends: bool | None = None,
    auto_approve_evenings: bool | None = None,
    auto_approve_emergencies: bool | None = None,
    block_vacation_dates: bool = False,
    vacation_start_date: date | None = None,
    vacation_end_date: date | None = None,
    auto_approve_cost_limit: Decimal | None = None,
    require_approval_over: Decimal | None = None,
) -> ApprovalPolicy:
    """
    Create or update a policy.

    Flags left as None take the involvement-mode preset. Saving an active
    policy deactivates every other policy of the organization.
    """
    if vacation_start_date and vacation_end_date and vacation_end_date < vacation_start_date:
        raise ValueError("vacation_end_date must not be before vacation_start_date")

    flags = policy_defaults(involvement_mode)
    explicit = {
        "auto_approve_weekdays": auto_approve_weekdays,
        "auto_approve_weekends": auto_approve_weekends,
        "auto_approve_evenings": auto_approve_evenings,
        "auto_approve_emergencies": auto_approve_emergencies,
    }
    flags.update({key: value for key, value in explicit.items() if value is not None})

    policy = None
    if policy_id is not None:
        policy = db.execute(
            select(ApprovalPolicy).where(
                ApprovalPolicy.id == policy_id,
                ApprovalPolicy.org_id == org_id,
            )
        ).scalar_one_or_none()
        if policy is None:
            raise ValueError("Approval policy not found")

    if is_active:
        deactivate = update(ApprovalPolicy).where(
            ApprovalPolicy.org_id == org_id,
            ApprovalPolicy.is_active.is_(True),
        )
        if policy is not None:
            deactivate = deactivate.where(ApprovalPolicy.id != policy.id)
        db.execute(
            deactivate.values(is_active=False).execution_options(synchronize_session="fetch")
        )
        db.flush()

    if policy is None:
        policy = ApprovalPolicy(org_id=org_id)
        db.add(policy)

    policy.name = name
    policy.involvement_mode = InvolvementMode(involvement_mode).value
    policy.is_active = is_active
    policy.trusted_contractor_ids = [str(c) for c in (trusted_contractor_ids or [])]
    policy.block_vacation_dates = block_vacation_dates
    policy.vacation_start_date = vacation_start_date
    policy.vacation_end_date = vacation_end_date
    policy.auto_approve_cost_limit = auto_approve_cost_limit
    policy.require_approval_over = require_approval_over
    for key, value in flags.items():
        setattr(policy, key, value)

    db.commit()
    db.refresh(policy)
    logger.info("Saved approval policy %s for org %s", policy.id, org_id)
    return policy
