"""Approval policy schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class ApprovalPolicyWrite(BaseModel):
    """
    Create or replace the organization's active policy.

    Window and emergency flags left out take the involvement-mode preset.
    """
    name: str = Field(..., min_length=1, max_length=255)
    involvement_mode: Literal["hands-off", "balanced", "hands-on"] = "balanced"
    trusted_contractor_ids: list[UUID] = []
    auto_approve_weekdays: bool | None = None
    auto_approve_weekends: bool | None = None
    auto_approve_evenings: bool | None = None
    auto_approve_emergencies: bool | None = None
    block_vacation_dates: bool = False
    vacation_start_date: date | None = None
    vacation_end_date: date | None = None
    auto_approve_cost_limit: Decimal | None = Field(None, ge=0)
    require_approval_over: Decimal | None = Field(None, ge=0)


class ApprovalPolicyRead(BaseModel):
    id: UUID
    org_id: UUID
    name: str
    is_active: bool
    involvement_mode: str
    trusted_contractor_ids: list[str]
    auto_approve_weekdays: bool
    auto_approve_weekends: bool
    auto_approve_evenings: bool
    auto_approve_emergencies: bool
    block_vacation_dates: bool
    vacation_start_date: date | None
    vacation_end_date: date | None
    auto_approve_cost_limit: Decimal | None
    require_approval_over: Decimal | None
    updated_at: datetime

    model_config = {"from_attributes": True}
