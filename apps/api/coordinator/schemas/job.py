"""Marketplace job schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel


class MarketplaceJobRead(BaseModel):
    """A job as listed to a contractor."""
    id: UUID
    org_id: UUID | None
    title: str
    description: str | None
    category: str | None
    priority: str
    status: str
    is_urgent: bool
    restrict_to_favorites: bool
    estimated_cost: Decimal | None
    posted_at: datetime

    model_config = {"from_attributes": True}


class AcceptJobResponse(BaseModel):
    success: bool
    job_id: UUID
