"""Structured logging helpers (PII-safe)."""

from typing import Any
from uuid import UUID


def build_log_context(
    *,
    contractor_id: UUID | str | None = None,
    org_id: UUID | str | None = None,
    job_id: UUID | str | None = None,
    proposal_id: UUID | str | None = None,
    request_id: str | None = None,
    route: str | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict.

    Only identifiers are included; names, addresses and notes never are.
    """
    context: dict[str, Any] = {}
    if contractor_id:
        context["contractor_id"] = str(contractor_id)
    if org_id:
        context["org_id"] = str(org_id)
    if job_id:
        context["job_id"] = str(job_id)
    if proposal_id:
        context["proposal_id"] = str(proposal_id)
    if request_id:
        context["request_id"] = request_id
    if route:
        context["route"] = route
    return context
