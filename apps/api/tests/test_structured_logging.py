"""Tests for structured logging helpers."""

import uuid

from coordinator.core.structured_logging import build_log_context


def test_build_log_context_stringifies_ids():
    contractor_id = uuid.uuid4()
    job_id = uuid.uuid4()
    context = build_log_context(
        contractor_id=contractor_id,
        job_id=job_id,
        request_id="req-1",
        route="/marketplace/jobs",
    )

    assert context == {
        "contractor_id": str(contractor_id),
        "job_id": str(job_id),
        "request_id": "req-1",
        "route": "/marketplace/jobs",
    }


def test_build_log_context_ignores_empty_fields():
    context = build_log_context(
        org_id=None,
        proposal_id="",
        request_id="req-1",
    )

    assert context == {"request_id": "req-1"}
