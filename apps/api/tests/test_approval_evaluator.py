"""
Tests for the approval policy evaluator.

The evaluator is pure, so policies here are plain objects, no database.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from coordinator.services.approval_evaluator import (
    AppointmentCandidate,
    classify_time,
    evaluate,
    evaluate_for_org,
    select_active_policy,
)

LA = ZoneInfo("America/Los_Angeles")
TZ = "America/Los_Angeles"

# 2024-06-05 is a Wednesday, 2024-06-08 a Saturday
WEDNESDAY_10AM = datetime(2024, 6, 5, 10, 0, tzinfo=LA)
WEDNESDAY_6PM = datetime(2024, 6, 5, 18, 0, tzinfo=LA)
SATURDAY_10AM = datetime(2024, 6, 8, 10, 0, tzinfo=LA)
SATURDAY_7PM = datetime(2024, 6, 8, 19, 0, tzinfo=LA)


@dataclass
class Policy:
    is_active: bool = True
    trusted_contractor_ids: list = field(default_factory=list)
    auto_approve_weekdays: bool = False
    auto_approve_weekends: bool = False
    auto_approve_evenings: bool = False
    block_vacation_dates: bool = False
    vacation_start_date: date | None = None
    vacation_end_date: date | None = None
    auto_approve_cost_limit: Decimal | None = None
    require_approval_over: Decimal | None = None
    auto_approve_emergencies: bool = False
    updated_at: datetime | None = None


def candidate(start=WEDNESDAY_10AM, cost=None, urgent=False, contractor_id=None):
    return AppointmentCandidate(
        contractor_id=contractor_id or uuid.uuid4(),
        proposed_start=start,
        estimated_cost=Decimal(cost) if cost is not None else None,
        is_urgent=urgent,
    )


# =============================================================================
# Policy Priority
# =============================================================================

class TestPriority:

    def test_emergency_beats_disabled_weekdays(self):
        policy = Policy(auto_approve_emergencies=True, auto_approve_weekdays=False)

        urgent = evaluate(policy, candidate(urgent=True), TZ)
        routine = evaluate(policy, candidate(urgent=False), TZ)

        assert urgent == (True, "emergency override")
        assert routine.auto_approve is False

    def test_emergency_flag_off_falls_through(self):
        policy = Policy(auto_approve_emergencies=False)
        assert evaluate(policy, candidate(urgent=True), TZ).reason == "no auto-approval rule matched"

    def test_vacation_relax_mode(self):
        policy = Policy(
            block_vacation_dates=True,
            vacation_start_date=date(2024, 6, 1),
            vacation_end_date=date(2024, 6, 5),
            require_approval_over=Decimal("100"),
        )
        decision = evaluate(policy, candidate(cost="5000"), TZ)
        assert decision == (True, "vacation relax-mode")

    def test_vacation_uses_local_date(self):
        """23:30 local on the last vacation day is 06:30 UTC the next day."""
        policy = Policy(
            block_vacation_dates=True,
            vacation_start_date=date(2024, 6, 1),
            vacation_end_date=date(2024, 6, 5),
        )
        late = datetime(2024, 6, 5, 23, 30, tzinfo=LA).astimezone(timezone.utc)
        assert evaluate(policy, candidate(start=late), TZ).reason == "vacation relax-mode"

    def test_vacation_ignored_when_not_blocking(self):
        policy = Policy(
            block_vacation_dates=False,
            vacation_start_date=date(2024, 6, 1),
            vacation_end_date=date(2024, 6, 30),
        )
        assert evaluate(policy, candidate(), TZ).auto_approve is False

    def test_trusted_contractor(self):
        contractor_id = uuid.uuid4()
        policy = Policy(trusted_contractor_ids=[str(contractor_id)])
        decision = evaluate(policy, candidate(contractor_id=contractor_id), TZ)
        assert decision == (True, "trusted contractor")

    def test_trusted_contractor_beats_cost_review_by_default(self):
        contractor_id = uuid.uuid4()
        policy = Policy(
            trusted_contractor_ids=[str(contractor_id)],
            require_approval_over=Decimal("1000"),
        )
        decision = evaluate(policy, candidate(cost="1500", contractor_id=contractor_id), TZ)
        assert decision == (True, "trusted contractor")

    def test_cost_review_can_override_trusted(self):
        contractor_id = uuid.uuid4()
        policy = Policy(
            trusted_contractor_ids=[str(contractor_id)],
            require_approval_over=Decimal("1000"),
        )
        decision = evaluate(
            policy,
            candidate(cost="1500", contractor_id=contractor_id),
            TZ,
            cost_review_overrides_trusted=True,
        )
        assert decision == (False, "cost exceeds review threshold")

    def test_under_cost_limit(self):
        policy = Policy(auto_approve_cost_limit=Decimal("500"))
        assert evaluate(policy, candidate(cost="499.99"), TZ) == (True, "under auto-approve cost limit")

    def test_cost_limit_is_strict(self):
        policy = Policy(auto_approve_cost_limit=Decimal("500"))
        assert evaluate(policy, candidate(cost="500"), TZ).auto_approve is False

    def test_unknown_cost_skips_cost_rules(self):
        policy = Policy(auto_approve_cost_limit=Decimal("500"), require_approval_over=Decimal("1000"))
        assert evaluate(policy, candidate(cost=None), TZ).reason == "no auto-approval rule matched"


class TestCostScenario:

    @pytest.fixture
    def policy(self):
        return Policy(
            auto_approve_cost_limit=Decimal("500"),
            require_approval_over=Decimal("1000"),
            auto_approve_weekdays=True,
        )

    def test_between_thresholds_uses_time_window(self, policy):
        assert evaluate(policy, candidate(cost="750"), TZ) == (True, "auto-approved weekday window")

    def test_over_review_threshold_requires_review(self, policy):
        assert evaluate(policy, candidate(cost="1200"), TZ) == (False, "cost exceeds review threshold")


# =============================================================================
# Time Windows
# =============================================================================

class TestTimeWindows:

    def test_classify_time(self):
        assert classify_time(WEDNESDAY_10AM) == (False, False)
        assert classify_time(WEDNESDAY_6PM) == (False, True)
        assert classify_time(SATURDAY_10AM) == (True, False)
        assert classify_time(SATURDAY_7PM) == (True, True)

    def test_weekday_window(self):
        assert evaluate(Policy(auto_approve_weekdays=True), candidate(), TZ).reason == "auto-approved weekday window"

    def test_weekend_window(self):
        policy = Policy(auto_approve_weekends=True)
        assert evaluate(policy, candidate(start=SATURDAY_10AM), TZ).reason == "auto-approved weekend window"
        assert evaluate(policy, candidate(start=WEDNESDAY_10AM), TZ).auto_approve is False

    def test_evening_needs_day_flag_too(self):
        evenings_only = Policy(auto_approve_evenings=True)
        assert evaluate(evenings_only, candidate(start=WEDNESDAY_6PM), TZ).auto_approve is False

        both = Policy(auto_approve_evenings=True, auto_approve_weekdays=True)
        assert evaluate(both, candidate(start=WEDNESDAY_6PM), TZ).reason == "auto-approved evening window"

    def test_weekday_flag_alone_does_not_cover_evenings(self):
        policy = Policy(auto_approve_weekdays=True)
        assert evaluate(policy, candidate(start=WEDNESDAY_6PM), TZ).auto_approve is False

    def test_window_uses_org_timezone(self):
        """Wednesday 10:00 in Los Angeles is still Wednesday 19:00 in Paris."""
        policy = Policy(auto_approve_weekdays=True)
        start = WEDNESDAY_10AM.astimezone(timezone.utc)
        assert evaluate(policy, candidate(start=start), TZ).auto_approve is True
        assert evaluate(policy, candidate(start=start), "Europe/Paris").auto_approve is False


# =============================================================================
# Missing / Multiple Policies
# =============================================================================

class TestPolicySelection:

    def test_no_policy_fails_closed(self):
        assert evaluate(None, candidate(urgent=True), TZ) == (False, "no active approval policy")

    def test_inactive_policy_fails_closed(self):
        policy = Policy(is_active=False, auto_approve_emergencies=True)
        assert evaluate(policy, candidate(urgent=True), TZ) == (False, "no active approval policy")

    def test_evaluate_for_org_with_no_active(self):
        assert evaluate_for_org([Policy(is_active=False)], candidate(), TZ).reason == "no active approval policy"

    def test_most_recently_updated_active_policy_wins(self, caplog):
        older = Policy(auto_approve_weekdays=False, updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        newer = Policy(auto_approve_weekdays=True, updated_at=datetime(2024, 5, 1, tzinfo=timezone.utc))

        assert select_active_policy([older, newer]) is newer
        assert "2 active approval policies" in caplog.text

    def test_inactive_policies_ignored(self):
        active = Policy()
        assert select_active_policy([Policy(is_active=False), active]) is active
