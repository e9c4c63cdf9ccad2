"""Tests for approval policy persistence and involvement presets."""

from datetime import date
from decimal import Decimal

import pytest

from coordinator.services import approval_policy_service


class TestPresets:

    def test_balanced(self):
        assert approval_policy_service.policy_defaults("balanced") == {
            "auto_approve_weekdays": True,
            "auto_approve_weekends": False,
            "auto_approve_evenings": False,
            "auto_approve_emergencies": True,
        }

    def test_hands_off_approves_everything(self):
        assert all(approval_policy_service.policy_defaults("hands-off").values())

    def test_hands_on_approves_nothing(self):
        assert not any(approval_policy_service.policy_defaults("hands-on").values())

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown involvement mode"):
            approval_policy_service.policy_defaults("micromanager")


class TestSavePolicy:

    def test_preset_seeds_flags(self, db, test_org):
        policy = approval_policy_service.save_policy(db, test_org.id, "Default", involvement_mode="hands-off")
        assert policy.is_active
        assert policy.auto_approve_weekends is True
        assert policy.involvement_mode == "hands-off"

    def test_explicit_flags_beat_preset(self, db, test_org):
        policy = approval_policy_service.save_policy(
            db,
            test_org.id,
            "Custom",
            involvement_mode="hands-on",
            auto_approve_weekdays=True,
        )
        assert policy.auto_approve_weekdays is True
        assert policy.auto_approve_weekends is False

    def test_single_active_policy(self, db, test_org):
        first = approval_policy_service.save_policy(db, test_org.id, "First")
        second = approval_policy_service.save_policy(db, test_org.id, "Second")

        db.refresh(first)
        assert first.is_active is False
        assert second.is_active is True
        assert approval_policy_service.get_active_policy(db, test_org.id).id == second.id
        assert len(approval_policy_service.list_policies(db, test_org.id)) == 2

    def test_reactivating_existing_policy(self, db, test_org):
        first = approval_policy_service.save_policy(db, test_org.id, "First")
        approval_policy_service.save_policy(db, test_org.id, "Second")

        approval_policy_service.save_policy(db, test_org.id, "First again", policy_id=first.id)
        active = approval_policy_service.get_active_policy(db, test_org.id)
        assert active.id == first.id
        assert active.name == "First again"

    def test_other_orgs_untouched(self, db, make_org):
        org_a, org_b = make_org("A"), make_org("B")
        policy_a = approval_policy_service.save_policy(db, org_a.id, "A policy")
        approval_policy_service.save_policy(db, org_b.id, "B policy")
        db.refresh(policy_a)
        assert policy_a.is_active is True

    def test_trusted_ids_stored_as_strings(self, db, test_org, contractor):
        policy = approval_policy_service.save_policy(
            db, test_org.id, "Trusted", trusted_contractor_ids=[contractor]
        )
        assert policy.trusted_contractor_ids == [str(contractor)]

    def test_cost_and_vacation_fields(self, db, test_org):
        policy = approval_policy_service.save_policy(
            db,
            test_org.id,
            "Vacation",
            block_vacation_dates=True,
            vacation_start_date=date(2024, 7, 1),
            vacation_end_date=date(2024, 7, 14),
            auto_approve_cost_limit=Decimal("250"),
            require_approval_over=Decimal("900"),
        )
        assert policy.vacation_end_date == date(2024, 7, 14)
        assert policy.require_approval_over == Decimal("900")

    def test_inverted_vacation_range(self, db, test_org):
        with pytest.raises(ValueError, match="vacation_end_date"):
            approval_policy_service.save_policy(
                db,
                test_org.id,
                "Bad",
                vacation_start_date=date(2024, 7, 14),
                vacation_end_date=date(2024, 7, 1),
            )

    def test_unknown_policy_id(self, db, test_org):
        import uuid

        with pytest.raises(ValueError, match="not found"):
            approval_policy_service.save_policy(db, test_org.id, "Ghost", policy_id=uuid.uuid4())
