"""
Tests for eligibility rules and marketplace listing.

Coverage:
- Each rule's reason string
- Rule order (first failure wins)
- Urgent jobs bypass the favorites gate
- Org-less jobs skip the org rules
- Marketplace ordering and filters
"""

from datetime import datetime, timedelta, timezone

from coordinator.db.enums import JobPriority, OrgLinkStatus
from coordinator.services import eligibility_service


# =============================================================================
# Individual Rules
# =============================================================================

class TestCanAccept:

    def test_eligible_contractor(self, db, test_org, linked_contractor, make_job):
        job = make_job(test_org)
        result = eligibility_service.can_accept(db, linked_contractor, job)
        assert result.ok
        assert result.reason is None

    def test_already_assigned(self, db, test_org, linked_contractor, make_job, make_contractor):
        job = make_job(test_org, assigned_contractor_id=make_contractor())
        result = eligibility_service.can_accept(db, linked_contractor, job)
        assert result == (False, "already assigned")

    def test_unavailable_contractor(self, db, test_org, make_contractor, link_contractor, make_job):
        contractor_id = make_contractor(is_available=False)
        link_contractor(contractor_id, test_org)
        result = eligibility_service.can_accept(db, contractor_id, make_job(test_org))
        assert result.reason == "contractor not available"

    def test_missing_profile_is_not_available(self, db, test_org, make_job):
        import uuid

        result = eligibility_service.can_accept(db, uuid.uuid4(), make_job(test_org))
        assert result.reason == "contractor not available"

    def test_no_org_link(self, db, test_org, contractor, make_job):
        result = eligibility_service.can_accept(db, contractor, make_job(test_org))
        assert result.reason == "no active relationship with this organization"

    def test_inactive_org_link(self, db, test_org, contractor, link_contractor, make_job):
        link_contractor(contractor, test_org, status=OrgLinkStatus.INACTIVE.value)
        result = eligibility_service.can_accept(db, contractor, make_job(test_org))
        assert result.reason == "no active relationship with this organization"

    def test_link_to_other_org_does_not_count(self, db, make_org, contractor, link_contractor, make_job):
        org_a = make_org("A")
        org_b = make_org("B")
        link_contractor(contractor, org_a)
        result = eligibility_service.can_accept(db, contractor, make_job(org_b))
        assert result.reason == "no active relationship with this organization"

    def test_restricted_to_favorites(self, db, test_org, linked_contractor, make_job):
        job = make_job(test_org, restrict_to_favorites=True)
        result = eligibility_service.can_accept(db, linked_contractor, job)
        assert result.reason == "restricted to favorites"

    def test_favorite_passes_restriction(self, db, test_org, linked_contractor, favorite_contractor, make_job):
        favorite_contractor(linked_contractor, test_org)
        job = make_job(test_org, restrict_to_favorites=True)
        assert eligibility_service.can_accept(db, linked_contractor, job).ok

    def test_first_failure_wins(self, db, test_org, make_contractor, make_job):
        """Unavailable and unlinked: availability is checked first."""
        contractor_id = make_contractor(is_available=False)
        job = make_job(test_org, restrict_to_favorites=True)
        result = eligibility_service.can_accept(db, contractor_id, job)
        assert result.reason == "contractor not available"

    def test_assigned_beats_every_other_rule(self, db, test_org, make_contractor, make_job):
        contractor_id = make_contractor(is_available=False)
        job = make_job(test_org, restrict_to_favorites=True, assigned_contractor_id=make_contractor())
        assert eligibility_service.can_accept(db, contractor_id, job).reason == "already assigned"


class TestUrgentBypass:

    def test_urgent_job_open_to_non_favorite(self, db, test_org, linked_contractor, make_job):
        job = make_job(test_org, restrict_to_favorites=True, is_urgent=True)
        assert eligibility_service.is_visible(db, linked_contractor, job)
        assert eligibility_service.can_accept(db, linked_contractor, job).ok

    def test_same_job_not_urgent_is_hidden(self, db, test_org, linked_contractor, make_job):
        job = make_job(test_org, restrict_to_favorites=True, is_urgent=False)
        assert not eligibility_service.is_visible(db, linked_contractor, job)
        assert eligibility_service.can_accept(db, linked_contractor, job).reason == "restricted to favorites"

    def test_urgency_does_not_bypass_org_link(self, db, test_org, contractor, make_job):
        job = make_job(test_org, restrict_to_favorites=True, is_urgent=True)
        assert not eligibility_service.is_visible(db, contractor, job)


class TestOrgLessJobs:

    def test_org_less_job_open_to_any_available_contractor(self, db, contractor, make_job):
        job = make_job(org=None, restrict_to_favorites=True)
        assert eligibility_service.is_visible(db, contractor, job)
        assert eligibility_service.can_accept(db, contractor, job).ok


class TestVisibility:

    def test_unavailable_contractor_can_still_browse(self, db, test_org, make_contractor, link_contractor, make_job):
        contractor_id = make_contractor(is_available=False)
        link_contractor(contractor_id, test_org)
        job = make_job(test_org)
        assert eligibility_service.is_visible(db, contractor_id, job)
        assert not eligibility_service.can_accept(db, contractor_id, job).ok

    def test_check_visibility_reports_reason(self, db, test_org, contractor, make_job):
        result = eligibility_service.check_visibility(db, contractor, make_job(test_org))
        assert result.reason == "no active relationship with this organization"


# =============================================================================
# Marketplace Listing
# =============================================================================

class TestMarketplaceListing:

    def test_orders_by_priority_then_newest(self, db, test_org, linked_contractor, make_job):
        now = datetime.now(timezone.utc)
        low = make_job(test_org, title="low", priority=JobPriority.LOW.value, posted_at=now)
        old_high = make_job(test_org, title="old high", priority=JobPriority.HIGH.value, posted_at=now - timedelta(days=2))
        new_high = make_job(test_org, title="new high", priority=JobPriority.HIGH.value, posted_at=now - timedelta(hours=1))
        urgent = make_job(test_org, title="urgent", priority=JobPriority.URGENT.value, posted_at=now - timedelta(days=5))

        jobs = eligibility_service.list_marketplace_jobs(db, linked_contractor)
        assert [j.id for j in jobs] == [urgent.id, new_high.id, old_high.id, low.id]

    def test_excludes_assigned_and_invisible(self, db, make_org, linked_contractor, test_org, make_job, make_contractor):
        visible = make_job(test_org)
        make_job(test_org, assigned_contractor_id=make_contractor())
        make_job(test_org, restrict_to_favorites=True)
        make_job(make_org("Unlinked"))

        jobs = eligibility_service.list_marketplace_jobs(db, linked_contractor)
        assert [j.id for j in jobs] == [visible.id]

    def test_filters(self, db, make_org, test_org, linked_contractor, link_contractor, make_job):
        other = make_org("Other")
        link_contractor(linked_contractor, other)
        urgent = make_job(test_org, is_urgent=True)
        make_job(test_org)
        elsewhere = make_job(other)

        assert [j.id for j in eligibility_service.list_marketplace_jobs(db, linked_contractor, is_urgent=True)] == [urgent.id]
        assert [j.id for j in eligibility_service.list_marketplace_jobs(db, linked_contractor, org_id=other.id)] == [elsewhere.id]
