"""Tests for the fire-and-forget notification facade."""

import uuid

from coordinator.services import notification_facade


def test_notify_dispatches(notifier):
    user_id = uuid.uuid4()
    assert notification_facade.notify(user_id, "hello", {"type": "greeting"}) is True
    assert notifier.sent == [(user_id, "hello", {"type": "greeting"})]


def test_notify_without_recipient(notifier):
    assert notification_facade.notify(None, "nobody home") is False
    assert notifier.sent == []


def test_failure_is_logged_not_raised(failing_notifier, caplog):
    assert notification_facade.notify(uuid.uuid4(), "boom", {"type": "proposal_submitted"}) is False
    assert "Notifier failed" in caplog.text


def test_set_notifier_returns_previous(notifier):
    replacement = notification_facade.LoggingNotifier()
    previous = notification_facade.set_notifier(replacement)
    try:
        assert previous is notifier
        assert notification_facade.get_notifier() is replacement
    finally:
        notification_facade.set_notifier(previous)


def test_owner_review_metadata(notifier):
    owner = uuid.uuid4()
    ids = [uuid.uuid4() for _ in range(3)]
    notification_facade.notify_owner_review_required(owner, ids[0], "Leak", ids[1], ids[2], "cost exceeds review threshold")

    user_id, message, metadata = notifier.sent[0]
    assert user_id == owner
    assert "Leak" in message
    assert metadata == {
        "type": "appointment_review_required",
        "job_id": str(ids[0]),
        "proposal_id": str(ids[1]),
        "appointment_id": str(ids[2]),
        "reason": "cost exceeds review threshold",
    }
