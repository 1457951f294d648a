"""Tests for the notification log"""
from bannerforge_api.core.notifications import NotificationLog


def test_identical_notification_within_a_second_is_dropped():
    log = NotificationLog()
    log.push("Success", "Banner saved successfully!")
    log.push("Success", "Banner saved successfully!")
    assert len(log.pending) == 1


def test_drain_empties_log():
    log = NotificationLog()
    log.push("Success", "one")
    log.error("Error", "two")

    drained = log.drain()

    assert [n.variant for n in drained] == ["default", "destructive"]
    assert log.drain() == []
