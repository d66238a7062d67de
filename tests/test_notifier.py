"""Tests for NotificationScheduler."""

import datetime as dt
import threading
import time

import pytest

from roster.domain.models import ScheduleEntry, SettingsPatch
from roster.domain.repositories import RecordStore
from roster.services.notifier import NotificationScheduler, format_reminder

TODAY = dt.date(2025, 3, 10)


def _entry(day, member="Ava"):
    return ScheduleEntry(
        activity_id="a1",
        activity_name="Dishes",
        member_id=member.lower(),
        member_name=member,
        date=day,
    )


@pytest.fixture
def sent():
    return []


@pytest.fixture
def notifier(store, sent):
    scheduler = NotificationScheduler(store, sink=sent.append)
    yield scheduler
    scheduler.stop()


@pytest.fixture
def due_store(store):
    """Store with two entries due in three days and two that are not."""
    store.replace_all(
        "schedules",
        [
            _entry(TODAY + dt.timedelta(days=3), "Ava"),
            _entry(TODAY + dt.timedelta(days=2), "Ben"),
            _entry(TODAY + dt.timedelta(days=3), "Cleo"),
            _entry(TODAY + dt.timedelta(days=4), "Dan"),
        ],
    )
    return store


def test_scan_notifies_entries_at_lead_time(due_store, notifier, sent):
    """Test that only entries dated exactly today + notificationDays fire."""
    notified = notifier.scan()

    assert [e.member_name for e in sent] == ["Ava", "Cleo"]
    assert [e.member_name for e in notified] == ["Ava", "Cleo"]
    assert all(e.notified for e in notified)
    assert [s.notified for s in due_store.schedules] == [True, False, True, False]


def test_scan_is_idempotent(due_store, notifier, sent):
    """Test that a second scan on the same day fires nothing new."""
    notifier.scan()
    assert notifier.scan() == []
    assert len(sent) == 2


def test_notified_flag_is_persisted(due_store, notifier):
    """Test that flags survive reopening the store."""
    notifier.scan()
    reopened = RecordStore(due_store.session_factory)
    assert [s.notified for s in reopened.schedules] == [True, False, True, False]


def test_scan_respects_notification_days(due_store, notifier, sent):
    """Test that changing the lead time changes the target date."""
    due_store.update_settings(SettingsPatch(notification_days=4))
    notifier.scan()
    assert [e.member_name for e in sent] == ["Dan"]


def test_scan_disabled(due_store, notifier, sent):
    """Test that disabled notifications make the scan a no-op."""
    due_store.update_settings(SettingsPatch(notification_enabled=False))
    assert notifier.scan() == []
    assert sent == []
    assert not any(s.notified for s in due_store.schedules)


def test_missed_day_is_never_notified(due_store, notifier, sent):
    """Test that matching is by exact date, not 'on or before'."""
    due_store.today = lambda: TODAY + dt.timedelta(days=1)
    notifier.scan()
    # Target is now the 14th; the entries for the 13th are skipped for good
    assert [e.member_name for e in sent] == ["Dan"]


def test_sink_failure_is_not_surfaced(due_store):
    """Test that a failing sink does not abort the scan."""
    def broken_sink(entry):
        raise ConnectionError("mail server down")

    notifier = NotificationScheduler(due_store, sink=broken_sink)
    notified = notifier.scan()

    assert len(notified) == 2
    assert [s.notified for s in due_store.schedules] == [True, False, True, False]


def test_start_scans_immediately_and_is_idempotent(due_store, notifier, sent):
    """Test the start/stop lifecycle."""
    assert notifier.state == "stopped"

    notifier.start()
    assert notifier.state == "running"
    assert len(sent) == 2

    notifier.start()
    assert len(sent) == 2

    notifier.stop()
    assert notifier.state == "stopped"
    notifier.stop()
    assert notifier.state == "stopped"


def _fail_writes(store, monkeypatch):
    def failing_write(collections):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(store, "_write", failing_write)


def test_failed_write_leaves_flags_unset(due_store, notifier, sent, monkeypatch):
    """Test that memory keeps matching the database when the flag write fails."""
    _fail_writes(due_store, monkeypatch)

    with pytest.raises(RuntimeError):
        notifier.scan()

    assert not any(s.notified for s in due_store.schedules)
    reopened = RecordStore(due_store.session_factory)
    assert not any(s.notified for s in reopened.schedules)


def test_failed_first_scan_leaves_scheduler_stopped(due_store, notifier, sent, monkeypatch):
    """Test that start() can be retried after its first scan raised."""
    _fail_writes(due_store, monkeypatch)

    with pytest.raises(RuntimeError):
        notifier.start()
    assert notifier.state == "stopped"

    monkeypatch.undo()
    notifier.start()

    assert notifier.state == "running"
    assert notifier._thread.is_alive()
    assert [s.notified for s in due_store.schedules] == [True, False, True, False]


def test_interval_must_be_positive(store):
    with pytest.raises(ValueError):
        NotificationScheduler(store, interval_hours=0)


@pytest.mark.slow
def test_periodic_scan_and_stop(store):
    """Test that scans repeat on the interval and stop for good after stop()."""
    fired = threading.Event()
    sent = []

    def sink(entry):
        sent.append(entry)
        fired.set()

    # 0.2 seconds between scans
    notifier = NotificationScheduler(store, sink=sink, interval_hours=0.2 / 3600)
    notifier.start()
    assert sent == []

    store.replace_all("schedules", [_entry(TODAY + dt.timedelta(days=3), "Ava")])
    assert fired.wait(timeout=5)

    notifier.stop()
    store.replace_all("schedules", [_entry(TODAY + dt.timedelta(days=3), "Ben")])
    time.sleep(0.8)

    assert [e.member_name for e in sent] == ["Ava"]


def test_format_reminder():
    """Test the reminder text."""
    entry = _entry(dt.date(2025, 3, 13), "Ava")
    assert format_reminder(entry) == "Ava is on duty for Dishes on 2025-03-13"
