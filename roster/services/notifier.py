"""Reminder scanning: notify members a configured number of days before their duty."""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import timedelta
from typing import Callable, List, Optional

from roster.domain.models import ScheduleEntry
from roster.domain.repositories import RecordStore

NotifySink = Callable[[ScheduleEntry], None]

STATE_STOPPED = "stopped"
STATE_RUNNING = "running"

DEFAULT_INTERVAL_HOURS = 24.0


def format_reminder(entry: ScheduleEntry) -> str:
    return f"{entry.member_name} is on duty for {entry.activity_name} on {entry.date.isoformat()}"


def console_sink(entry: ScheduleEntry) -> None:
    """Default sink: print the reminder."""
    print(f"[NOTIFY] {format_reminder(entry)}")


class NotificationScheduler:
    """
    Periodically fires reminders for schedule entries whose date is exactly
    ``notificationDays`` after today.

    Each entry is notified at most once; its ``notified`` flag is set after
    the sink is called. Matching is by exact date, so an entry whose day was
    missed (scheduler not running) is never notified.
    """

    def __init__(
        self,
        store: RecordStore,
        sink: NotifySink = console_sink,
        interval_hours: float = DEFAULT_INTERVAL_HOURS,
    ):
        """
        Initialize the scheduler in the stopped state.

        Args:
            store: Record store holding schedules and settings
            sink: Callable receiving each due entry (best-effort delivery)
            interval_hours: Time between periodic scans
        """
        if interval_hours <= 0:
            raise ValueError("interval_hours must be positive")
        self.store = store
        self.sink = sink
        self.interval_seconds = interval_hours * 3600
        self._state_lock = threading.Lock()
        self._scan_lock = threading.RLock()
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> str:
        return STATE_RUNNING if self._thread is not None else STATE_STOPPED

    @property
    def running(self) -> bool:
        return self.state == STATE_RUNNING

    def start(self) -> None:
        """Scan once now, then every interval. No-op if already running."""
        with self._state_lock:
            if self._thread is not None:
                return
            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run, args=(stop_event,), name="roster-notifier", daemon=True
            )
            self._stop_event = stop_event
            self._thread = thread
        try:
            self.scan()
        except Exception:
            # A failed first scan leaves the scheduler stopped so start() can be retried
            with self._state_lock:
                if self._thread is thread:
                    self._thread = None
                    self._stop_event = None
            raise
        thread.start()
        print(f"[INFO] Notification scheduler started (every {self.interval_seconds / 3600:g}h)")

    def stop(self) -> None:
        """
        Cancel periodic scans. No-op if already stopped.

        Waits for a scan in progress; no scan starts after this returns.
        """
        with self._state_lock:
            thread, stop_event = self._thread, self._stop_event
            if thread is None:
                return
            self._thread = None
            self._stop_event = None
            stop_event.set()
        # Any in-flight scan finishes before we return; later ones see the event
        with self._scan_lock:
            pass
        if thread is not threading.current_thread() and thread.ident is not None:
            thread.join()
        print("[INFO] Notification scheduler stopped")

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_seconds):
            try:
                self._scan(stop_event)
            except Exception as e:
                print(f"[ERROR] Reminder scan failed: {e}")

    def scan(self) -> List[ScheduleEntry]:
        """Run one reminder scan now. Returns the entries that were notified."""
        return self._scan(None)

    def _scan(self, stop_event: Optional[threading.Event]) -> List[ScheduleEntry]:
        with self._scan_lock:
            if stop_event is not None and stop_event.is_set():
                return []
            with self.store.lock:
                return self._scan_locked()

    def _scan_locked(self) -> List[ScheduleEntry]:
        settings = self.store.settings
        if not settings.notification_enabled:
            return []

        target = self.store.today() + timedelta(days=settings.notification_days)
        schedules = list(self.store.schedules)
        notified: List[ScheduleEntry] = []

        for i, entry in enumerate(schedules):
            if entry.date != target or entry.notified:
                continue
            try:
                self.sink(entry)
            except Exception as e:
                print(f"[WARN] Reminder delivery failed for {entry.member_name} on {entry.date}: {e}")
            schedules[i] = replace(entry, notified=True)
            notified.append(schedules[i])

        if notified:
            # Flags reach memory only once the database write succeeds
            self.store.replace_all("schedules", schedules)
            print(f"[OK] Sent {len(notified)} reminders for {target}")
        return notified
