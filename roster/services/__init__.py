"""Services running alongside the record store."""

from .notifier import NotificationScheduler, console_sink, format_reminder

__all__ = [
    "NotificationScheduler",
    "console_sink",
    "format_reminder",
]
