"""Duty roster: members, recurring activities, schedule generation and reminders.

Modules:
- config: load and validate configuration (YAML)
- domain: records, persistence table and the record store
- engine: date stepping, assignment policies and the schedule generator
- services: reminder scanning
- io: JSON snapshots and CSV import/export
- validator: post-generation checks and summaries
- context: application context wiring
- cli: command-line interface entrypoints
"""

__all__ = [
    "config",
    "domain",
    "engine",
    "services",
    "io",
    "validator",
    "context",
    "cli",
]
