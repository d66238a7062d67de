"""I/O utilities: JSON snapshots and CSV import/export."""

from .export_csv import export_members_csv, export_schedule_csv, schedule_frame
from .import_csv import import_member_lines, import_members_csv, parse_member_lines
from .snapshot import export_snapshot_file, import_snapshot_file

__all__ = [
    "export_members_csv",
    "export_schedule_csv",
    "schedule_frame",
    "import_member_lines",
    "import_members_csv",
    "parse_member_lines",
    "export_snapshot_file",
    "import_snapshot_file",
]
