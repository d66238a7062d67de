"""JSON snapshot files for backup and transfer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

from roster.domain.repositories import RecordStore
from roster.errors import ImportParseFailure


def export_snapshot_file(store: RecordStore, path: str | Path) -> Path:
    """
    Write every collection to a JSON snapshot file.

    Args:
        store: Record store to export
        path: Destination file

    Returns:
        The path written
    """
    path = Path(path)
    snapshot = store.export_snapshot()
    path.write_text(json.dumps(snapshot, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"[INFO] Exported snapshot to {path}")
    return path


def import_snapshot_file(store: RecordStore, path: str | Path) -> List[str]:
    """
    Load a JSON snapshot file into the store.

    Only the collections present in the file are replaced.

    Raises:
        ImportParseFailure: If the file is not valid JSON or a record is malformed
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ImportParseFailure(f"Cannot parse {path}: {e}") from e
    return store.import_snapshot(data)
