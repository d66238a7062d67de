"""Configuration loading (YAML; JSON files are accepted as YAML)."""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

from roster.domain.db import DEFAULT_DB_URL


@dataclass
class RosterConfig:
    db_url: str = DEFAULT_DB_URL
    notification_interval_hours: float = 24.0
    upcoming_limit: int = 10
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if float(self.notification_interval_hours) <= 0:
            raise ValueError("notification_interval_hours must be positive")
        if int(self.upcoming_limit) < 1:
            raise ValueError("upcoming_limit must be at least 1")


def load_config(path: str | Path | None = None) -> RosterConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Config file path; None returns the defaults

    Returns:
        RosterConfig with file values over defaults

    Raises:
        ValueError: If the file is not a mapping or holds unknown/invalid keys
    """
    if path is None:
        return RosterConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    known = {f.name for f in fields(RosterConfig)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(sorted(unknown))}")
    return RosterConfig(**raw)
