"""Application context wiring the store, generator and notifier together."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from roster.config import RosterConfig
from roster.domain.repositories import RecordStore
from roster.engine.generator import ScheduleGenerator
from roster.services.notifier import NotificationScheduler, NotifySink, console_sink


@dataclass
class AppContext:
    """One instance per process, handed to whichever layer needs it."""

    config: RosterConfig
    store: RecordStore
    generator: ScheduleGenerator
    notifier: NotificationScheduler

    @classmethod
    def create(
        cls,
        config: Optional[RosterConfig] = None,
        sink: NotifySink = console_sink,
        today: Callable[[], date] = date.today,
    ) -> "AppContext":
        config = config or RosterConfig()
        store = RecordStore.from_url(config.db_url, today=today)
        rng = random.Random(config.random_seed)
        return cls(
            config=config,
            store=store,
            generator=ScheduleGenerator(store, rng),
            notifier=NotificationScheduler(store, sink, config.notification_interval_hours),
        )

    def close(self) -> None:
        self.notifier.stop()
