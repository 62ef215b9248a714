from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .api import SchedulingApi
from .attendance.factory import HoursStrategyFactory
from .attendance.service import AttendanceLedger
from .common.datetime_utils import now_local
from .core.policy import SchedulingPolicy
from .database.connection import DBConfig, DatabaseConnection
from .database.mysql_store import MySQLStore
from .database.store import Store
from .hours.monitor import LowBalanceMonitor
from .hours.service import HoursPackageService
from .lessons.conflicts import ConflictDetector
from .lessons.recurrence import RecurrenceExpander
from .lessons.service import LessonService
from .notifications.mysql_notification_sink import MySQLNotificationSink
from .notifications.sink import LoggingNotificationSink, NotificationSink


@dataclass(frozen=True)
class Container:
    store: Store
    sink: NotificationSink
    policy: SchedulingPolicy

    lesson_service: LessonService
    attendance_ledger: AttendanceLedger
    hours_package_service: HoursPackageService

    api: SchedulingApi


def wire(
    store: Store,
    sink: NotificationSink,
    policy: Optional[SchedulingPolicy] = None,
    *,
    clock: Callable[[], datetime] = now_local,
    sleep: Optional[Callable[[float], None]] = None,
) -> Container:
    """Assemble services over any ``Store``; tests pass an in-memory one."""

    policy = policy or SchedulingPolicy()
    monitor = LowBalanceMonitor(threshold=policy.low_balance_threshold)

    lesson_service = LessonService(
        store,
        expander=RecurrenceExpander(cap=policy.max_occurrences),
        detector=ConflictDetector(),
        enforce_room_conflicts=policy.enforce_room_conflicts,
    )
    attendance_ledger = AttendanceLedger(
        store,
        sink,
        monitor=monitor,
        strategy_factory=HoursStrategyFactory(late_fraction=policy.late_hours_fraction),
        clock=clock,
    )
    hours_package_service = HoursPackageService(store, monitor=monitor, clock=clock)

    api = SchedulingApi(lesson_service, attendance_ledger, hours_package_service, policy=policy, sleep=sleep)

    return Container(
        store=store,
        sink=sink,
        policy=policy,
        lesson_service=lesson_service,
        attendance_ledger=attendance_ledger,
        hours_package_service=hours_package_service,
        api=api,
    )


def build_container(
    *,
    db_config: dict,
    policy: Optional[SchedulingPolicy] = None,
    notification_sink: str = "log",
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    sink: NotificationSink
    if notification_sink == "db":
        sink = MySQLNotificationSink(conn)
    else:
        sink = LoggingNotificationSink()

    return wire(MySQLStore(conn), sink, policy)
