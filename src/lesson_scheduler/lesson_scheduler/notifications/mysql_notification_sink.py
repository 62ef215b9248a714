from __future__ import annotations

import json

from ..core.enums import NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from ..hours.model import LowBalanceEvent
from .sink import NotificationSink


class MySQLNotificationSink(NotificationSink):
    """Persist the event as a pending notification row.

    A separate delivery worker (email, push) picks up PENDING rows.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def emit(self, event: LowBalanceEvent) -> None:
        remaining = float(event.remaining_hours)
        total = float(event.total_hours)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(student_id, type, title, message, payload, status)
                VALUES(%s,%s,%s,%s,%s,'PENDING')
                """,
                (
                    int(event.student_id),
                    NotificationType.LOW_HOURS.value,
                    "Hours package running low",
                    f"{remaining:.1f} of {total:.1f} hours remaining",
                    json.dumps(event.to_dict()),
                ),
            )
