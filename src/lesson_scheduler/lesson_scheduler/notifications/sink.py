from __future__ import annotations

import logging
from typing import Protocol

from ..hours.model import LowBalanceEvent

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def emit(self, event: LowBalanceEvent) -> None:
        raise NotImplementedError


class LoggingNotificationSink(NotificationSink):
    """Default sink: writes the event to the application log."""

    def emit(self, event: LowBalanceEvent) -> None:
        logger.warning(
            "Low hours balance for student %s course %s: %s/%s remaining",
            event.student_id,
            event.course_id,
            event.remaining_hours,
            event.total_hours,
            extra={"event": "low_hours", **event.to_dict()},
        )
