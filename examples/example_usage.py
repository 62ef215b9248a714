"""Example: drive the scheduling facade directly, without Flask.

Assumes schema.sql and seed.sql have been applied (scripts/init_db.py,
scripts/seed_db.py).
"""

import importlib
from datetime import date, datetime

from config import get_settings_module

from src.lesson_scheduler.lesson_scheduler.container import build_container
from src.lesson_scheduler.lesson_scheduler.core.enums import AttendanceStatus, RecurrenceFrequency
from src.lesson_scheduler.lesson_scheduler.core.policy import SchedulingPolicy
from src.lesson_scheduler.lesson_scheduler.lessons.model import NewLesson, RecurrenceRule


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, policy=SchedulingPolicy.from_settings(settings))
    api = container.api

    result = api.create_series(
        NewLesson(
            title="English B1",
            start_time=datetime(2024, 1, 1, 18, 0),
            end_time=datetime(2024, 1, 1, 19, 30),
            teacher_id=1,
            class_id=1,
            room="A1",
        ),
        RecurrenceRule(frequency=RecurrenceFrequency.WEEKLY, end_date=date(2024, 3, 31)),
    )
    if not result.ok:
        print("Series rejected:", result.error.to_dict())
        return

    series = result.value
    print(f"Created template {series.template.lesson_id} with {len(series.occurrences)} lessons")

    first = series.occurrences[0]
    recorded = api.record_attendance(first.lesson_id, 2, AttendanceStatus.PRESENT)
    print(recorded.value.to_dict() if recorded.ok else recorded.error.to_dict())

    low = api.list_low_balance()
    print("Low balance packages:", [p.to_dict() for p in low.value or []])


if __name__ == "__main__":
    main()
