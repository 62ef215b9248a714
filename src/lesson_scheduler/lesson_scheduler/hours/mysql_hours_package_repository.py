from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..database.mysql_base import as_decimal, fetchall, fetchone
from .model import HoursPackage
from .repository import HoursPackageRepository

_COLUMNS = """
    package_id, student_id, course_id, total_hours, remaining_hours,
    purchase_date, expiry_date, is_active, price, notes
"""


def _row_to_package(r: dict) -> HoursPackage:
    return HoursPackage(
        package_id=int(r["package_id"]),
        student_id=int(r["student_id"]),
        course_id=int(r["course_id"]),
        total_hours=as_decimal(r["total_hours"]),
        remaining_hours=as_decimal(r["remaining_hours"]),
        purchase_date=r["purchase_date"],
        expiry_date=r.get("expiry_date"),
        is_active=bool(r["is_active"]),
        price=as_decimal(r.get("price")),
        notes=r.get("notes"),
    )


class MySQLHoursPackageRepository(HoursPackageRepository):
    def __init__(self, cur):
        self._cur = cur

    def create(
        self,
        *,
        student_id: int,
        course_id: int,
        total_hours: Decimal,
        purchase_date: datetime,
        expiry_date: Optional[datetime] = None,
        price: Optional[Decimal] = None,
        notes: Optional[str] = None,
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO hours_packages(
                student_id, course_id, total_hours, remaining_hours,
                purchase_date, expiry_date, is_active, price, notes
            )
            VALUES(%s,%s,%s,%s,%s,%s,1,%s,%s)
            """,
            (int(student_id), int(course_id), total_hours, total_hours, purchase_date, expiry_date, price, notes),
        )
        return int(self._cur.lastrowid)

    def get_by_id(self, package_id: int) -> Optional[HoursPackage]:
        self._cur.execute(f"SELECT {_COLUMNS} FROM hours_packages WHERE package_id=%s", (int(package_id),))
        r = fetchone(self._cur)
        return _row_to_package(r) if r else None

    def list_packages(
        self,
        *,
        student_id: Optional[int] = None,
        course_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> Sequence[HoursPackage]:
        clauses = ["1=1"]
        params: list[object] = []

        if student_id is not None:
            clauses.append("student_id=%s")
            params.append(int(student_id))
        if course_id is not None:
            clauses.append("course_id=%s")
            params.append(int(course_id))
        if is_active is not None:
            clauses.append("is_active=%s")
            params.append(1 if is_active else 0)

        where = " AND ".join(clauses)
        self._cur.execute(
            f"SELECT {_COLUMNS} FROM hours_packages WHERE {where} ORDER BY purchase_date DESC, package_id DESC",
            tuple(params),
        )
        return [_row_to_package(r) for r in fetchall(self._cur)]

    def lock_oldest_usable(self, *, student_id: int, course_id: int, now: datetime) -> Optional[HoursPackage]:
        self._cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM hours_packages
            WHERE student_id=%s AND course_id=%s AND is_active=1
              AND (expiry_date IS NULL OR expiry_date > %s)
            ORDER BY purchase_date ASC, package_id ASC
            LIMIT 1
            FOR UPDATE
            """,
            (int(student_id), int(course_id), now),
        )
        r = fetchone(self._cur)
        return _row_to_package(r) if r else None

    def update_balance(self, *, package_id: int, remaining_hours: Decimal, is_active: bool) -> bool:
        self._cur.execute(
            "UPDATE hours_packages SET remaining_hours=%s, is_active=%s WHERE package_id=%s",
            (remaining_hours, 1 if is_active else 0, int(package_id)),
        )
        return self._cur.rowcount > 0

    def delete(self, package_id: int) -> bool:
        self._cur.execute("DELETE FROM hours_packages WHERE package_id=%s", (int(package_id),))
        return self._cur.rowcount > 0
