from __future__ import annotations

from flask import Flask

from ..common.http import error_response, json_body, respond
from ..common.validators import optional_text, parse_decimal, require_positive_int
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    api = container.api

    @app.route("/api/lessons/<int:lesson_id>/attendance", methods=["PUT"], endpoint="api_lesson_attendance_put")
    def record_attendance(lesson_id: int):
        try:
            body = json_body()
            student_id = require_positive_int(body.get("studentId"), "studentId")
            try:
                status = AttendanceStatus(str(body.get("status", "")).upper())
            except ValueError:
                raise ValidationError(f"Invalid attendance status: {body.get('status')!r}")
            hours = parse_decimal(body.get("hoursAttended"), "hoursAttended", allow_none=True)
        except ValidationError as e:
            return error_response(e)

        result = api.record_attendance(
            lesson_id, student_id, status, hours, notes=optional_text(body.get("notes"))
        )
        return respond(result, render=lambda v: v.to_dict())

    @app.route("/api/lessons/<int:lesson_id>/attendance", methods=["GET"], endpoint="api_lesson_attendance_list")
    def list_attendance(lesson_id: int):
        return respond(
            api.list_attendance(lesson_id),
            render=lambda records: {"lessonId": lesson_id, "attendance": [r.to_dict() for r in records]},
        )
