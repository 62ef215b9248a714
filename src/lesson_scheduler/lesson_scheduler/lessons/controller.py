from __future__ import annotations

from typing import Any

from flask import Flask, request

from ..common.datetime_utils import parse_iso_date, parse_iso_datetime
from ..common.http import error_response, json_body, respond
from ..common.validators import optional_text, parse_bool, parse_weekdays, require_positive_int
from ..core.enums import LessonStatus, RecurrenceFrequency
from ..core.exceptions import ValidationError
from ..container import Container
from .model import LessonPatch, NewLesson, RecurrenceRule, TimeWindow


def _parse_new_lesson(body: dict[str, Any]) -> NewLesson:
    missing = [k for k in ("title", "startTime", "endTime", "teacherId", "classId") if not body.get(k)]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    return NewLesson(
        title=body["title"],
        start_time=parse_iso_datetime(body["startTime"]),
        end_time=parse_iso_datetime(body["endTime"]),
        teacher_id=require_positive_int(body["teacherId"], "teacherId"),
        class_id=require_positive_int(body["classId"], "classId"),
        description=optional_text(body.get("description")),
        room=optional_text(body.get("room")),
    )


def _parse_rule(raw: Any) -> RecurrenceRule:
    if not isinstance(raw, dict):
        raise ValidationError("recurrence is required")

    try:
        frequency = RecurrenceFrequency(str(raw.get("frequency", "")).lower())
    except ValueError:
        raise ValidationError(f"Unsupported frequency: {raw.get('frequency')!r}")

    interval = raw.get("interval")
    # "occurrences" is the legacy key still sent by older clients.
    max_occurrences = raw.get("maxOccurrences", raw.get("occurrences"))
    end_date = raw.get("endDate")

    return RecurrenceRule(
        frequency=frequency,
        interval=require_positive_int(interval, "interval") if interval is not None else 1,
        weekdays=parse_weekdays(raw.get("weekdays")),
        end_date=parse_iso_date(str(end_date)[:10]) if end_date else None,
        max_occurrences=require_positive_int(max_occurrences, "maxOccurrences") if max_occurrences is not None else None,
    )


def _parse_patch(raw: Any) -> LessonPatch:
    if not isinstance(raw, dict):
        raise ValidationError("updates must be an object")

    status = raw.get("status")
    if status is not None:
        try:
            status = LessonStatus(str(status).upper())
        except ValueError:
            raise ValidationError(f"Invalid lesson status: {status!r}")

    # A present key with null or blank text clears the field; an absent key leaves it.
    description = optional_text(raw.get("description"))
    room = optional_text(raw.get("room"))

    return LessonPatch(
        title=raw.get("title"),
        description=description,
        start_time=parse_iso_datetime(raw["startTime"]) if raw.get("startTime") else None,
        end_time=parse_iso_datetime(raw["endTime"]) if raw.get("endTime") else None,
        room=room,
        status=status,
        clear_description="description" in raw and description is None,
        clear_room="room" in raw and room is None,
    )


def _lesson_ids(body: dict[str, Any]) -> list:
    ids = body.get("lessonIds")
    if not isinstance(ids, list) or not ids:
        raise ValidationError("lessonIds must be a non-empty list")
    return ids


def register(app: Flask, container: Container) -> None:
    api = container.api

    @app.route("/api/lessons", methods=["POST"], endpoint="api_lessons_create")
    def create_lesson():
        try:
            lesson = _parse_new_lesson(json_body())
        except ValidationError as e:
            return error_response(e)
        return respond(api.create_lesson(lesson), status=201, render=lambda v: v.to_dict())

    @app.route("/api/lessons/recurring", methods=["POST"], endpoint="api_lessons_recurring")
    def create_recurring():
        try:
            body = json_body()
            lesson = _parse_new_lesson(body)
            rule = _parse_rule(body.get("recurrence"))
        except ValidationError as e:
            return error_response(e)

        def render(series):
            data = series.to_dict()
            data["count"] = len(series.occurrences)
            return data

        return respond(api.create_series(lesson, rule), status=201, render=render)

    @app.route("/api/lessons/check-conflicts", methods=["GET"], endpoint="api_lessons_check_conflicts")
    def check_conflicts():
        args = request.args
        try:
            if not (args.get("startTime") and args.get("endTime") and args.get("teacherId")):
                raise ValidationError("startTime, endTime and teacherId are required")
            window = TimeWindow(parse_iso_datetime(args["startTime"]), parse_iso_datetime(args["endTime"]))
            teacher_id = require_positive_int(args["teacherId"], "teacherId")
            exclude = args.get("excludeLessonId")
            exclude_id = require_positive_int(exclude, "excludeLessonId") if exclude else None
        except ValidationError as e:
            return error_response(e)

        result = api.check_conflicts(
            window, teacher_id=teacher_id, room=optional_text(args.get("room")), exclude_id=exclude_id
        )
        return respond(
            result,
            render=lambda conflicts: {
                "hasConflict": bool(conflicts),
                "conflicts": [c.to_dict() for c in conflicts],
            },
        )

    @app.route("/api/lessons/bulk", methods=["PATCH"], endpoint="api_lessons_bulk_update")
    def bulk_update():
        try:
            body = json_body()
            ids = _lesson_ids(body)
            patch = _parse_patch(body.get("updates"))
        except ValidationError as e:
            return error_response(e)
        return respond(
            api.bulk_update(ids, patch),
            render=lambda lessons: {"updated": len(lessons), "lessons": [lesson.to_dict() for lesson in lessons]},
        )

    @app.route("/api/lessons/bulk", methods=["DELETE"], endpoint="api_lessons_bulk_delete")
    def bulk_delete():
        try:
            ids = _lesson_ids(json_body())
        except ValidationError as e:
            return error_response(e)
        return respond(api.bulk_delete(ids), render=lambda n: {"deleted": n})

    @app.route("/api/lessons/<int:lesson_id>", methods=["GET"], endpoint="api_lessons_get")
    def get_lesson(lesson_id: int):
        return respond(api.get_lesson(lesson_id), render=lambda v: v.to_dict())

    @app.route("/api/lessons/<int:lesson_id>", methods=["PATCH"], endpoint="api_lessons_update")
    def update_lesson(lesson_id: int):
        try:
            patch = _parse_patch(json_body())
        except ValidationError as e:
            return error_response(e)
        return respond(api.update_occurrence(lesson_id, patch), render=lambda v: v.to_dict())

    @app.route("/api/lessons/<int:lesson_id>", methods=["DELETE"], endpoint="api_lessons_delete")
    def delete_lesson(lesson_id: int):
        return respond(api.delete_occurrence(lesson_id), render=lambda _: {"deleted": True, "id": lesson_id})

    @app.route("/api/lessons/series/<int:template_id>", methods=["GET"], endpoint="api_lessons_series")
    def get_series(template_id: int):
        return respond(api.list_series(template_id), render=lambda v: v.to_dict())

    @app.route("/api/lessons/series/<int:template_id>", methods=["DELETE"], endpoint="api_lessons_series_delete")
    def delete_series(template_id: int):
        cascade = bool(parse_bool(request.args.get("cascade")))
        return respond(
            api.delete_template(template_id, cascade=cascade),
            render=lambda n: {"deleted": True, "cascade": cascade, "occurrencesAffected": n},
        )

