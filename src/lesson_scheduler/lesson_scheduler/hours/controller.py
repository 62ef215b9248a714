from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import error_response, json_body, respond
from ..common.validators import parse_bool, parse_decimal, require_positive_int
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    api = container.api

    def _optional_id(value, field_name: str):
        return require_positive_int(value, field_name) if value else None

    @app.route("/api/hours-packages", methods=["POST"], endpoint="api_hours_packages_create")
    def create_package():
        try:
            body = json_body()
            expiry = body.get("expiryDate")
            fields = dict(
                student_id=require_positive_int(body.get("studentId"), "studentId"),
                course_id=require_positive_int(body.get("courseId"), "courseId"),
                total_hours=parse_decimal(body.get("totalHours"), "totalHours"),
                expiry_date=parse_iso_datetime(expiry) if expiry else None,
                price=parse_decimal(body.get("price"), "price", allow_none=True),
                notes=body.get("notes"),
            )
        except ValidationError as e:
            return error_response(e)
        return respond(api.create_package(**fields), status=201, render=lambda v: v.to_dict())

    @app.route("/api/hours-packages", methods=["GET"], endpoint="api_hours_packages_list")
    def list_packages():
        args = request.args
        try:
            filters = dict(
                student_id=_optional_id(args.get("studentId"), "studentId"),
                course_id=_optional_id(args.get("courseId"), "courseId"),
                is_active=parse_bool(args.get("isActive")),
            )
        except ValidationError as e:
            return error_response(e)
        return respond(api.list_packages(**filters), render=lambda items: {"packages": [p.to_dict() for p in items]})

    @app.route("/api/hours-packages/low-balance", methods=["GET"], endpoint="api_hours_packages_low_balance")
    def low_balance():
        return respond(api.list_low_balance(), render=lambda items: {"packages": [p.to_dict() for p in items]})

    @app.route("/api/hours-packages/<int:package_id>", methods=["GET"], endpoint="api_hours_packages_get")
    def get_package(package_id: int):
        return respond(api.get_package(package_id), render=lambda v: v.to_dict())

    @app.route("/api/hours-packages/<int:package_id>", methods=["DELETE"], endpoint="api_hours_packages_delete")
    def delete_package(package_id: int):
        return respond(api.delete_package(package_id), render=lambda _: {"deleted": True, "id": package_id})
