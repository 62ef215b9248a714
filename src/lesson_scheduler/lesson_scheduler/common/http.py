from __future__ import annotations

from typing import Any, Callable

from flask import jsonify, request

from ..core.exceptions import DomainError, ValidationError
from ..core.result import OperationResult

STATUS_BY_KIND = {
    "validation": 400,
    "enrollment": 400,
    "not_found": 404,
    "conflict": 409,
    "transient": 503,
    "internal": 500,
}


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def error_response(error: DomainError):
    return jsonify(error.to_dict()), STATUS_BY_KIND.get(error.kind, 500)


def respond(result: OperationResult, *, status: int = 200, render: Callable[[Any], Any] = lambda v: v):
    if not result.ok:
        return error_response(result.error)
    return jsonify(render(result.value)), status
