"""
Request/response helpers shared by the API blueprints.
"""
from __future__ import annotations

from typing import Any

from flask import jsonify, request

from app.teamdocs.constants import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from app.teamdocs.errors import ValidationError

_MISSING = object()


def request_params() -> dict[str, Any]:
    """JSON body, or form fields for multipart uploads."""
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        return body
    if request.form:
        return request.form.to_dict()
    return {}


def require_param(params: dict[str, Any], key: str) -> Any:
    value = params.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"{key} is required.")
    return value


def optional_bool(params: dict[str, Any], key: str) -> bool | None:
    if key not in params or params[key] is None:
        return None
    value = params[key]
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be a boolean.")
    return value


def pagination_params(params: dict[str, Any]) -> tuple[int, int]:
    try:
        offset = int(params.get("offset") or 0)
        limit = int(params.get("limit") or DEFAULT_PAGE_LIMIT)
    except (TypeError, ValueError) as e:
        raise ValidationError("offset and limit must be integers.") from e
    if offset < 0:
        raise ValidationError("offset must be >= 0.")
    if limit < 1 or limit > MAX_PAGE_LIMIT:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_LIMIT}.")
    return offset, limit


def pagination(offset: int, limit: int) -> dict[str, Any]:
    return {
        "offset": offset,
        "limit": limit,
        "nextPath": f"{request.path}?limit={limit}&offset={offset + limit}",
    }


def ok(data: Any = _MISSING, *, policies: list[dict] | None = None, pagination: dict | None = None, status: int = 200):
    payload: dict[str, Any] = {"ok": True, "status": status}
    if data is not _MISSING:
        payload["data"] = data
    if policies is not None:
        payload["policies"] = policies
    if pagination is not None:
        payload["pagination"] = pagination
    return jsonify(payload), status
